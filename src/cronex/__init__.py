"""cronex - cron expression parsing and next-occurrence calculation.

Features:
    - Standard 5-field cron (minute, hour, day of month, month, day of week)
    - Optional free text after the schedule (kept as context)
    - Lazy, strictly ascending enumeration of occurrences
    - Exact handling of leap years, month lengths and weekday filters

Syntax Reference:
    Field         Values   Atoms
    ──────────────────────────────────────────────
    Minute        0-59     *  */n  a  a-b  a/n  a-b/n
    Hour          0-23     (same)
    Day of Month  1-31     (same)
    Month         1-12     (same)
    Day of Week   0-6      (same, 0 = Sunday)

    Atoms are combined into lists with ",".

Usage:
    >>> from cronex import parse
    >>>
    >>> spec = parse("*/15 9-17 * * 1-5 sync.sh")
    >>> spec.next_from(datetime(2024, 1, 15, 9, 7))
    datetime.datetime(2024, 1, 15, 9, 15)
    >>> for occurrence in spec.enumerate_from(datetime(2024, 1, 15)):
    ...     ...
"""

from cronex.config import ConfigError, IteratorConfig, load_config
from cronex.errors import (
    CronError,
    CronFormatError,
    CronParseError,
    CronRangeError,
    CronSyntaxError,
    InvalidSpecificationError,
    UnsatisfiableSpecError,
)
from cronex.fields import (
    FIELD_DOMAINS,
    FieldDomain,
    FieldSpec,
    FieldType,
    FreqAtom,
    enumerate_values,
    parse_atom,
    parse_field,
)
from cronex.iterator import CronIterator, CronSpecIterator
from cronex.rotor import CounterRotor, MaskRotor, Rotor
from cronex.spec import (
    CronSpec,
    CronSpecParser,
    is_valid_expression,
    parse,
    validate_expression,
)

__version__ = "0.1.0"

__all__ = [
    # Core
    "CronSpec",
    "CronSpecParser",
    "parse",
    # Fields
    "FieldType",
    "FieldDomain",
    "FIELD_DOMAINS",
    "FreqAtom",
    "FieldSpec",
    "parse_atom",
    "parse_field",
    "enumerate_values",
    # Engine
    "CronSpecIterator",
    "CronIterator",
    "Rotor",
    "MaskRotor",
    "CounterRotor",
    # Configuration
    "IteratorConfig",
    "ConfigError",
    "load_config",
    # Errors
    "CronError",
    "CronParseError",
    "CronSyntaxError",
    "CronRangeError",
    "CronFormatError",
    "InvalidSpecificationError",
    "UnsatisfiableSpecError",
    # Validation
    "validate_expression",
    "is_valid_expression",
]
