"""Tests for field domains, frequency atoms and field list parsing."""

import pytest

from cronex import (
    FIELD_DOMAINS,
    CronParseError,
    CronRangeError,
    CronSyntaxError,
    FieldDomain,
    FieldSpec,
    FieldType,
    FreqAtom,
    InvalidSpecificationError,
    enumerate_values,
    parse_atom,
    parse_field,
)


EVERYTHING = FieldDomain(0, 2**31 - 1)
ONE_TO_FIVE = FieldDomain(1, 5)
ZERO_TO_TEN = FieldDomain(0, 10)


# =============================================================================
# FieldDomain Tests
# =============================================================================


class TestFieldDomain:
    """Tests for field domains."""

    def test_fixed_domains(self):
        """Test the five fixed cron domains."""
        assert FIELD_DOMAINS[FieldType.MINUTE] == FieldDomain(0, 59)
        assert FIELD_DOMAINS[FieldType.HOUR] == FieldDomain(0, 23)
        assert FIELD_DOMAINS[FieldType.DAY_OF_MONTH] == FieldDomain(1, 31)
        assert FIELD_DOMAINS[FieldType.MONTH] == FieldDomain(1, 12)
        assert FIELD_DOMAINS[FieldType.DAY_OF_WEEK] == FieldDomain(0, 6)

    def test_field_type_domain(self):
        """Test domain lookup from field type."""
        assert FieldType.HOUR.domain is FIELD_DOMAINS[FieldType.HOUR]
        assert FieldType.DAY_OF_MONTH.label == "day-of-month"

    def test_contains_is_inclusive(self):
        """Test both bounds are inclusive."""
        assert ONE_TO_FIVE.contains(1)
        assert ONE_TO_FIVE.contains(5)
        assert not ONE_TO_FIVE.contains(0)
        assert not ONE_TO_FIVE.contains(6)
        assert 3 in ONE_TO_FIVE

    def test_str(self):
        """Test string rendering."""
        assert str(ZERO_TO_TEN) == "[0,10]"

    def test_immutable(self):
        """Test domains cannot be modified."""
        with pytest.raises(AttributeError):
            ZERO_TO_TEN.min_value = 1


# =============================================================================
# Atom Parsing Tests
# =============================================================================


class TestParseAtomErrors:
    """Tests for atom parsing failures."""

    def test_none_is_rejected(self):
        """Test parsing None fails with TypeError."""
        with pytest.raises(TypeError):
            parse_atom(None, EVERYTHING)

    def test_syntax_errors(self):
        """Test malformed atoms fail with syntax error."""
        for text in ["", "garbage", "7a", "a7", "3-8-10", "3-8/5/5", "-3/5", "3-/5", "3/-5", "**", "1 2"]:
            with pytest.raises(CronSyntaxError):
                parse_atom(text, EVERYTHING)

    def test_range_errors(self):
        """Test well-formed atoms outside the domain fail with range error."""
        for text in ["0-3", "3-6", "5-1", "6", "0/2"]:
            with pytest.raises(CronRangeError):
                parse_atom(text, ONE_TO_FIVE)

    def test_zero_step_is_range_error(self):
        """Test a zero step is rejected."""
        for text in ["*/0", "3/0", "1-5/0"]:
            with pytest.raises(CronRangeError):
                parse_atom(text, ZERO_TO_TEN)

    def test_errors_are_value_errors(self):
        """Test parse errors can be caught as ValueError."""
        with pytest.raises(ValueError):
            parse_atom("garbage", ZERO_TO_TEN)
        with pytest.raises(CronParseError):
            parse_atom("11", ZERO_TO_TEN)

    def test_error_keeps_text(self):
        """Test the offending text is attached to the error."""
        with pytest.raises(CronSyntaxError) as exc:
            parse_atom("7a", ZERO_TO_TEN)
        assert exc.value.expression == "7a"


class TestParseAtom:
    """Tests for atom canonicalization."""

    def test_canonical_triples(self):
        """Test every shape reduces to min-max/step."""
        cases = {
            "*": (0, 10, 1),
            "*/2": (0, 10, 2),
            "3": (3, 3, 1),
            "3/2": (3, 10, 2),
            "3-9": (3, 9, 1),
            "3-9/3": (3, 9, 3),
        }
        for text, expected in cases.items():
            atom = parse_atom(text, ZERO_TO_TEN)
            assert (atom.min_value, atom.max_value, atom.step) == expected, text
            assert atom.domain == ZERO_TO_TEN

    def test_every_expression_is_a_range(self):
        """Test shorthand and explicit range forms are equal."""
        pairs = [
            ("*", "0-10/1"),
            ("*/2", "0-10/2"),
            ("3", "3-3/1"),
            ("3/2", "3-10/2"),
            ("3-9", "3-9/1"),
        ]
        for short, explicit in pairs:
            assert parse_atom(short, ZERO_TO_TEN) == parse_atom(explicit, ZERO_TO_TEN)

    def test_surrounding_whitespace(self):
        """Test whitespace around an atom is ignored."""
        assert parse_atom(" 3-9/3\t", ZERO_TO_TEN) == FreqAtom(3, 9, 3, ZERO_TO_TEN)

    def test_enumerated_values(self):
        """Test values produced by each shape."""
        cases = {
            "*": [0, 1, 2, 3, 4, 5, 6, 7, 8, 9, 10],
            "*/2": [0, 2, 4, 6, 8, 10],
            "3": [3],
            "3/2": [3, 5, 7, 9],
            "3-9": [3, 4, 5, 6, 7, 8, 9],
            "3-9/3": [3, 6, 9],
        }
        for text, expected in cases.items():
            assert list(parse_atom(text, ZERO_TO_TEN).enumerate()) == expected, text

    def test_lower_bound_is_inclusive(self):
        """Test the first value is the lower bound."""
        for text in ["7-9/1", "7-7", "7"]:
            assert next(parse_atom(text, ZERO_TO_TEN).enumerate()) == 7

    def test_upper_bound_is_inclusive(self):
        """Test the upper bound is produced when reachable."""
        for text in ["3-7/1", "2-7/5", "7-7", "7"]:
            assert list(parse_atom(text, ZERO_TO_TEN).enumerate())[-1] == 7

    def test_large_step_is_allowed(self):
        """Test steps larger than the domain produce only the lower bound."""
        atom = parse_atom("3/1337", ZERO_TO_TEN)
        assert list(atom.enumerate()) == [3]

    def test_str(self):
        """Test canonical rendering."""
        assert str(parse_atom("*/5", ZERO_TO_TEN)) == "0-10/5"


# =============================================================================
# FreqAtom Property Tests
# =============================================================================


def _all_atoms(domain):
    for low in range(domain.min_value, domain.max_value + 1):
        for high in range(low, domain.max_value + 1):
            for step in range(1, domain.max_value + 2):
                yield FreqAtom(low, high, step, domain)


class TestFreqAtomProperties:
    """Tests for enumeration and mask invariants."""

    def test_enumeration_invariants(self):
        """Test ascending order, first element and step congruence."""
        for atom in _all_atoms(ZERO_TO_TEN):
            values = list(atom.enumerate())
            assert values[0] == atom.min_value
            assert all(a < b for a, b in zip(values, values[1:]))
            assert all((v - atom.min_value) % atom.step == 0 for v in values)
            assert values[-1] <= atom.max_value
            reaches_max = (atom.max_value - atom.min_value) % atom.step == 0
            assert (values[-1] == atom.max_value) == reaches_max

    def test_mask_equivalence(self):
        """Test bit v is set exactly for enumerated values."""
        domain = FIELD_DOMAINS[FieldType.MINUTE]
        for atom in [
            parse_atom("*", domain),
            parse_atom("*/7", domain),
            parse_atom("13-47/5", domain),
            parse_atom("59", domain),
            parse_atom("0", domain),
        ]:
            mask = atom.to_mask()
            values = set(atom.enumerate())
            for v in range(64):
                assert bool(mask >> v & 1) == (v in values)

    def test_mask_requires_64_bits(self):
        """Test masks cannot represent values above 63."""
        assert FreqAtom(63, 63, 1, EVERYTHING).to_mask() == 1 << 63
        with pytest.raises(ValueError):
            FreqAtom(0, 64, 1, EVERYTHING).to_mask()

    def test_is_valid(self):
        """Test validation of raw triples."""
        assert FreqAtom(1, 5, 1, ONE_TO_FIVE).is_valid()
        assert not FreqAtom(0, 5, 1, ONE_TO_FIVE).is_valid()
        assert not FreqAtom(3, 2, 1, ONE_TO_FIVE).is_valid()
        assert not FreqAtom(1, 5, 0, ONE_TO_FIVE).is_valid()
        assert not FreqAtom(1, 6, 1, ONE_TO_FIVE).is_valid()
        assert FreqAtom(1, 6, 1, ONE_TO_FIVE).is_valid(ZERO_TO_TEN)


# =============================================================================
# Field List Tests
# =============================================================================


class TestParseField:
    """Tests for comma separated lists."""

    def test_parses_many_atoms(self):
        """Test each list entry becomes an atom."""
        field = parse_field("1,2,3", EVERYTHING)
        assert len(field) == 3
        assert [atom.min_value for atom in field] == [1, 2, 3]

    def test_malformed_lists(self):
        """Test empty entries are syntax errors."""
        for text in ["1,2,3,", ",1,2,3", "1,,3", ","]:
            with pytest.raises(CronSyntaxError):
                parse_field(text, EVERYTHING)

    def test_complex_expressions(self):
        """Test a list mixing every shape."""
        field = parse_field("1,2-8/7,3/1337,*/5", ZERO_TO_TEN)
        triples = [(a.min_value, a.max_value, a.step) for a in field]
        assert triples == [(1, 1, 1), (2, 8, 7), (3, 10, 1337), (0, 10, 5)]

    def test_duplicates_collapse(self):
        """Test enumerated values are distinct and sorted."""
        cases = {
            "1,1,1": [1],
            "5,4,3,2,1": [1, 2, 3, 4, 5],
            "8-9,1-5,3-7": [1, 2, 3, 4, 5, 6, 7, 8, 9],
            "5,*/5": [0, 5, 10],
        }
        for text, expected in cases.items():
            field = parse_field(text, ZERO_TO_TEN)
            assert field.values() == expected
            assert enumerate_values(field.atoms) == expected

    def test_mask_is_union(self):
        """Test the field mask is the union of atom masks."""
        field = parse_field("1,3-4,8/2", ZERO_TO_TEN)
        assert field.mask == 0b10100011010
        assert 4 in field
        assert 5 not in field
        assert -1 not in field

    def test_range_error_in_list(self):
        """Test a single bad entry fails the whole list."""
        with pytest.raises(CronRangeError):
            parse_field("1,2,11", ZERO_TO_TEN)

    def test_custom_parser(self):
        """Test an alternative atom parser can be supplied."""
        seen = []

        def parser(text, domain):
            seen.append(text)
            return parse_atom(text, domain)

        parse_field("1,2", ZERO_TO_TEN, parser)
        assert seen == ["1", "2"]

    def test_empty_field_spec_is_invalid(self):
        """Test a field spec needs at least one atom."""
        with pytest.raises(InvalidSpecificationError):
            FieldSpec(())
