"""
Unit tests for frame reference resolution.

Run with: python -m pytest frame_timeline/tests/test_resolver.py -v
"""

import math

import pytest

from frame_timeline.errors import (
    InvalidReferenceError,
    OutOfRangeError,
    TimelineError,
    UnresolvedAliasError,
)
from frame_timeline.resolver import FrameIndexResolver


@pytest.fixture()
def resolver():
    return FrameIndexResolver(10)


# ---------------------------------------------------------------------------
# Numeric references
# ---------------------------------------------------------------------------


class TestNumericReferences:
    @pytest.mark.parametrize("n", range(1, 11))
    def test_valid_frame_resolves_to_itself(self, resolver, n):
        assert resolver.resolve(n) == n

    @pytest.mark.parametrize("n", [0, 11, -1, 100])
    def test_out_of_range_frame_fails(self, resolver, n):
        with pytest.raises(OutOfRangeError):
            resolver.resolve(n)

    def test_fractional_frame_is_floored(self, resolver):
        assert resolver.resolve(3.7) == 3
        assert resolver.resolve(10.99) == 10

    def test_negative_fraction_floors_out_of_range(self, resolver):
        # -0.5 floors to -1, not 0
        with pytest.raises(OutOfRangeError):
            resolver.resolve(-0.5)

    def test_fraction_below_one_is_out_of_range(self, resolver):
        with pytest.raises(OutOfRangeError):
            resolver.resolve(0.9)

    @pytest.mark.parametrize("value", [math.inf, -math.inf, math.nan])
    def test_non_finite_number_is_out_of_range(self, resolver, value):
        with pytest.raises(OutOfRangeError):
            resolver.resolve(value)

    def test_error_message_names_the_range(self, resolver):
        with pytest.raises(OutOfRangeError, match="1 <= n <= 10"):
            resolver.resolve(42)


# ---------------------------------------------------------------------------
# Percentage references
# ---------------------------------------------------------------------------


class TestPercentageReferences:
    def test_half_way(self, resolver):
        assert resolver.resolve("50%") == 5

    def test_full_length(self, resolver):
        assert resolver.resolve("100%") == 10

    def test_rounds_half_up(self, resolver):
        assert resolver.resolve("25%") == 3
        assert resolver.resolve("5%") == 1

    def test_fractional_percentage(self, resolver):
        assert resolver.resolve("33.3%") == 3

    @pytest.mark.parametrize("p", range(10, 101, 5))
    def test_matches_rounded_numeric_frame(self, resolver, p):
        assert resolver.resolve(f"{p}%") == resolver.resolve(math.floor(10 * p / 100 + 0.5))

    @pytest.mark.parametrize("ref", ["0%", "150%", "-10%", "inf%", "nan%", "1e308%"])
    def test_out_of_range_percentage_fails(self, resolver, ref):
        with pytest.raises(OutOfRangeError):
            resolver.resolve(ref)

    @pytest.mark.parametrize("ref", ["%", "abc%", "half%"])
    def test_non_numeric_percentage_is_invalid(self, resolver, ref):
        with pytest.raises(InvalidReferenceError):
            resolver.resolve(ref)


# ---------------------------------------------------------------------------
# Aliases
# ---------------------------------------------------------------------------


class TestAliases:
    def test_alias_round_trip(self, resolver):
        resolver.register_alias(5, "mid")
        assert resolver.resolve("mid") == 5

    def test_realias_overwrites(self, resolver):
        resolver.register_alias(5, "mid")
        resolver.register_alias(7, "mid")
        assert resolver.resolve("mid") == 7

    def test_alias_from_percentage(self, resolver):
        assert resolver.register_alias("50%", "half") == 5
        assert resolver.resolve("half") == 5

    def test_alias_of_alias_stores_the_frame(self, resolver):
        resolver.register_alias(4, "a")
        resolver.register_alias("a", "b")
        resolver.register_alias(9, "a")
        assert resolver.resolve("b") == 4

    def test_unknown_alias_fails(self, resolver):
        with pytest.raises(UnresolvedAliasError, match="nowhere"):
            resolver.resolve("nowhere")

    def test_alias_to_invalid_frame_registers_nothing(self, resolver):
        with pytest.raises(OutOfRangeError):
            resolver.register_alias(11, "late")
        assert "late" not in resolver.aliases

    def test_alias_name_must_be_string(self, resolver):
        with pytest.raises(InvalidReferenceError):
            resolver.register_alias(3, 3)

    def test_aliases_returns_a_copy(self, resolver):
        resolver.register_alias(2, "intro")
        resolver.aliases["intro"] = 9
        assert resolver.resolve("intro") == 2


# ---------------------------------------------------------------------------
# Invalid references and distance
# ---------------------------------------------------------------------------


class TestInvalidReferences:
    @pytest.mark.parametrize("ref", [None, [], {}, (1,), True, False, object()])
    def test_other_types_are_invalid(self, resolver, ref):
        with pytest.raises(InvalidReferenceError):
            resolver.resolve(ref)

    def test_errors_share_a_base_and_builtin_types(self, resolver):
        with pytest.raises(TimelineError):
            resolver.resolve(None)
        with pytest.raises(TypeError):
            resolver.resolve(None)
        with pytest.raises(ValueError):
            resolver.resolve(0)
        with pytest.raises(LookupError):
            resolver.resolve("missing")


class TestDistanceBetween:
    def test_distance(self, resolver):
        assert resolver.distance_between(2, 9) == 7

    def test_distance_to_self_is_zero(self, resolver):
        assert resolver.distance_between(4, 4) == 0

    def test_distance_is_symmetric(self, resolver):
        resolver.register_alias(7, "chorus")
        refs = [1, 3, "50%", "chorus", 10]
        for a in refs:
            for b in refs:
                assert resolver.distance_between(a, b) == resolver.distance_between(b, a)

    def test_distance_with_invalid_reference_fails(self, resolver):
        with pytest.raises(UnresolvedAliasError):
            resolver.distance_between(1, "missing")
