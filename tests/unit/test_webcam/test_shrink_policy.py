"""Unit tests for shrink policy parsing and bounds."""

import pytest

from webcam_fetch.errors import InvalidShrinkError
from webcam_fetch.webcam.models import (
    DimensionShrink,
    NoShrink,
    PercentageShrink,
    parse_shrink_policy,
)


class TestParseShrinkPolicy:
    """Tests for parse_shrink_policy."""

    @pytest.mark.unit
    @pytest.mark.parametrize("value", [None, 0, "0", "", "  "])
    def test_no_shrink(self, value: object) -> None:
        """Test values meaning 'keep the original size'."""
        policy = parse_shrink_policy(value)  # type: ignore[arg-type]

        assert isinstance(policy, NoShrink)
        assert policy.is_noop

    @pytest.mark.unit
    def test_integer_percentage(self) -> None:
        """Test an integer becomes a percentage policy."""
        assert parse_shrink_policy(80) == PercentageShrink(percent=80)

    @pytest.mark.unit
    def test_string_percentage(self) -> None:
        """Test a numeric string becomes a percentage policy."""
        assert parse_shrink_policy("50") == PercentageShrink(percent=50)

    @pytest.mark.unit
    def test_out_of_range_percentage_is_kept_for_later_validation(self) -> None:
        """Test range checks are deferred to validate_bounds."""
        policy = parse_shrink_policy(150)

        assert policy == PercentageShrink(percent=150)
        with pytest.raises(InvalidShrinkError):
            policy.validate_bounds()

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "value",
        [
            {"w": 200, "h": 150},
            {"width": 200, "height": 150},
            {"w": "200", "h": "150"},
            "200x150",
            "200X150",
            " 200 x 150 ",
        ],
    )
    def test_dimensions(self, value: object) -> None:
        """Test mapping and WxH string shapes."""
        assert parse_shrink_policy(value) == DimensionShrink(width=200, height=150)  # type: ignore[arg-type]

    @pytest.mark.unit
    def test_missing_mapping_key_fails_validation(self) -> None:
        """Test a mapping without height is rejected when validated."""
        policy = parse_shrink_policy({"w": 200})

        with pytest.raises(InvalidShrinkError, match="height"):
            policy.validate_bounds()

    @pytest.mark.unit
    def test_existing_policy_passes_through(self) -> None:
        """Test an already parsed policy is returned unchanged."""
        policy = DimensionShrink(width=10, height=10)

        assert parse_shrink_policy(policy) is policy

    @pytest.mark.unit
    @pytest.mark.parametrize("value", [True, 1.5, "half", {"w": "wide", "h": 1}, [200, 150]])
    def test_unsupported_shapes(self, value: object) -> None:
        """Test unsupported shapes are rejected immediately."""
        with pytest.raises(InvalidShrinkError):
            parse_shrink_policy(value)  # type: ignore[arg-type]


class TestPercentageShrink:
    """Tests for PercentageShrink."""

    @pytest.mark.unit
    @pytest.mark.parametrize("percent", [1, 50, 99])
    def test_valid_bounds(self, percent: int) -> None:
        """Test percentages strictly between 0 and 100 are accepted."""
        PercentageShrink(percent=percent).validate_bounds()

    @pytest.mark.unit
    @pytest.mark.parametrize("percent", [-10, -1, 100, 101, 250])
    def test_invalid_bounds(self, percent: int) -> None:
        """Test percentages outside 1..99 are rejected."""
        with pytest.raises(InvalidShrinkError, match="Invalid shrink size"):
            PercentageShrink(percent=percent).validate_bounds()

    @pytest.mark.unit
    @pytest.mark.parametrize(
        ("size", "percent", "expected"),
        [
            ((320, 240), 50, (160, 120)),
            ((321, 241), 50, (160, 120)),
            ((640, 480), 80, (512, 384)),
            ((333, 99), 33, (109, 32)),
            ((1, 1), 99, (0, 0)),
        ],
    )
    def test_target_size_truncates(
        self, size: tuple[int, int], percent: int, expected: tuple[int, int]
    ) -> None:
        """Test scaling floors both axes."""
        assert PercentageShrink(percent=percent).target_size(*size) == expected


class TestDimensionShrink:
    """Tests for DimensionShrink."""

    @pytest.mark.unit
    @pytest.mark.parametrize(("width", "height"), [(1, 1), (6000, 5000), (200, 150)])
    def test_valid_bounds(self, width: int, height: int) -> None:
        """Test dimensions inside 1..6000 x 1..5000 are accepted."""
        DimensionShrink(width=width, height=height).validate_bounds()

    @pytest.mark.unit
    @pytest.mark.parametrize("width", [0, -5, 6001])
    def test_invalid_width(self, width: int) -> None:
        """Test widths outside 1..6000 are rejected."""
        with pytest.raises(InvalidShrinkError, match="width"):
            DimensionShrink(width=width, height=100).validate_bounds()

    @pytest.mark.unit
    @pytest.mark.parametrize("height", [0, -5, 5001])
    def test_invalid_height(self, height: int) -> None:
        """Test heights outside 1..5000 are rejected."""
        with pytest.raises(InvalidShrinkError, match="height"):
            DimensionShrink(width=100, height=height).validate_bounds()

    @pytest.mark.unit
    def test_target_size_is_literal(self) -> None:
        """Test the configured dimensions are used as-is."""
        assert DimensionShrink(width=200, height=150).target_size(640, 480) == (200, 150)
