"""Tests for time windows, refresh cadence and brush selections."""

import math

import pytest

from src.monitoring.errors import (
    ErrorCode,
    InvalidBrushSelection,
    InvalidRefreshCadence,
    InvalidTimeWindow,
)
from src.monitoring.models.window import (
    UNDEFINED_WINDOW,
    AbsoluteWindow,
    BrushSelection,
    RefreshCadence,
    RelativeWindow,
    UndefinedWindow,
    resolve_window,
    window_to_dict,
)


class TestTimeWindow:
    """Tests for the window variants."""

    def test_absolute_requires_start_before_end(self) -> None:
        """Start equal to or after end is rejected."""
        with pytest.raises(InvalidTimeWindow):
            AbsoluteWindow(2000, 1000)
        with pytest.raises(InvalidTimeWindow):
            AbsoluteWindow(1000, 1000)

    def test_relative_requires_positive_lookback(self) -> None:
        """Zero or negative lookbacks are rejected."""
        with pytest.raises(InvalidTimeWindow) as exc_info:
            RelativeWindow(0)
        assert exc_info.value.code == ErrorCode.INVALID_WINDOW
        with pytest.raises(InvalidTimeWindow):
            RelativeWindow(-60)

    def test_variants_carry_only_their_fields(self) -> None:
        """No variant exposes the other variant's fields."""
        absolute = AbsoluteWindow(1000, 2000)
        relative = RelativeWindow(3600)

        assert not hasattr(absolute, "lookback_seconds")
        assert not hasattr(relative, "start")
        assert not hasattr(UNDEFINED_WINDOW, "start")
        assert not hasattr(UNDEFINED_WINDOW, "lookback_seconds")

    def test_windows_are_values(self) -> None:
        """Windows compare by value."""
        assert AbsoluteWindow(1000, 2000) == AbsoluteWindow(1000, 2000)
        assert RelativeWindow(60) != RelativeWindow(120)
        assert UndefinedWindow() == UNDEFINED_WINDOW

    def test_window_to_dict(self) -> None:
        """Display dict nulls the fields of other variants."""
        assert window_to_dict(AbsoluteWindow(1000, 2000)) == {
            "kind": "absolute",
            "start": 1000,
            "end": 2000,
            "lookback_seconds": None,
        }
        assert window_to_dict(RelativeWindow(3600)) == {
            "kind": "relative",
            "start": None,
            "end": None,
            "lookback_seconds": 3600,
        }
        assert window_to_dict(UNDEFINED_WINDOW)["kind"] == "undefined"


class TestResolveWindow:
    """Tests for the window handed to the transport."""

    def test_defined_windows_resolve_to_themselves(self) -> None:
        absolute = AbsoluteWindow(1000, 2000)
        relative = RelativeWindow(600)

        assert resolve_window(absolute, 1800) is absolute
        assert resolve_window(relative, None) is relative

    def test_undefined_uses_default_lookback(self) -> None:
        assert resolve_window(UNDEFINED_WINDOW, 1800) == RelativeWindow(1800)

    def test_undefined_without_default_is_unresolvable(self) -> None:
        assert resolve_window(UNDEFINED_WINDOW, None) is None


class TestRefreshCadence:
    """Tests for refresh cadence."""

    def test_interval_and_disabled(self) -> None:
        assert RefreshCadence.interval(15).seconds == 15
        assert not RefreshCadence.interval(15).is_disabled
        assert RefreshCadence.disabled().is_disabled
        assert RefreshCadence(None) == RefreshCadence.disabled()

    def test_non_positive_interval_rejected(self) -> None:
        with pytest.raises(InvalidRefreshCadence):
            RefreshCadence(0)

    def test_to_dict(self) -> None:
        assert RefreshCadence.interval(30).to_dict() == {"disabled": False, "seconds": 30}
        assert RefreshCadence.disabled().to_dict() == {"disabled": True, "seconds": None}


class TestBrushSelection:
    """Tests for building brushes from pixel-times."""

    def test_rounds_start_up_and_end_down(self) -> None:
        """Sub-second pixel-times never widen the selection."""
        brush = BrushSelection.from_pixel_times(1_200_400.0, 1_799_600.0)

        assert brush.start == 1201
        assert brush.end == 1799

    def test_whole_seconds_unchanged(self) -> None:
        brush = BrushSelection.from_pixel_times(1_200_000, 1_800_000)

        assert (brush.start, brush.end) == (1200, 1800)

    def test_reversed_brush_rejected(self) -> None:
        with pytest.raises(InvalidBrushSelection) as exc_info:
            BrushSelection.from_pixel_times(1_800_000, 1_200_000)
        assert exc_info.value.code == ErrorCode.INVALID_BRUSH

    def test_brush_collapsing_after_rounding_rejected(self) -> None:
        """A sub-second drag rounds to an empty range."""
        with pytest.raises(InvalidBrushSelection):
            BrushSelection.from_pixel_times(1_200_100, 1_200_900)

    @pytest.mark.parametrize("bad", [math.inf, -math.inf, math.nan])
    def test_non_finite_rejected(self, bad: float) -> None:
        with pytest.raises(InvalidBrushSelection):
            BrushSelection.from_pixel_times(bad, 1_800_000)
        with pytest.raises(InvalidBrushSelection):
            BrushSelection.from_pixel_times(1_200_000, bad)

    def test_window_conversion(self) -> None:
        brush = BrushSelection(1200, 1800)

        assert brush.to_window() == AbsoluteWindow(1200, 1800)
        assert BrushSelection.from_window(AbsoluteWindow(1200, 1800)) == brush
        assert brush.duration == 600
