"""Time window, refresh cadence and brush selection value types.

A time window is a tagged union of three immutable variants. Each variant
carries only its own fields, so a window can never be absolute and
relative at the same time.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, ClassVar, Literal, Union

from ..errors import InvalidBrushSelection, InvalidRefreshCadence, InvalidTimeWindow


@dataclass(frozen=True)
class AbsoluteWindow:
    """Fixed span between two epoch-second timestamps."""

    start: int
    end: int

    kind: ClassVar[Literal["absolute"]] = "absolute"

    def __post_init__(self) -> None:
        if self.start >= self.end:
            raise InvalidTimeWindow(
                f"Absolute window start {self.start} must be before end {self.end}",
                start=self.start,
                end=self.end,
            )

    @property
    def duration(self) -> int:
        return self.end - self.start


@dataclass(frozen=True)
class RelativeWindow:
    """Rolling window: now minus lookback_seconds."""

    lookback_seconds: int

    kind: ClassVar[Literal["relative"]] = "relative"

    def __post_init__(self) -> None:
        if self.lookback_seconds <= 0:
            raise InvalidTimeWindow(
                f"Relative lookback must be positive, got {self.lookback_seconds}",
                lookback_seconds=self.lookback_seconds,
            )


@dataclass(frozen=True)
class UndefinedWindow:
    """No window selected yet."""

    kind: ClassVar[Literal["undefined"]] = "undefined"


TimeWindow = Union[AbsoluteWindow, RelativeWindow, UndefinedWindow]

UNDEFINED_WINDOW = UndefinedWindow()


def window_to_dict(window: TimeWindow) -> dict[str, Any]:
    """Flatten a window for display; fields of other variants are None."""
    return {
        "kind": window.kind,
        "start": window.start if isinstance(window, AbsoluteWindow) else None,
        "end": window.end if isinstance(window, AbsoluteWindow) else None,
        "lookback_seconds": (
            window.lookback_seconds if isinstance(window, RelativeWindow) else None
        ),
    }


def resolve_window(
    window: TimeWindow, default_lookback_seconds: int | None
) -> AbsoluteWindow | RelativeWindow | None:
    """Window the transport should query, or None if nothing is resolvable.

    An undefined window falls back to the default lookback when one is
    configured.
    """
    if isinstance(window, (AbsoluteWindow, RelativeWindow)):
        return window
    if default_lookback_seconds:
        return RelativeWindow(default_lookback_seconds)
    return None


@dataclass(frozen=True)
class RefreshCadence:
    """Live polling interval in seconds, or disabled when seconds is None."""

    seconds: int | None = None

    def __post_init__(self) -> None:
        if self.seconds is not None and self.seconds <= 0:
            raise InvalidRefreshCadence(
                f"Refresh interval must be positive, got {self.seconds}",
                seconds=self.seconds,
            )

    @classmethod
    def interval(cls, seconds: int) -> RefreshCadence:
        return cls(seconds)

    @classmethod
    def disabled(cls) -> RefreshCadence:
        return cls(None)

    @property
    def is_disabled(self) -> bool:
        return self.seconds is None

    def to_dict(self) -> dict[str, Any]:
        return {"disabled": self.is_disabled, "seconds": self.seconds}


DISABLED_CADENCE = RefreshCadence.disabled()


@dataclass(frozen=True)
class BrushSelection:
    """Range selected with a brush gesture, in whole epoch seconds."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start >= self.end:
            raise InvalidBrushSelection(
                f"Brush start {self.start} must be before end {self.end}",
                start=self.start,
                end=self.end,
            )

    @property
    def duration(self) -> int:
        return self.end - self.start

    @classmethod
    def from_pixel_times(cls, start_ms: float, end_ms: float) -> BrushSelection:
        """Build a brush from graph pixel-times in milliseconds.

        Start is rounded up and end rounded down to whole seconds so that
        repeated zooms never drift outward.
        """
        if not (math.isfinite(start_ms) and math.isfinite(end_ms)):
            raise InvalidBrushSelection(
                "Brush pixel-times must be finite",
                start_ms=start_ms,
                end_ms=end_ms,
            )
        return cls(math.ceil(start_ms / 1000), math.floor(end_ms / 1000))

    @classmethod
    def from_window(cls, window: AbsoluteWindow) -> BrushSelection:
        return cls(window.start, window.end)

    def to_window(self) -> AbsoluteWindow:
        return AbsoluteWindow(self.start, self.end)

    def to_dict(self) -> dict[str, int]:
        return {"start": self.start, "end": self.end}


@dataclass(frozen=True)
class NavigationHistoryEntry:
    """Window and cadence that were active when a zoom was pushed."""

    window: TimeWindow
    cadence: RefreshCadence
