"""Zoom resolver: brush gesture → new window, cadence and history.

Responsible for:
- Classifying a brush as a new zoom level, a step back, or a reset
- Producing the resulting window, cadence and navigation stack
- Deciding whether the brush overlay stays armed

Every function here is pure: the caller applies the returned resolution.

Usage:
    resolution = resolve(state, brush, tolerance_seconds=5,
                         default_cadence=RefreshCadence.interval(15))
    state.window, state.cadence, state.stack = (
        resolution.window, resolution.cadence, resolution.stack)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from ..models.navigation import NavigationStack
from ..models.view import DashboardViewState
from ..models.window import (
    DISABLED_CADENCE,
    UNDEFINED_WINDOW,
    AbsoluteWindow,
    BrushSelection,
    NavigationHistoryEntry,
    RefreshCadence,
    RelativeWindow,
    TimeWindow,
)

logger = logging.getLogger(__name__)


class ZoomAction(str, Enum):
    """Outcome of resolving a brush."""

    PUSH_NEW_ZOOM = "push_new_zoom"
    POP_HISTORY = "pop_history"
    RESET_TO_DEFAULT = "reset_to_default"


@dataclass(frozen=True)
class ZoomResolution:
    """Resulting view after a brush gesture."""

    action: ZoomAction
    window: TimeWindow
    cadence: RefreshCadence
    stack: NavigationStack
    is_zoom_in: bool
    brush_overlay: BrushSelection | None = None


def contains_brush(
    window: TimeWindow, brush: BrushSelection, tolerance_seconds: int
) -> bool:
    """Whether the brush genuinely narrows the given window.

    A relative window always counts as covering the brush, since its
    absolute bounds are not known locally. An absolute window must enclose
    the brush and be wider than it by more than the tolerance.
    """
    if isinstance(window, RelativeWindow):
        return True
    if isinstance(window, AbsoluteWindow):
        return (
            window.start <= brush.start
            and window.end >= brush.end
            and window.duration - brush.duration > tolerance_seconds
        )
    return False


def push_new_zoom(state: DashboardViewState, brush: BrushSelection) -> ZoomResolution:
    """Remember the current view and zoom into the brush with polling off."""
    entry = NavigationHistoryEntry(window=state.window, cadence=state.cadence)
    return ZoomResolution(
        action=ZoomAction.PUSH_NEW_ZOOM,
        window=brush.to_window(),
        cadence=DISABLED_CADENCE,
        stack=state.stack.push(entry),
        is_zoom_in=True,
        brush_overlay=brush,
    )


def pop_history(state: DashboardViewState) -> ZoomResolution:
    """Return to the most recent history entry and drop the whole trail.

    A historical absolute, non-polling window keeps the brush overlay armed
    on its bounds; anything else returns to free-scroll mode.
    """
    entry, _ = state.stack.pop()
    restores_zoom = isinstance(entry.window, AbsoluteWindow) and entry.cadence.is_disabled
    return ZoomResolution(
        action=ZoomAction.POP_HISTORY,
        window=entry.window,
        cadence=entry.cadence,
        stack=state.stack.clear(),
        is_zoom_in=restores_zoom,
        brush_overlay=(
            BrushSelection.from_window(entry.window)
            if restores_zoom and isinstance(entry.window, AbsoluteWindow)
            else None
        ),
    )


def reset_to_default(
    state: DashboardViewState, default_cadence: RefreshCadence
) -> ZoomResolution:
    """Fall back to an undefined window with the default cadence."""
    return ZoomResolution(
        action=ZoomAction.RESET_TO_DEFAULT,
        window=UNDEFINED_WINDOW,
        cadence=default_cadence,
        stack=state.stack,
        is_zoom_in=False,
        brush_overlay=None,
    )


def resolve(
    state: DashboardViewState,
    brush: BrushSelection,
    tolerance_seconds: int,
    default_cadence: RefreshCadence,
) -> ZoomResolution:
    """Decide what a brush gesture does to the view.

    Args:
        state: Current view state (not modified)
        brush: Selected range, start strictly before end
        tolerance_seconds: Width difference at or below which a brush is
            treated as re-selecting the same range
        default_cadence: Cadence to use when the view resets

    Returns:
        ZoomResolution describing the new window, cadence and stack
    """
    top = state.stack.top
    if contains_brush(state.window, brush, tolerance_seconds) and (
        top is None or contains_brush(top.window, brush, tolerance_seconds)
    ):
        resolution = push_new_zoom(state, brush)
    elif top is not None:
        resolution = pop_history(state)
    else:
        resolution = reset_to_default(state, default_cadence)

    logger.debug(
        "Brush %s-%s resolved to %s (history depth %d)",
        brush.start,
        brush.end,
        resolution.action.value,
        len(resolution.stack),
    )
    return resolution
