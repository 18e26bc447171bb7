"""Dashboard view state and its display projection.

DashboardViewState is owned by exactly one DashboardViewSession and is
mutated only through the zoom resolver, the refresh coordinator and the
session mutators.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel

from .navigation import NavigationStack
from .window import (
    UNDEFINED_WINDOW,
    BrushSelection,
    RefreshCadence,
    TimeWindow,
)


class RefreshPhase(str, Enum):
    """Where the view is in its refetch cycle.

    IN_FLIGHT_PENDING means a change arrived while a refetch was still
    running; it only lasts until the next resubscribe check.
    """

    IDLE = "idle"
    PENDING = "pending"
    IN_FLIGHT = "in_flight"
    IN_FLIGHT_PENDING = "in_flight_pending"


@dataclass
class DashboardViewState:
    """Aggregate view state for one dashboard selection."""

    cadence: RefreshCadence
    window: TimeWindow = UNDEFINED_WINDOW
    stack: NavigationStack = field(default_factory=NavigationStack)
    phase: RefreshPhase = RefreshPhase.IDLE
    loader_visible: bool = True

    # Brush drawn over the graphs while a zoom is active
    brush_overlay: BrushSelection | None = None

    # Set by a resolution-limit error; live polling is refused until the window changes
    resolution_limited: bool = False

    metrics_unavailable: bool = False
    last_error: dict[str, object] | None = None

    @property
    def pending_refetch(self) -> bool:
        return self.phase in (RefreshPhase.PENDING, RefreshPhase.IN_FLIGHT_PENDING)

    @property
    def refetch_in_flight(self) -> bool:
        return self.phase in (RefreshPhase.IN_FLIGHT, RefreshPhase.IN_FLIGHT_PENDING)


class DisplayState(BaseModel):
    """What the rendering layer needs to draw the view controls."""

    dashboard_id: str
    dashboard_name: str = ""
    window: dict[str, Any]
    cadence: dict[str, Any]
    loader_visible: bool
    pending_refetch: bool
    refetch_in_flight: bool
    chaos_event_overlay_enabled: bool
    brush_overlay: dict[str, int] | None = None
    history_depth: int = 0
    resolution_limited: bool = False
    metrics_unavailable: bool = False
    error: dict[str, object] | None = None
    data_source_status: str = ""
    panels: list[dict[str, str]] = []
    applications: list[dict[str, Any]] = []
    selected_panels: list[str] = []
    selected_applications: list[str] = []
    selected_events: list[str] = []
