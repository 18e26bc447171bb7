"""View engine data models.

Structured into:
- window.py: Time windows, refresh cadence, brush selections
- navigation.py: Zoom history stack
- view.py: Aggregate view state and its display projection
- dashboard.py: Dashboard metadata, queries and streamed results (Pydantic)
- events.py: Transport events (Pydantic)
"""

from .window import (
    AbsoluteWindow,
    RelativeWindow,
    UndefinedWindow,
    TimeWindow,
    UNDEFINED_WINDOW,
    RefreshCadence,
    DISABLED_CADENCE,
    BrushSelection,
    NavigationHistoryEntry,
    resolve_window,
    window_to_dict,
)
from .navigation import NavigationStack, EMPTY_STACK
from .view import DashboardViewState, DisplayState, RefreshPhase
from .dashboard import (
    DashboardMetadata,
    PanelGroup,
    Panel,
    PanelQuery,
    ApplicationMetadata,
    Query,
    MetricSeries,
    EventAnnotation,
    SubscriptionResult,
)
from .events import (
    SubscriptionEvent,
    SubscriptionData,
    SubscriptionComplete,
    SubscriptionError,
    parse_event,
)

__all__ = [
    # Windows
    "AbsoluteWindow",
    "RelativeWindow",
    "UndefinedWindow",
    "TimeWindow",
    "UNDEFINED_WINDOW",
    "RefreshCadence",
    "DISABLED_CADENCE",
    "BrushSelection",
    "NavigationHistoryEntry",
    "resolve_window",
    "window_to_dict",
    # History
    "NavigationStack",
    "EMPTY_STACK",
    # View
    "DashboardViewState",
    "DisplayState",
    "RefreshPhase",
    # Dashboard
    "DashboardMetadata",
    "PanelGroup",
    "Panel",
    "PanelQuery",
    "ApplicationMetadata",
    "Query",
    "MetricSeries",
    "EventAnnotation",
    "SubscriptionResult",
    # Events
    "SubscriptionEvent",
    "SubscriptionData",
    "SubscriptionComplete",
    "SubscriptionError",
    "parse_event",
]
