"""Interfaces of the collaborators the view engine drives.

None of these are implemented here: query construction, the metrics
transport and dashboard loading live outside the view engine.
"""

from __future__ import annotations

from typing import Any, Protocol

from .models.dashboard import DashboardMetadata, PanelGroup, Query
from .models.window import AbsoluteWindow, RefreshCadence, RelativeWindow, TimeWindow


class QueryBuilder(Protocol):
    """Builds the ordered query list for a window and dashboard structure."""

    def build_queries(
        self,
        window: TimeWindow,
        panel_groups: list[PanelGroup],
        event_template: str,
        verdict_template: str,
    ) -> list[Query]:
        """Generate queries for every panel plus the event/verdict overlays."""
        ...


class MetricsTransport(Protocol):
    """Streams metrics for a query set.

    Results come back as SubscriptionData, SubscriptionComplete and
    SubscriptionError events fed into DashboardViewSession.handle_event.
    """

    def subscribe(
        self,
        dashboard_id: str,
        queries: list[Query],
        query_map: list[dict[str, Any]],
        window: AbsoluteWindow | RelativeWindow,
        cadence: RefreshCadence,
    ) -> None:
        """Start streaming, replacing any subscription still open.

        query_map groups the query ids by panel group so results can be
        routed back to their panels.
        """
        ...

    def stop(self) -> None:
        """Close the open subscription, if any."""
        ...


class DashboardMetadataLoader(Protocol):
    """Supplies dashboard structure and templates."""

    def load_dashboard(self, dashboard_id: str) -> DashboardMetadata:
        """Load a dashboard definition.

        Raises:
            LookupError: If the dashboard does not exist.
        """
        ...
