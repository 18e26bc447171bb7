"""Display filters: presentation-only narrowing of the fetched result.

Changing a filter re-derives what is shown from the last result the
transport delivered. Filters never touch the refetch phase or the
subscription.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ..models.dashboard import (
    DashboardMetadata,
    EventAnnotation,
    MetricSeries,
    SubscriptionResult,
)


@dataclass
class DisplayFilters:
    """Current presentation selections.

    Attributes:
        selected_panels: Panels to draw (all panels after a metadata load)
        selected_applications: Applications to keep series for; empty keeps all
        selected_events: Chaos events to overlay; empty overlays all
        event_overlay: Whether chaos events are drawn at all
    """

    selected_panels: list[str] = field(default_factory=list)
    selected_applications: list[str] = field(default_factory=list)
    selected_events: list[str] = field(default_factory=list)
    event_overlay: bool = True

    def reset_for(self, metadata: DashboardMetadata | None) -> None:
        """Select every panel of a freshly loaded dashboard."""
        self.selected_panels = metadata.panel_ids() if metadata else []
        self.selected_applications = []
        self.selected_events = []

    def clear_event_selection(self) -> None:
        self.selected_events = []


def filter_metrics(
    series: list[MetricSeries],
    filters: DisplayFilters,
    closed_area_query_ids: set[str],
) -> list[MetricSeries]:
    """Keep series of selected panels and applications.

    Series without a panel id are always kept; series from closed-area
    queries are flagged for area rendering.
    """
    panels = set(filters.selected_panels)
    applications = set(filters.selected_applications)
    kept: list[MetricSeries] = []
    for s in series:
        if s.panel_id is not None and s.panel_id not in panels:
            continue
        if applications and s.application not in applications:
            continue
        kept.append(
            s.model_copy(update={"closed_area": s.query_id in closed_area_query_ids})
        )
    return kept


def filter_annotations(
    annotations: list[EventAnnotation],
    filters: DisplayFilters,
    overlay_enabled: bool,
) -> list[EventAnnotation]:
    if not overlay_enabled:
        return []
    if not filters.selected_events:
        return list(annotations)
    selected = set(filters.selected_events)
    return [a for a in annotations if a.event_name in selected]


def derive_display(
    result: SubscriptionResult | None,
    filters: DisplayFilters,
    metadata: DashboardMetadata | None,
    overlay_enabled: bool,
) -> SubscriptionResult:
    """Apply the filters to the last fetched result."""
    if result is None:
        return SubscriptionResult()
    closed = metadata.closed_area_query_ids() if metadata else set()
    return SubscriptionResult(
        metrics=filter_metrics(result.metrics, filters, closed),
        annotations=filter_annotations(result.annotations, filters, overlay_enabled),
    )
