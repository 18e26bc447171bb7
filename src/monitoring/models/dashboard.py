"""Dashboard metadata, generated queries and streamed results.

These are boundary models: the metadata loader produces DashboardMetadata,
the query builder produces Query lists, and the transport streams
MetricSeries and EventAnnotation values. Values are carried, never computed.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

ACTIVE_DATA_SOURCE = "Active"


class PanelQuery(BaseModel):
    """Query definition attached to a panel."""

    query_id: str
    expression: str = ""
    legend: str | None = None
    close_area: bool = False


class Panel(BaseModel):
    """A single graph panel."""

    panel_id: str
    name: str = ""
    queries: list[PanelQuery] = Field(default_factory=list)


class PanelGroup(BaseModel):
    """A titled group of panels rendered together."""

    panel_group_id: str
    name: str = ""
    panels: list[Panel] = Field(default_factory=list)


class ApplicationMetadata(BaseModel):
    """Application whose series can be selected in the display filters."""

    namespace: str = ""
    kind: str = ""
    names: list[str] = Field(default_factory=list)


class DashboardMetadata(BaseModel):
    """Structure and templates of a dashboard, as supplied by the loader."""

    model_config = ConfigDict(extra="allow")

    dashboard_id: str
    name: str = ""
    type_id: str = ""
    type_name: str = ""
    agent_name: str = ""
    information: str = ""
    data_source_url: str = ""
    data_source_name: str = ""
    data_source_status: str = ACTIVE_DATA_SOURCE
    event_query_template: str = ""
    verdict_query_template: str = ""
    panel_groups: list[PanelGroup] = Field(default_factory=list)
    applications: list[ApplicationMetadata] = Field(default_factory=list)

    def iter_panels(self) -> list[Panel]:
        """All panels across groups, in display order."""
        return [panel for group in self.panel_groups for panel in group.panels]

    def panel_ids(self) -> list[str]:
        return [panel.panel_id for panel in self.iter_panels()]

    def panel_names_and_ids(self) -> list[dict[str, str]]:
        return [{"name": p.name, "id": p.panel_id} for p in self.iter_panels()]

    def closed_area_query_ids(self) -> set[str]:
        """Queries whose series render as closed areas."""
        return {
            query.query_id
            for panel in self.iter_panels()
            for query in panel.queries
            if query.close_area
        }

    def query_map(self) -> list[dict[str, Any]]:
        """Panel group id to query ids, in the shape the transport expects."""
        return [
            {
                "panel_group_id": group.panel_group_id,
                "query_ids": [
                    query.query_id for panel in group.panels for query in panel.queries
                ],
            }
            for group in self.panel_groups
        ]

    def structure_key(self) -> tuple[Any, ...]:
        """Hashable fingerprint of everything that shapes generated queries."""
        return (
            self.dashboard_id,
            self.data_source_url,
            self.event_query_template,
            self.verdict_query_template,
            tuple(
                (
                    group.panel_group_id,
                    tuple(
                        (
                            panel.panel_id,
                            tuple(
                                (q.query_id, q.expression, q.legend, q.close_area)
                                for q in panel.queries
                            ),
                        )
                        for panel in group.panels
                    ),
                )
                for group in self.panel_groups
            ),
        )


class Query(BaseModel):
    """A generated query, opaque to the view engine."""

    query_id: str
    expression: str
    legend: str | None = None


class MetricSeries(BaseModel):
    """One streamed time series."""

    query_id: str
    panel_id: str | None = None
    legend: str = ""
    application: str | None = None
    points: list[tuple[float, float]] = Field(default_factory=list)
    closed_area: bool = False


class EventAnnotation(BaseModel):
    """A chaos event drawn over the graphs."""

    event_name: str
    event_type: str = ""
    start: float | None = None
    end: float | None = None
    verdict: str | None = None


class SubscriptionResult(BaseModel):
    """Latest full result from the subscription."""

    metrics: list[MetricSeries] = Field(default_factory=list)
    annotations: list[EventAnnotation] = Field(default_factory=list)
