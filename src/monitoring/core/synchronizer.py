"""Query synchronizer: the only place that decides to resubscribe.

Responsible for:
- Tracking whether the generated query set is stale
- Regenerating queries through the query builder
- Telling the transport to resubscribe exactly once per pending change

Display filters never reach this module, so they cannot cause a
resubscribe.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from ..collaborators import MetricsTransport, QueryBuilder
from ..errors import MalformedDashboardMetadata
from ..models.dashboard import DashboardMetadata, Query
from ..models.view import DashboardViewState
from ..models.window import resolve_window
from .refresh import RefreshCoordinator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationKey:
    """Inputs the current query set was generated from."""

    window: Any
    cadence: Any
    structure: tuple[Any, ...]


def check_metadata(metadata: DashboardMetadata | None) -> DashboardMetadata:
    """Return metadata that queries can be generated from.

    Raises:
        MalformedDashboardMetadata: If metadata is missing, has no panel
            groups, or has no data source.
    """
    if metadata is None:
        raise MalformedDashboardMetadata("No dashboard metadata loaded")
    if not metadata.panel_groups:
        raise MalformedDashboardMetadata(
            f"Dashboard {metadata.dashboard_id} has no panel groups",
            dashboard_id=metadata.dashboard_id,
        )
    if not metadata.data_source_url:
        raise MalformedDashboardMetadata(
            f"Dashboard {metadata.dashboard_id} has no data source URL",
            dashboard_id=metadata.dashboard_id,
        )
    return metadata


class QuerySynchronizer:
    """Keeps the transport subscription in step with the view state.

    Usage:
        sync = QuerySynchronizer(builder, transport, default_lookback_seconds=1800)
        resubscribed = sync.sync(state, coordinator, metadata)
    """

    def __init__(
        self,
        query_builder: QueryBuilder,
        transport: MetricsTransport,
        default_lookback_seconds: int | None = None,
    ) -> None:
        self._query_builder = query_builder
        self._transport = transport
        self._default_lookback = default_lookback_seconds
        self._queries: list[Query] = []
        self._generation_key: GenerationKey | None = None
        self._subscriptions_started: int = 0

    @property
    def queries(self) -> list[Query]:
        """Most recently generated query set."""
        return list(self._queries)

    @property
    def subscriptions_started(self) -> int:
        return self._subscriptions_started

    def is_stale(self, state: DashboardViewState, metadata: DashboardMetadata) -> bool:
        """Whether window, cadence, structure or templates changed since generation."""
        return self._generation_key != self._key_for(state, metadata)

    def _key_for(
        self, state: DashboardViewState, metadata: DashboardMetadata
    ) -> GenerationKey:
        return GenerationKey(
            window=state.window,
            cadence=state.cadence,
            structure=metadata.structure_key(),
        )

    def _regenerate(self, state: DashboardViewState, metadata: DashboardMetadata) -> None:
        self._queries = list(
            self._query_builder.build_queries(
                state.window,
                metadata.panel_groups,
                metadata.event_query_template,
                metadata.verdict_query_template,
            )
        )
        self._generation_key = self._key_for(state, metadata)
        logger.debug(
            "Generated %d queries for dashboard %s",
            len(self._queries),
            metadata.dashboard_id,
        )

    def sync(
        self,
        state: DashboardViewState,
        coordinator: RefreshCoordinator,
        metadata: DashboardMetadata | None,
    ) -> bool:
        """Regenerate stale queries and resubscribe if a refetch is pending.

        Returns:
            True if the transport was told to (re)subscribe.
        """
        try:
            ready = check_metadata(metadata)
        except MalformedDashboardMetadata as e:
            logger.debug("Subscription skipped: %s", e.message)
            return False

        window = resolve_window(state.window, self._default_lookback)
        if window is None:
            logger.debug("Subscription skipped: no resolvable time window")
            return False

        if self.is_stale(state, ready):
            self._regenerate(state, ready)

        if not self._queries:
            logger.debug("Subscription skipped: no queries generated")
            return False

        if not coordinator.pending_refetch:
            return False

        coordinator.begin_refetch()
        self._transport.subscribe(
            ready.dashboard_id, self.queries, ready.query_map(), window, state.cadence
        )
        self._subscriptions_started += 1
        logger.info(
            "Resubscribed dashboard %s: %s window, cadence %s",
            ready.dashboard_id,
            window.kind,
            "disabled" if state.cadence.is_disabled else f"{state.cadence.seconds}s",
        )
        return True

    def stop(self) -> None:
        """Stop the transport and forget the generated queries."""
        self._transport.stop()
        self._queries = []
        self._generation_key = None
