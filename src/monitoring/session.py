"""Dashboard view session and controller.

A DashboardViewSession exists for exactly one dashboard selection. It owns
the DashboardViewState, exposes the only mutators of the view, and is the
entry point for transport events. Every mutator and every event is handled
to completion in one step that ends with a single resubscribe check, so a
resubscribe always sees the latest window, cadence and history.

Usage:
    controller = DashboardViewController(loader, builder, transport)
    session = controller.select_dashboard("db-1")
    session.request_relative(3600)
    session.handle_event(parse_event(raw_event))
    state = session.display_state()
"""

from __future__ import annotations

import logging
from typing import Any

from ..config import get_validated_config
from ..config_schema import AppConfig
from .collaborators import DashboardMetadataLoader, MetricsTransport, QueryBuilder
from .core.filters import DisplayFilters, derive_display
from .core.refresh import RefreshCoordinator
from .core.synchronizer import QuerySynchronizer, check_metadata
from .core.zoom import ZoomResolution, resolve
from .errors import (
    MalformedDashboardMetadata,
    NoActiveDashboard,
    ResolutionLimitExceeded,
    SubscriptionFailure,
)
from .models.dashboard import DashboardMetadata, Query, SubscriptionResult
from .models.events import (
    SubscriptionComplete,
    SubscriptionData,
    SubscriptionError,
    SubscriptionEvent,
)
from .models.view import DashboardViewState, DisplayState
from .models.window import (
    DISABLED_CADENCE,
    UNDEFINED_WINDOW,
    AbsoluteWindow,
    BrushSelection,
    RefreshCadence,
    RelativeWindow,
    window_to_dict,
)

logger = logging.getLogger(__name__)


class DashboardViewSession:
    """View state and mutators for one selected dashboard."""

    def __init__(
        self,
        dashboard_id: str,
        query_builder: QueryBuilder,
        transport: MetricsTransport,
        config: AppConfig | None = None,
    ) -> None:
        cfg = config or get_validated_config()
        self.dashboard_id = dashboard_id
        self._tolerance = cfg.view.zoom_tolerance_seconds
        self._default_lookback = cfg.view.default_lookback_seconds
        self._default_cadence = RefreshCadence(cfg.view.default_refresh_seconds)
        self._resolution_limit_message = cfg.subscription.resolution_limit_message

        self._state = DashboardViewState(cadence=self._default_cadence)
        self._coordinator = RefreshCoordinator(self._state)
        self._synchronizer = QuerySynchronizer(
            query_builder, transport, default_lookback_seconds=self._default_lookback
        )
        self.filters = DisplayFilters()
        self._metadata: DashboardMetadata | None = None
        self._result: SubscriptionResult | None = None
        self._closed = False

    @property
    def state(self) -> DashboardViewState:
        """Current view state (read it, do not mutate it)."""
        return self._state

    @property
    def metadata(self) -> DashboardMetadata | None:
        return self._metadata

    @property
    def queries(self) -> list[Query]:
        return self._synchronizer.queries

    @property
    def default_cadence(self) -> RefreshCadence:
        return self._default_cadence

    @property
    def chaos_event_overlay_enabled(self) -> bool:
        has_template = bool(self._metadata and self._metadata.event_query_template)
        return has_template and self.filters.event_overlay

    def _sync(self) -> bool:
        if self._closed:
            return False
        return self._synchronizer.sync(self._state, self._coordinator, self._metadata)

    def _window_changed(self) -> bool:
        self._coordinator.invalidate()
        return self._sync()

    # -------------------------------------------------------------------------
    # Mutators
    # -------------------------------------------------------------------------

    def request_zoom(self, brush: BrushSelection) -> ZoomResolution:
        """Apply a brush gesture: zoom in, step back, or reset."""
        resolution = resolve(self._state, brush, self._tolerance, self._default_cadence)
        self._state.window = resolution.window
        self._state.cadence = resolution.cadence
        self._state.stack = resolution.stack
        self._state.brush_overlay = resolution.brush_overlay
        self._state.resolution_limited = False
        # A zoom changes the data domain; chosen events no longer apply
        self.filters.clear_event_selection()
        self._window_changed()
        return resolution

    def request_absolute_range(self, start: int, end: int) -> None:
        """Show a fixed range. Absolute ranges are never polled."""
        window = AbsoluteWindow(start, end)
        self._state.window = window
        self._state.resolution_limited = False
        if not self._state.cadence.is_disabled:
            self._state.cadence = DISABLED_CADENCE
        self.filters.clear_event_selection()
        self._window_changed()

    def request_relative(self, lookback_seconds: int) -> None:
        """Show a rolling lookback window."""
        window = RelativeWindow(lookback_seconds)
        self._state.window = window
        self._state.resolution_limited = False
        self.filters.clear_event_selection()
        self._window_changed()

    def request_cadence(self, seconds: int | None) -> None:
        """Set the refresh interval, or disable polling with None.

        Live polling needs a rolling window, so enabling it on an absolute
        window switches to the default lookback. After a resolution-limit
        error polling stays disabled until the window changes.
        """
        cadence = RefreshCadence(seconds)
        if not cadence.is_disabled and isinstance(self._state.window, AbsoluteWindow):
            self._state.window = (
                RelativeWindow(self._default_lookback)
                if self._default_lookback
                else UNDEFINED_WINDOW
            )
            self._state.resolution_limited = False
        elif not cadence.is_disabled and self._state.resolution_limited:
            logger.info(
                "Dashboard %s: live refresh stays disabled until the window changes",
                self.dashboard_id,
            )
            cadence = DISABLED_CADENCE
        self._state.cadence = cadence
        self._window_changed()

    def reset_to_default(self) -> None:
        """Drop the window, history, brush and selections."""
        self._state.window = UNDEFINED_WINDOW
        self._state.cadence = self._default_cadence
        self._state.stack = self._state.stack.clear()
        self._state.resolution_limited = False
        self._state.brush_overlay = None
        self.filters.reset_for(self._metadata)
        self._window_changed()

    def apply_metadata(self, metadata: DashboardMetadata | None) -> None:
        """Install (re)loaded dashboard structure and templates."""
        if metadata is not None and metadata.dashboard_id != self.dashboard_id:
            logger.warning(
                "Metadata for %s applied to session of %s",
                metadata.dashboard_id,
                self.dashboard_id,
            )
        try:
            check_metadata(metadata)
        except MalformedDashboardMetadata as e:
            logger.warning("Dashboard %s: %s", self.dashboard_id, e.message)
        self._metadata = metadata
        self.filters.reset_for(metadata)
        self._result = None
        self._window_changed()

    def set_filters(
        self,
        panels: list[str] | None = None,
        applications: list[str] | None = None,
        events: list[str] | None = None,
        event_overlay: bool | None = None,
    ) -> SubscriptionResult:
        """Narrow what is displayed. Never refetches.

        Returns:
            The re-derived displayed result
        """
        if panels is not None:
            self.filters.selected_panels = list(panels)
        if applications is not None:
            self.filters.selected_applications = list(applications)
        if events is not None:
            self.filters.selected_events = list(events)
        if event_overlay is not None:
            self.filters.event_overlay = event_overlay
        return self.displayed_result()

    # -------------------------------------------------------------------------
    # Transport events
    # -------------------------------------------------------------------------

    def handle_event(self, event: SubscriptionEvent) -> bool:
        """Apply a transport event.

        Returns:
            True if handling the event led to a resubscribe.
        """
        if self._closed:
            logger.debug("Event for closed session %s ignored", self.dashboard_id)
            return False
        if event.dashboard_id is not None and event.dashboard_id != self.dashboard_id:
            logger.debug(
                "Event for dashboard %s ignored by session %s",
                event.dashboard_id,
                self.dashboard_id,
            )
            return False

        if isinstance(event, SubscriptionData):
            self._result = event.to_result()
            self._coordinator.on_data()
        elif isinstance(event, SubscriptionComplete):
            self._coordinator.on_complete()
        elif isinstance(event, SubscriptionError):
            self._handle_error(event)
        else:
            logger.debug("Unhandled transport event type %r", event.event_type)
            return False

        return self._sync()

    def _handle_error(self, event: SubscriptionError) -> None:
        if event.is_resolution_limit(self._resolution_limit_message):
            if self._coordinator.on_resolution_limit():
                return
            error = ResolutionLimitExceeded(
                event.message or "Resolution limit reached with live refresh disabled"
            )
        else:
            error = SubscriptionFailure(event.message or "Metrics unavailable")
        logger.warning("Subscription for %s failed: %s", self.dashboard_id, error.message)
        self._coordinator.on_failure(error.to_response().to_dict())

    def close(self) -> None:
        """Stop streaming; the session accepts no further events."""
        if self._closed:
            return
        self._synchronizer.stop()
        self._closed = True

    # -------------------------------------------------------------------------
    # Read side
    # -------------------------------------------------------------------------

    def displayed_result(self) -> SubscriptionResult:
        return derive_display(
            self._result,
            self.filters,
            self._metadata,
            self.chaos_event_overlay_enabled,
        )

    def display_state(self) -> DisplayState:
        state = self._state
        metadata = self._metadata
        return DisplayState(
            dashboard_id=self.dashboard_id,
            dashboard_name=metadata.name if metadata else "",
            window=window_to_dict(state.window),
            cadence=state.cadence.to_dict(),
            loader_visible=state.loader_visible,
            pending_refetch=state.pending_refetch,
            refetch_in_flight=state.refetch_in_flight,
            chaos_event_overlay_enabled=self.chaos_event_overlay_enabled,
            brush_overlay=state.brush_overlay.to_dict() if state.brush_overlay else None,
            history_depth=len(state.stack),
            resolution_limited=state.resolution_limited,
            metrics_unavailable=state.metrics_unavailable,
            error=state.last_error,
            data_source_status=metadata.data_source_status if metadata else "",
            panels=metadata.panel_names_and_ids() if metadata else [],
            applications=(
                [app.model_dump() for app in metadata.applications] if metadata else []
            ),
            selected_panels=list(self.filters.selected_panels),
            selected_applications=list(self.filters.selected_applications),
            selected_events=list(self.filters.selected_events),
        )


class DashboardViewController:
    """Owns the active session; a new dashboard means a new session."""

    def __init__(
        self,
        loader: DashboardMetadataLoader,
        query_builder: QueryBuilder,
        transport: MetricsTransport,
        config: AppConfig | None = None,
    ) -> None:
        self._loader = loader
        self._query_builder = query_builder
        self._transport = transport
        self._config = config
        self._session: DashboardViewSession | None = None

    @property
    def session(self) -> DashboardViewSession | None:
        return self._session

    def require_session(self) -> DashboardViewSession:
        """Return the active session.

        Raises:
            NoActiveDashboard: If no dashboard is selected.
        """
        if self._session is None:
            raise NoActiveDashboard("No dashboard selected")
        return self._session

    def _load(self, dashboard_id: str) -> DashboardMetadata | None:
        try:
            return self._loader.load_dashboard(dashboard_id)
        except Exception as e:
            logger.warning("Failed to load dashboard %s: %s", dashboard_id, e)
            return None

    def select_dashboard(self, dashboard_id: str) -> DashboardViewSession:
        """Discard the current view and open a fresh one for dashboard_id."""
        if self._session is not None:
            self._session.close()
        logger.info("Selected dashboard %s", dashboard_id)
        session = DashboardViewSession(
            dashboard_id, self._query_builder, self._transport, self._config
        )
        self._session = session
        session.apply_metadata(self._load(dashboard_id))
        return session

    def reload_metadata(self) -> DashboardViewSession:
        """Re-fetch the current dashboard definition and refetch its data."""
        session = self.require_session()
        logger.info("Reloading dashboard %s", session.dashboard_id)
        session.apply_metadata(self._load(session.dashboard_id))
        return session

    def close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None

    def describe(self) -> dict[str, Any]:
        """Short summary for logs and health checks."""
        if self._session is None:
            return {"dashboard_id": None}
        return {
            "dashboard_id": self._session.dashboard_id,
            "phase": self._session.state.phase.value,
            "queries": len(self._session.queries),
        }
