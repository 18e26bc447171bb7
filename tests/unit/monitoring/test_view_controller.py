"""Tests for DashboardViewController."""

import pytest

from src.monitoring.errors import NoActiveDashboard
from src.monitoring.models.view import RefreshPhase
from src.monitoring.models.window import BrushSelection, RefreshCadence, RelativeWindow
from src.monitoring.session import DashboardViewController
from tests.testing_utils import FakeLoader, FakeTransport, make_metadata


class TestSelectDashboard:
    """Tests for dashboard selection."""

    def test_no_session_initially(self, controller: DashboardViewController) -> None:
        assert controller.session is None
        with pytest.raises(NoActiveDashboard):
            controller.require_session()
        assert controller.describe() == {"dashboard_id": None}

    def test_select_loads_and_subscribes(
        self,
        controller: DashboardViewController,
        loader: FakeLoader,
        transport: FakeTransport,
    ) -> None:
        session = controller.select_dashboard("db-1")

        assert controller.session is session
        assert loader.loads == ["db-1"]
        assert session.metadata is not None
        assert transport.subscribe_count == 1
        assert controller.describe() == {
            "dashboard_id": "db-1",
            "phase": RefreshPhase.IN_FLIGHT.value,
            "queries": 5,
        }

    def test_new_dashboard_starts_fresh(
        self, controller: DashboardViewController, transport: FakeTransport
    ) -> None:
        """No window, history or refresh flag survives a dashboard switch."""
        first = controller.select_dashboard("db-1")
        first.request_relative(3600)
        first.request_zoom(BrushSelection(1200, 1800))

        second = controller.select_dashboard("db-2")

        assert second is not first
        assert transport.stop_count == 1
        assert second.state.stack.is_empty
        assert second.state.cadence == RefreshCadence.interval(15)
        assert second.state.brush_overlay is None
        assert transport.last.dashboard_id == "db-2"
        assert transport.last.window == RelativeWindow(1800)
        # db-2 has no event templates
        assert len(transport.last.queries) == 3
        assert not second.chaos_event_overlay_enabled

    def test_old_session_ignores_late_events(
        self, controller: DashboardViewController
    ) -> None:
        from src.monitoring.models.events import SubscriptionComplete

        first = controller.select_dashboard("db-1")
        controller.select_dashboard("db-2")

        assert not first.handle_event(SubscriptionComplete(dashboard_id="db-1"))

    def test_unknown_dashboard_has_no_metadata(
        self, controller: DashboardViewController, transport: FakeTransport
    ) -> None:
        session = controller.select_dashboard("missing")

        assert session.metadata is None
        assert session.state.pending_refetch
        assert transport.subscribe_count == 0


class TestReloadMetadata:
    """Tests for reload_metadata."""

    def test_reload_requires_session(self, controller: DashboardViewController) -> None:
        with pytest.raises(NoActiveDashboard):
            controller.reload_metadata()

    def test_reload_keeps_window_and_refetches(
        self,
        controller: DashboardViewController,
        loader: FakeLoader,
        transport: FakeTransport,
    ) -> None:
        session = controller.select_dashboard("db-1")
        session.request_relative(3600)
        loader.dashboards["db-1"] = make_metadata("db-1", event_template="")

        reloaded = controller.reload_metadata()

        assert reloaded is session
        assert loader.loads == ["db-1", "db-1"]
        assert session.state.window == RelativeWindow(3600)
        assert transport.last.window == RelativeWindow(3600)
        assert all(q.query_id != "chaos-events" for q in transport.last.queries)

    def test_close(self, controller: DashboardViewController, transport: FakeTransport) -> None:
        controller.select_dashboard("db-1")

        controller.close()

        assert controller.session is None
        assert transport.stop_count == 1
