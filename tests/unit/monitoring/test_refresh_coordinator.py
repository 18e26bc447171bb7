"""Tests for the refresh coordinator state machine."""

import pytest

from src.monitoring.core.refresh import ALLOWED_TRANSITIONS, PhaseTransition, RefreshCoordinator
from src.monitoring.errors import RefreshStateError
from src.monitoring.models.view import DashboardViewState, RefreshPhase
from src.monitoring.models.window import RefreshCadence


@pytest.fixture
def state() -> DashboardViewState:
    return DashboardViewState(cadence=RefreshCadence.interval(15))


@pytest.fixture
def coordinator(state: DashboardViewState) -> RefreshCoordinator:
    return RefreshCoordinator(state)


class TestPhaseTransitions:
    """Tests for the allowed-transition table."""

    def test_cannot_start_in_flight_from_idle(self, coordinator: RefreshCoordinator) -> None:
        """A refetch is never in flight without having been pending."""
        assert not coordinator.can_transition_to(RefreshPhase.IN_FLIGHT)
        assert PhaseTransition(RefreshPhase.IDLE, RefreshPhase.IN_FLIGHT) not in ALLOWED_TRANSITIONS

    def test_staying_put_is_allowed(self, coordinator: RefreshCoordinator) -> None:
        assert coordinator.can_transition_to(RefreshPhase.IDLE)

    def test_begin_refetch_without_pending_raises(self, coordinator: RefreshCoordinator) -> None:
        with pytest.raises(RefreshStateError):
            coordinator.begin_refetch()


class TestInvalidate:
    """Tests for invalidate()."""

    def test_idle_becomes_pending_with_loader(
        self, state: DashboardViewState, coordinator: RefreshCoordinator
    ) -> None:
        state.loader_visible = False

        coordinator.invalidate()

        assert coordinator.phase == RefreshPhase.PENDING
        assert coordinator.pending_refetch
        assert coordinator.loader_visible

    def test_invalidate_is_idempotent(self, coordinator: RefreshCoordinator) -> None:
        coordinator.invalidate()
        coordinator.invalidate()

        assert coordinator.phase == RefreshPhase.PENDING

    def test_without_loader_leaves_loader_alone(
        self, state: DashboardViewState, coordinator: RefreshCoordinator
    ) -> None:
        state.loader_visible = False

        coordinator.invalidate(show_loader=False)

        assert coordinator.pending_refetch
        assert not coordinator.loader_visible

    def test_during_flight_marks_pending(self, coordinator: RefreshCoordinator) -> None:
        coordinator.invalidate()
        coordinator.begin_refetch()

        coordinator.invalidate()

        assert coordinator.phase == RefreshPhase.IN_FLIGHT_PENDING
        assert coordinator.pending_refetch
        assert coordinator.refetch_in_flight


class TestRefetchCycle:
    """Tests for begin_refetch and transport outcomes."""

    def test_begin_refetch_with_loader_goes_in_flight(self, coordinator: RefreshCoordinator) -> None:
        coordinator.invalidate()
        coordinator.begin_refetch()

        assert coordinator.phase == RefreshPhase.IN_FLIGHT
        assert not coordinator.pending_refetch

    def test_begin_refetch_without_loader_goes_idle(
        self, state: DashboardViewState, coordinator: RefreshCoordinator
    ) -> None:
        """In flight only ever with the loader up."""
        state.loader_visible = False
        coordinator.invalidate(show_loader=False)

        coordinator.begin_refetch()

        assert coordinator.phase == RefreshPhase.IDLE

    def test_data_settles_flight(
        self, state: DashboardViewState, coordinator: RefreshCoordinator
    ) -> None:
        state.metrics_unavailable = True
        state.last_error = {"code": "subscription_failed"}
        coordinator.invalidate()
        coordinator.begin_refetch()

        coordinator.on_data()

        assert coordinator.phase == RefreshPhase.IDLE
        assert coordinator.loader_visible
        assert not state.metrics_unavailable
        assert state.last_error is None

    def test_data_during_pending_change_keeps_pending(self, coordinator: RefreshCoordinator) -> None:
        coordinator.invalidate()
        coordinator.begin_refetch()
        coordinator.invalidate()

        coordinator.on_data()

        assert coordinator.phase == RefreshPhase.PENDING

    def test_complete_hides_loader(self, coordinator: RefreshCoordinator) -> None:
        coordinator.invalidate()
        coordinator.begin_refetch()

        coordinator.on_complete()

        assert coordinator.phase == RefreshPhase.IDLE
        assert not coordinator.loader_visible

    def test_failure_records_error(
        self, state: DashboardViewState, coordinator: RefreshCoordinator
    ) -> None:
        coordinator.invalidate()
        coordinator.begin_refetch()

        coordinator.on_failure({"code": "subscription_failed"})

        assert coordinator.phase == RefreshPhase.IDLE
        assert not coordinator.loader_visible
        assert state.metrics_unavailable
        assert state.last_error == {"code": "subscription_failed"}


class TestResolutionLimit:
    """Tests for on_resolution_limit()."""

    def test_disables_live_cadence_and_requests_retry(
        self, state: DashboardViewState, coordinator: RefreshCoordinator
    ) -> None:
        coordinator.invalidate()
        coordinator.begin_refetch()

        assert coordinator.on_resolution_limit()

        assert state.cadence.is_disabled
        assert state.resolution_limited
        assert coordinator.phase == RefreshPhase.PENDING

    def test_no_retry_when_already_disabled(
        self, state: DashboardViewState, coordinator: RefreshCoordinator
    ) -> None:
        state.cadence = RefreshCadence.disabled()
        coordinator.invalidate()
        coordinator.begin_refetch()

        assert not coordinator.on_resolution_limit()

        assert state.resolution_limited
        assert coordinator.phase == RefreshPhase.IDLE
        assert not coordinator.pending_refetch

    def test_existing_pending_change_is_kept(
        self, state: DashboardViewState, coordinator: RefreshCoordinator
    ) -> None:
        state.cadence = RefreshCadence.disabled()
        coordinator.invalidate()
        coordinator.begin_refetch()
        coordinator.invalidate()

        coordinator.on_resolution_limit()

        assert coordinator.pending_refetch
