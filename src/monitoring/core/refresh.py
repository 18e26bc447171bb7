"""Refresh coordinator: refetch phase and loader visibility.

The refetch cycle is an explicit state machine over RefreshPhase with a
fixed table of allowed transitions, so combinations such as "in flight
without ever having been pending" cannot be reached:

    IDLE ──invalidate──▶ PENDING ──begin_refetch──▶ IN_FLIGHT (loader shown)
                            │                          │
                            └──begin_refetch──▶ IDLE   └──data/complete──▶ IDLE
    IN_FLIGHT ──invalidate──▶ IN_FLIGHT_PENDING ──begin_refetch──▶ IN_FLIGHT

Loader visibility is tracked beside the phase; it decides whether stale
data may stay on screen during a refresh. Invariant: a refetch is only in
flight while the loader is visible.

Usage:
    coordinator = RefreshCoordinator(state)
    coordinator.invalidate()
    if coordinator.pending_refetch:
        coordinator.begin_refetch()
        transport.subscribe(...)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..errors import RefreshStateError
from ..models.view import DashboardViewState, RefreshPhase
from ..models.window import DISABLED_CADENCE

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PhaseTransition:
    """An allowed phase transition.

    Attributes:
        from_phase: Source phase
        to_phase: Target phase
    """

    from_phase: RefreshPhase
    to_phase: RefreshPhase


_P = RefreshPhase

ALLOWED_TRANSITIONS: frozenset[PhaseTransition] = frozenset(
    PhaseTransition(a, b)
    for a, b in [
        # invalidate
        (_P.IDLE, _P.PENDING),
        (_P.IN_FLIGHT, _P.IN_FLIGHT_PENDING),
        # begin_refetch
        (_P.PENDING, _P.IN_FLIGHT),
        (_P.PENDING, _P.IDLE),
        (_P.IN_FLIGHT_PENDING, _P.IN_FLIGHT),
        # data, complete, failure
        (_P.IN_FLIGHT, _P.IDLE),
        (_P.IN_FLIGHT_PENDING, _P.PENDING),
    ]
)


class RefreshCoordinator:
    """Applies refetch rules to one DashboardViewState.

    The coordinator holds no state of its own; everything lives on the
    view state so a new session starts from a clean slate.
    """

    def __init__(self, state: DashboardViewState) -> None:
        self._state = state

    @property
    def phase(self) -> RefreshPhase:
        return self._state.phase

    @property
    def pending_refetch(self) -> bool:
        return self._state.pending_refetch

    @property
    def refetch_in_flight(self) -> bool:
        return self._state.refetch_in_flight

    @property
    def loader_visible(self) -> bool:
        return self._state.loader_visible

    def can_transition_to(self, target: RefreshPhase) -> bool:
        """Check if the phase may move to target (staying put is always allowed)."""
        current = self._state.phase
        return current == target or PhaseTransition(current, target) in ALLOWED_TRANSITIONS

    def _transition_to(self, target: RefreshPhase) -> None:
        current = self._state.phase
        if not self.can_transition_to(target):
            raise RefreshStateError(
                f"Invalid refresh transition from '{current.value}' to '{target.value}'",
                from_phase=current.value,
                to_phase=target.value,
            )
        if current != target:
            logger.debug("Refresh phase: %s -> %s", current.value, target.value)
        self._state.phase = target

    def _settle(self) -> None:
        # The running refetch is over; a change that arrived meanwhile stays pending
        if self._state.phase == RefreshPhase.IN_FLIGHT:
            self._transition_to(RefreshPhase.IDLE)
        elif self._state.phase == RefreshPhase.IN_FLIGHT_PENDING:
            self._transition_to(RefreshPhase.PENDING)

    def invalidate(self, *, show_loader: bool = True) -> None:
        """Record a window, cadence or metadata change that needs new data.

        Args:
            show_loader: Hide stale data behind the loader unless a refetch
                is already running (the loader is then already up)
        """
        if self._state.phase in (RefreshPhase.IDLE, RefreshPhase.PENDING):
            self._transition_to(RefreshPhase.PENDING)
            if show_loader:
                self._state.loader_visible = True
        else:
            self._transition_to(RefreshPhase.IN_FLIGHT_PENDING)

    def begin_refetch(self) -> None:
        """Consume the pending flag at the moment of resubscribing.

        Raises:
            RefreshStateError: If nothing was pending.
        """
        if not self._state.pending_refetch:
            raise RefreshStateError(
                f"Cannot begin a refetch from '{self._state.phase.value}'",
                from_phase=self._state.phase.value,
            )
        if self._state.loader_visible:
            self._transition_to(RefreshPhase.IN_FLIGHT)
        else:
            self._transition_to(RefreshPhase.IDLE)

    def on_data(self) -> None:
        """A full result arrived."""
        self._settle()
        self._state.metrics_unavailable = False
        self._state.last_error = None

    def on_complete(self) -> None:
        """The subscription closed; whatever is shown is now current."""
        self._settle()
        self._state.loader_visible = False

    def on_failure(self, error: dict[str, object]) -> None:
        """The subscription failed; clear the loader so the view does not hang."""
        self._settle()
        self._state.loader_visible = False
        self._state.metrics_unavailable = True
        self._state.last_error = error

    def on_resolution_limit(self) -> bool:
        """Disable live polling after a resolution-limit error.

        Returns:
            True if the cadence changed and a retry is now pending, False if
            polling was already disabled (no retry loop).
        """
        self._settle()
        self._state.resolution_limited = True
        if self._state.cadence.is_disabled:
            logger.debug("Resolution limit reported with polling already disabled")
            return False
        logger.warning(
            "Resolution limit reached at %ss cadence; disabling live refresh",
            self._state.cadence.seconds,
        )
        self._state.cadence = DISABLED_CADENCE
        self.invalidate(show_loader=False)
        return True
