"""Error conventions for the dashboard view engine.

Every error carries a machine-readable code and a category so the HTTP
layer and the display state can report it without string matching.

Usage:
    from src.monitoring.errors import InvalidBrushSelection, ErrorCode

    try:
        brush = BrushSelection.from_pixel_times(start_ms, end_ms)
    except InvalidBrushSelection as e:
        return e.to_response().to_dict()
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ErrorCategory(str, Enum):
    """Categories for error classification.

    - VALIDATION: Caller provided bad input
    - RESOURCE: Something needed is missing or exhausted
    - EXECUTION: The upstream subscription failed
    - SYSTEM: Internal invariant broken
    """

    VALIDATION = "validation"
    RESOURCE = "resource"
    EXECUTION = "execution"
    SYSTEM = "system"


class ErrorCode(str, Enum):
    """Specific error codes for programmatic handling."""

    # Validation errors
    INVALID_BRUSH = "invalid_brush"
    INVALID_WINDOW = "invalid_window"
    INVALID_CADENCE = "invalid_cadence"
    MALFORMED_METADATA = "malformed_metadata"

    # Resource errors
    NO_ACTIVE_DASHBOARD = "no_active_dashboard"
    RESOLUTION_LIMIT_REACHED = "resolution_limit_reached"

    # Execution errors
    SUBSCRIPTION_FAILED = "subscription_failed"

    # System errors
    INVALID_TRANSITION = "invalid_transition"


@dataclass
class ErrorResponse:
    """Standardized error response.

    All error responses include:
    - success: Always False
    - error: Human-readable message
    - code: Machine-readable error code
    - category: Error category (validation, resource, etc.)
    - retriable: Whether repeating the request may succeed
    """

    success: bool = False
    error: str = ""
    code: str = ""
    category: str = ""
    retriable: bool = False
    details: dict[str, object] | None = None

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for serialization."""
        result: dict[str, object] = {
            "success": self.success,
            "error": self.error,
            "code": self.code,
            "category": self.category,
            "retriable": self.retriable,
        }
        if self.details:
            result["details"] = self.details
        return result


class MonitoringError(Exception):
    """Base class for dashboard view errors."""

    code: ErrorCode = ErrorCode.INVALID_TRANSITION
    category: ErrorCategory = ErrorCategory.SYSTEM
    retriable: bool = False

    def __init__(self, message: str, **details: object) -> None:
        super().__init__(message)
        self.message = message
        self.details = dict(details) if details else None

    def to_response(self) -> ErrorResponse:
        """Build the serializable error response for this error."""
        return ErrorResponse(
            error=self.message,
            code=self.code.value,
            category=self.category.value,
            retriable=self.retriable,
            details=self.details,
        )


class InvalidBrushSelection(MonitoringError, ValueError):
    """Brush start is not before its end, or a pixel-time is not finite."""

    code = ErrorCode.INVALID_BRUSH
    category = ErrorCategory.VALIDATION


class InvalidTimeWindow(MonitoringError, ValueError):
    """Absolute start not before end, or a non-positive lookback."""

    code = ErrorCode.INVALID_WINDOW
    category = ErrorCategory.VALIDATION


class InvalidRefreshCadence(MonitoringError, ValueError):
    """Refresh interval that is not a positive number of seconds."""

    code = ErrorCode.INVALID_CADENCE
    category = ErrorCategory.VALIDATION


class MalformedDashboardMetadata(MonitoringError):
    """Dashboard definition without panel groups or a data source."""

    code = ErrorCode.MALFORMED_METADATA
    category = ErrorCategory.VALIDATION


class ResolutionLimitExceeded(MonitoringError):
    """Upstream refused the window/cadence combination (too many samples)."""

    code = ErrorCode.RESOLUTION_LIMIT_REACHED
    category = ErrorCategory.RESOURCE
    retriable = True


class SubscriptionFailure(MonitoringError):
    """Transport-level failure of the live metrics subscription."""

    code = ErrorCode.SUBSCRIPTION_FAILED
    category = ErrorCategory.EXECUTION
    retriable = True


class NoActiveDashboard(MonitoringError, LookupError):
    """An operation needs a selected dashboard and none is selected."""

    code = ErrorCode.NO_ACTIVE_DASHBOARD
    category = ErrorCategory.RESOURCE


class RefreshStateError(MonitoringError, RuntimeError):
    """Refresh phase transition that the state machine does not allow."""

    code = ErrorCode.INVALID_TRANSITION
    category = ErrorCategory.SYSTEM
