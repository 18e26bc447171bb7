"""Events delivered back by the metrics transport.

All events share a common envelope:
- event_type: data, complete or error
- dashboard_id: dashboard the subscription was opened for (optional)
"""

from __future__ import annotations

import logging
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..errors import ErrorCode
from .dashboard import EventAnnotation, MetricSeries, SubscriptionResult

logger = logging.getLogger(__name__)


class SubscriptionEvent(BaseModel):
    """Common envelope for all transport events."""

    model_config = ConfigDict(extra="allow")

    event_type: str = ""
    dashboard_id: str | None = None


class SubscriptionData(SubscriptionEvent):
    """A full result for the current query set."""

    event_type: Literal["data"] = "data"
    metrics: list[MetricSeries] = Field(default_factory=list)
    annotations: list[EventAnnotation] = Field(default_factory=list)

    def to_result(self) -> SubscriptionResult:
        return SubscriptionResult(metrics=self.metrics, annotations=self.annotations)


class SubscriptionComplete(SubscriptionEvent):
    """The subscription closed normally."""

    event_type: Literal["complete"] = "complete"


class SubscriptionError(SubscriptionEvent):
    """The subscription failed upstream.

    reason is a machine-readable code when the transport provides one;
    message is the raw upstream text.
    """

    event_type: Literal["error"] = "error"
    reason: str | None = None
    message: str = ""

    def is_resolution_limit(self, message_fragment: str) -> bool:
        """Whether this error means too many samples for the window/cadence."""
        if self.reason == ErrorCode.RESOLUTION_LIMIT_REACHED.value:
            return True
        return bool(message_fragment) and message_fragment in self.message


def parse_event(data: dict[str, Any]) -> SubscriptionEvent:
    """Parse a raw transport event dict into a typed event model.

    Unknown event types return a generic SubscriptionEvent, which the
    session ignores.
    """
    raw_type = data.get("event_type", "")
    event_type = raw_type if isinstance(raw_type, str) else ""

    event_classes: dict[str, type[SubscriptionEvent]] = {
        "data": SubscriptionData,
        "complete": SubscriptionComplete,
        "error": SubscriptionError,
    }

    event_class = event_classes.get(event_type, SubscriptionEvent)
    try:
        return event_class(**data)
    except ValidationError as e:
        # A data payload we cannot read is reported as a failed subscription
        logger.warning("Malformed %s event from transport: %s", event_type or "?", e)
        dashboard_id = data.get("dashboard_id")
        return SubscriptionError(
            dashboard_id=dashboard_id if isinstance(dashboard_id, str) else None,
            reason=ErrorCode.SUBSCRIPTION_FAILED.value,
            message=f"Malformed {event_type or 'unknown'} event",
        )
