"""
Audit Logger

DESIGN DECISION: Every rate decision the engine makes is logged.
This provides:
1. Traceability of which rate produced which total
2. Visibility of degraded (1:1) conversions
3. Debugging capability when providers misbehave

The audit logger:
- Never raises (logging must not break a valuation)
- Keeps a bounded in-memory history callers can inspect
- Supports correlation IDs to trace one valuation pass
"""

from collections import deque
from typing import Optional
from uuid import UUID, uuid4

import structlog

from networth.models.audit import AuditEvent, AuditEventType


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events to the structured local log and remembers the most
    recent ones in memory.
    """

    def __init__(self, history_size: int = 500):
        self._history: deque[AuditEvent] = deque(maxlen=history_size)
        self._logger = structlog.get_logger("networth.audit")

    def log(self, event: AuditEvent) -> None:
        """Log an audit event locally and record it in the history."""
        self._history.append(event)

        log_dict = event.to_log_dict()
        severity = event.severity.value

        if severity == "error":
            self._logger.error("audit_event", **log_dict)
        elif severity == "warning":
            self._logger.warning("audit_event", **log_dict)
        elif severity == "debug":
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

    def recent_events(
        self,
        event_type: Optional[AuditEventType] = None,
        correlation_id: Optional[UUID] = None,
    ) -> list[AuditEvent]:
        """Recorded events, oldest first, optionally filtered."""
        events = list(self._history)
        if event_type is not None:
            events = [e for e in events if e.event_type == event_type]
        if correlation_id is not None:
            events = [e for e in events if e.correlation_id == correlation_id]
        return events

    def clear(self) -> None:
        self._history.clear()


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use one per valuation pass and pass it through every conversion.
    """
    return uuid4()
