"""
Audit Models for Net Worth

Significant valuation events are recorded as structured events:
1. Which source each rate came from
2. Every provider failure and fallback
3. Every degraded (1:1) conversion, so it can be surfaced to the user

DESIGN DECISION: Audit events are append-only. We never modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Rate sourcing
    RATE_FETCHED = "rate_fetched"
    RATE_CACHE_HIT = "rate_cache_hit"
    PROVIDER_FAILED = "provider_failed"
    DEGRADED_FALLBACK = "degraded_fallback"

    # Conversion
    PINNED_RATE_REJECTED = "pinned_rate_rejected"
    SYNC_CONVERSION_SKIPPED = "sync_conversion_skipped"

    # Valuation
    ENTRY_VALUED = "entry_valued"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """A single audit event."""

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Context - what is this about? ("rate" pairs, "entry" ids)
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None

    correlation_id: Optional[UUID] = Field(
        default=None,
        description="Correlates events of one valuation pass"
    )

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.rate_fetched("USD-EUR", "2024-01-02", 0.91, "primary")
    """

    @staticmethod
    def rate_fetched(
        pair: str,
        on_date: str,
        rate: float,
        provider: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RATE_FETCHED,
            severity=AuditSeverity.DEBUG,
            entity_type="rate",
            entity_id=pair,
            correlation_id=correlation_id,
            description=f"Rate {pair} on {on_date} fetched from {provider}",
            details={"date": on_date, "rate": rate, "provider": provider},
        )

    @staticmethod
    def rate_cache_hit(
        pair: str,
        on_date: str,
        rate: float,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RATE_CACHE_HIT,
            severity=AuditSeverity.DEBUG,
            entity_type="rate",
            entity_id=pair,
            correlation_id=correlation_id,
            description=f"Rate {pair} on {on_date} served from cache",
            details={"date": on_date, "rate": rate},
        )

    @staticmethod
    def provider_failed(
        pair: str,
        on_date: str,
        provider: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PROVIDER_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="rate",
            entity_id=pair,
            correlation_id=correlation_id,
            description=f"Provider {provider} failed for {pair} on {on_date}",
            details={"date": on_date, "provider": provider},
            error_message=error_message,
        )

    @staticmethod
    def degraded_fallback(
        pair: str,
        on_date: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DEGRADED_FALLBACK,
            severity=AuditSeverity.WARNING,
            entity_type="rate",
            entity_id=pair,
            correlation_id=correlation_id,
            description=f"No rate available for {pair} on {on_date}, using 1:1",
            details={"date": on_date},
        )

    @staticmethod
    def pinned_rate_rejected(
        pair: str,
        value: Any,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PINNED_RATE_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="rate",
            entity_id=pair,
            correlation_id=correlation_id,
            description=f"Ignoring unusable pinned rate for {pair}",
            details={"value": repr(value)},
        )

    @staticmethod
    def sync_conversion_skipped(
        pair: str,
        amount: float,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYNC_CONVERSION_SKIPPED,
            severity=AuditSeverity.WARNING,
            entity_type="rate",
            entity_id=pair,
            description=f"No cached rate for {pair}, amount left unconverted",
            details={"amount": amount},
        )

    @staticmethod
    def entry_valued(
        on_date: str,
        preferred_currency: str,
        net_worth: float,
        unconverted_pairs: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTRY_VALUED,
            severity=AuditSeverity.WARNING if unconverted_pairs else AuditSeverity.INFO,
            entity_type="entry",
            entity_id=on_date,
            correlation_id=correlation_id,
            description=f"Entry {on_date} valued in {preferred_currency}",
            details={
                "preferred_currency": preferred_currency,
                "net_worth": net_worth,
                "unconverted_pairs": unconverted_pairs,
            },
        )
