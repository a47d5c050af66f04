"""
Audit Models for MoneyFlow

Every state mutation and every call to an external service is logged.
This provides:
1. Traceability of what changed the user's data
2. Debugging information when storage or the AI service misbehaves
3. A record of destructive actions such as clearing all data

DESIGN DECISION: Audit events are append-only. We never modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # State mutations
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_DELETED = "transaction_deleted"
    TRANSACTION_DELETE_MISSED = "transaction_delete_missed"
    SETTINGS_UPDATED = "settings_updated"
    CATEGORIES_UPDATED = "categories_updated"
    DATA_CLEARED = "data_cleared"
    CLEAR_REJECTED = "clear_rejected"

    # Persistence
    STATE_LOADED = "state_loaded"
    STORED_DATA_INVALID = "stored_data_invalid"
    SAVE_FAILED = "save_failed"

    # AI commentary
    COMMENTARY_REQUESTED = "commentary_requested"
    COMMENTARY_GENERATED = "commentary_generated"
    COMMENTARY_UNAVAILABLE = "commentary_unavailable"

    # External services
    EXTERNAL_SERVICE_ERROR = "external_service_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'transaction', 'settings', 'store')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one user session)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
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
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.transaction_added(transaction_id, "EXPENSE", "120000")
        event = AuditEventBuilder.data_cleared(correlation_id)
    """

    @staticmethod
    def transaction_added(
        transaction_id: str,
        transaction_type: str,
        amount: str,
        allocation_days: int = 1,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description=f"{transaction_type.title()} of {amount} added",
            details={
                "type": transaction_type,
                "amount": amount,
                "allocation_days": allocation_days,
            },
            is_user_action=True,
        )

    @staticmethod
    def transaction_deleted(
        transaction_id: str,
        found: bool,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        if not found:
            return AuditEvent(
                event_type=AuditEventType.TRANSACTION_DELETE_MISSED,
                severity=AuditSeverity.WARNING,
                entity_type="transaction",
                entity_id=transaction_id,
                correlation_id=correlation_id,
                description="Delete requested for a transaction that does not exist",
                is_user_action=True,
            )
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_DELETED,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description="Transaction deleted",
            is_user_action=True,
        )

    @staticmethod
    def settings_updated(
        changed_fields: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SETTINGS_UPDATED,
            entity_type="settings",
            correlation_id=correlation_id,
            description=f"Settings updated ({len(changed_fields)} fields changed)",
            details={"changed_fields": changed_fields},
            is_user_action=True,
        )

    @staticmethod
    def categories_updated(
        count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CATEGORIES_UPDATED,
            entity_type="categories",
            correlation_id=correlation_id,
            description=f"Category list replaced ({count} categories)",
            details={"count": count},
            is_user_action=True,
        )

    @staticmethod
    def data_cleared(
        transaction_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATA_CLEARED,
            severity=AuditSeverity.WARNING,
            entity_type="store",
            correlation_id=correlation_id,
            description="All stored data cleared by user",
            details={"transactions_removed": transaction_count},
            is_user_action=True,
        )

    @staticmethod
    def clear_rejected(correlation_id: Optional[UUID] = None) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CLEAR_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="store",
            correlation_id=correlation_id,
            description="Clear-all requested without confirmation; nothing deleted",
            is_user_action=True,
        )

    @staticmethod
    def state_loaded(
        transaction_count: int,
        category_count: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_LOADED,
            entity_type="store",
            description=(
                f"Loaded {transaction_count} transactions and "
                f"{category_count} categories"
            ),
            details={
                "transactions": transaction_count,
                "categories": category_count,
            },
        )

    @staticmethod
    def stored_data_invalid(
        key: str,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORED_DATA_INVALID,
            severity=AuditSeverity.WARNING,
            entity_type="store",
            entity_id=key,
            description=f"Stored value for {key} is unreadable; using defaults",
            error_message=error_message,
        )

    @staticmethod
    def save_failed(
        key: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="store",
            entity_id=key,
            correlation_id=correlation_id,
            description=f"Failed to write {key}",
            error_message=error_message,
        )

    @staticmethod
    def commentary_requested(
        year: int,
        month: int,
        transaction_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.COMMENTARY_REQUESTED,
            entity_type="commentary",
            entity_id=f"{year:04d}-{month:02d}",
            correlation_id=correlation_id,
            description=f"AI commentary requested for {year:04d}-{month:02d}",
            details={"transaction_count": transaction_count},
            is_user_action=True,
        )

    @staticmethod
    def commentary_generated(
        sentiment: str,
        transaction_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.COMMENTARY_GENERATED,
            entity_type="commentary",
            correlation_id=correlation_id,
            description=f"AI commentary generated ({sentiment})",
            details={
                "sentiment": sentiment,
                "transaction_count": transaction_count,
            },
        )

    @staticmethod
    def commentary_unavailable(
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.COMMENTARY_UNAVAILABLE,
            severity=AuditSeverity.WARNING,
            entity_type="commentary",
            correlation_id=correlation_id,
            description="AI commentary unavailable; showing default advisory",
            error_message=reason,
        )

    @staticmethod
    def external_service_error(
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_SERVICE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"External service error: {service}",
            error_message=error_message,
            details={
                "service": service,
            },
            correlation_id=correlation_id,
        )
