"""
Audit Models for Bookkeeper

Every mutation of a user document is logged for audit purposes.
This provides:
1. Traceability of who changed which record
2. Debugging information when a save fails
3. A record of partial failures in multi-document operations

DESIGN DECISION: Audit events never contain passwords or password hashes.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from bookkeeper.models.ledger import utc_now


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Accounts
    USER_REGISTERED = "user_registered"
    USER_AUTHENTICATED = "user_authenticated"
    SETTINGS_UPDATED = "settings_updated"
    USER_REMOVED = "user_removed"

    # Social graph
    FRIEND_ADDED = "friend_added"
    POST_PUBLISHED = "post_published"
    COMMENT_ADDED = "comment_added"

    # Ledger records
    CATEGORY_SAVED = "category_saved"
    CATEGORY_DELETED = "category_deleted"
    BILL_SAVED = "bill_saved"
    BILL_DELETED = "bill_deleted"
    REMINDER_SAVED = "reminder_saved"
    REMINDER_DELETED = "reminder_deleted"

    # Failures
    OPERATION_FAILED = "operation_failed"


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

    Every service operation that changes a document creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Context - who acted, and on what entity
    user_id: Optional[str] = Field(
        default=None,
        description="Acting user"
    )
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'bill', 'category', 'post')"
    )
    entity_id: Optional[str] = None

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)

    # Error information (if applicable)
    error_kind: Optional[str] = None
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "user_id": self.user_id,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_kind": self.error_kind,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.user_registered(user_id, username)
        event = AuditEventBuilder.record_saved("bill", user_id, bill_id)
    """

    _SAVED = {
        "category": AuditEventType.CATEGORY_SAVED,
        "bill": AuditEventType.BILL_SAVED,
        "reminder": AuditEventType.REMINDER_SAVED,
    }
    _DELETED = {
        "category": AuditEventType.CATEGORY_DELETED,
        "bill": AuditEventType.BILL_DELETED,
        "reminder": AuditEventType.REMINDER_DELETED,
    }

    @staticmethod
    def user_registered(user_id: str, username: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_REGISTERED,
            user_id=user_id,
            entity_type="user",
            entity_id=user_id,
            description=f"User registered: {username}",
            details={"username": username},
        )

    @staticmethod
    def user_authenticated(user_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_AUTHENTICATED,
            user_id=user_id,
            entity_type="user",
            entity_id=user_id,
            description="User authenticated",
        )

    @staticmethod
    def settings_updated(
        user_id: str,
        notifications_enabled: bool,
        privacy_level: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SETTINGS_UPDATED,
            user_id=user_id,
            entity_type="user",
            entity_id=user_id,
            description="Notification and privacy settings updated",
            details={
                "notifications_enabled": notifications_enabled,
                "privacy_level": privacy_level,
            },
        )

    @staticmethod
    def user_removed(user_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_REMOVED,
            severity=AuditSeverity.WARNING,
            user_id=user_id,
            entity_type="user",
            entity_id=user_id,
            description="User document removed",
        )

    @staticmethod
    def friend_added(user_id: str, friend_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.FRIEND_ADDED,
            user_id=user_id,
            entity_type="user",
            entity_id=friend_id,
            description="Mutual friendship recorded",
        )

    @staticmethod
    def record_saved(entity_type: str, user_id: str, entity_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventBuilder._SAVED[entity_type],
            user_id=user_id,
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{entity_type.capitalize()} saved",
        )

    @staticmethod
    def record_deleted(entity_type: str, user_id: str, entity_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventBuilder._DELETED[entity_type],
            user_id=user_id,
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{entity_type.capitalize()} deleted",
        )

    @staticmethod
    def post_published(user_id: str, post_id: str, visibility: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.POST_PUBLISHED,
            user_id=user_id,
            entity_type="post",
            entity_id=post_id,
            description=f"Post published ({visibility})",
            details={"visibility": visibility},
        )

    @staticmethod
    def comment_added(
        user_id: str,
        post_owner_id: str,
        post_id: str,
        comment_id: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.COMMENT_ADDED,
            user_id=user_id,
            entity_type="comment",
            entity_id=comment_id,
            description="Comment added to post",
            details={
                "post_owner_id": post_owner_id,
                "post_id": post_id,
            },
        )

    @staticmethod
    def operation_failed(
        operation: str,
        error_kind: str,
        error_message: str,
        user_id: Optional[str] = None,
    ) -> AuditEvent:
        # I/O failures are the only ones not caused by caller input
        severity = (
            AuditSeverity.ERROR if error_kind == "io" else AuditSeverity.WARNING
        )
        return AuditEvent(
            event_type=AuditEventType.OPERATION_FAILED,
            severity=severity,
            user_id=user_id,
            description=f"Operation failed: {operation}",
            details={"operation": operation},
            error_kind=error_kind,
            error_message=error_message,
        )
