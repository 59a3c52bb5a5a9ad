"""
Data Models Package

This package contains all Pydantic models used in Bookkeeper.
Every record stored in a user document conforms to these schemas.
"""

from bookkeeper.models.ledger import (
    Bill,
    BillType,
    Category,
    CategorySummary,
    Comment,
    ErrorKind,
    LedgerResult,
    Reminder,
    SocialPost,
    UserData,
    UserProfile,
    Visibility,
    ensure_utc,
    utc_now,
)
from bookkeeper.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "Bill",
    "BillType",
    "Category",
    "CategorySummary",
    "Comment",
    "ErrorKind",
    "LedgerResult",
    "Reminder",
    "SocialPost",
    "UserData",
    "UserProfile",
    "Visibility",
    "ensure_utc",
    "utc_now",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
