"""
Core Data Models for Bookkeeper

These models define the schemas for everything stored in a user document.
They are designed to:
1. Enforce type safety at runtime
2. Be serializable through the record codec
3. Compare by value, so a decoded document equals the one that was encoded

DESIGN DECISION: An invalid or missing timestamp is represented as None
rather than raising. Naive datetimes are interpreted as UTC so that every
timestamp in the system can be compared with every other one.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class BillType(str, Enum):
    """Income/expense discriminator shared by categories and bills."""
    INCOME = "income"
    EXPENSE = "expense"


class Visibility(str, Enum):
    """Who may see a social post besides its author."""
    PUBLIC = "public"
    FRIENDS = "friends"


class ErrorKind(str, Enum):
    """
    Failure taxonomy reported at the service boundary.

    None of these are fatal; the caller decides whether to retry.
    """
    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    CONFLICT = "conflict"
    IO = "io"


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes; None stays the invalid sentinel."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class LedgerModel(BaseModel):
    """Base for all stored entities."""
    model_config = ConfigDict(validate_assignment=True)


# =============================================================================
# LEDGER ENTITIES
# =============================================================================

class Category(LedgerModel):
    """
    A user-defined spending or income category.

    id is unique within one user document; names may repeat.
    """
    id: str = Field(default="", description="Category ID (empty = assign on save)")
    name: str = Field(default="", description="Display name")
    kind: BillType = Field(default=BillType.EXPENSE, description="income or expense")


class Bill(LedgerModel):
    """
    One income or expense transaction.

    category_id must name an existing category of the same user at write time.
    """
    id: str = Field(default="", description="Bill ID (empty = assign on save)")
    amount: float = Field(
        default=0.0,
        ge=0,
        allow_inf_nan=False,
        description="Non-negative, finite amount"
    )
    category_id: str = Field(default="", description="Referenced category")
    note: str = Field(default="", description="Free-text note")
    timestamp: Optional[datetime] = Field(
        default=None,
        description="When the transaction happened (None = invalid, set to now on save)"
    )
    kind: BillType = Field(default=BillType.EXPENSE)

    @field_validator("timestamp")
    @classmethod
    def normalize_timestamp(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)


class Reminder(LedgerModel):
    """A user reminder with a trigger time."""
    id: str = ""
    message: str = ""
    remind_at: Optional[datetime] = Field(
        default=None,
        description="Trigger time (None = invalid, set to now on save)"
    )
    enabled: bool = True

    @field_validator("remind_at")
    @classmethod
    def normalize_remind_at(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)


class Comment(LedgerModel):
    """
    A comment under a social post.

    author_id is a foreign user identifier and is not validated locally.
    """
    id: str = ""
    author_id: str = ""
    content: str = ""
    created_at: Optional[datetime] = None

    @field_validator("created_at")
    @classmethod
    def normalize_created_at(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)


class SocialPost(LedgerModel):
    """
    A post on the social timeline.

    Comments are append-only and kept in insertion order.
    """
    id: str = ""
    author_id: str = ""
    content: str = ""
    visibility: Visibility = Visibility.PUBLIC
    created_at: Optional[datetime] = None
    comments: list[Comment] = Field(default_factory=list)

    @field_validator("created_at")
    @classmethod
    def normalize_created_at(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)


class UserProfile(LedgerModel):
    """
    Account data and friend graph of one user.

    username and email are globally unique (case-insensitive).
    Friendship is symmetric: if A lists B, B must list A.
    """
    id: str = ""
    username: str = ""
    email: str = ""
    password_hash: str = ""
    notifications_enabled: bool = True
    privacy_level: str = "friends"
    friend_ids: list[str] = Field(default_factory=list)


class UserData(LedgerModel):
    """
    Everything one user owns.

    This is the unit of persistence: it is loaded and saved as a whole.
    """
    profile: UserProfile = Field(default_factory=UserProfile)
    categories: list[Category] = Field(default_factory=list)
    bills: list[Bill] = Field(default_factory=list)
    reminders: list[Reminder] = Field(default_factory=list)
    posts: list[SocialPost] = Field(default_factory=list)


# =============================================================================
# RESULT MODELS
# =============================================================================

class CategorySummary(BaseModel):
    """Income and expense totals of one category."""
    category_id: str
    name: str
    income: float = 0.0
    expense: float = 0.0


class LedgerResult(BaseModel):
    """
    Outcome of a service operation.

    Every mutating or authenticating call returns one of these instead of
    raising, so the presentation layer only ever inspects plain values.
    """
    success: bool
    error_message: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    value: Any = None

    def __bool__(self) -> bool:
        return self.success

    @classmethod
    def ok(cls, value: Any = None) -> "LedgerResult":
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, message: str, kind: ErrorKind) -> "LedgerResult":
        return cls(success=False, error_message=message, error_kind=kind)
