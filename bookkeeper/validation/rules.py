"""
Business Rules

The checks the ledger service runs before it writes a document back.

DESIGN DECISION: Every rule is a plain function over already-loaded data.
A rule either returns or raises a LedgerError carrying the exact message
the service reports, so the service body reads as a list of checks
followed by a single mutation.

Rules here NEVER fix data. A dangling reference is reported, not repaired.
"""

from typing import Iterable, Optional

from bookkeeper.models.ledger import (
    Category,
    SocialPost,
    UserData,
    UserProfile,
    Visibility,
)
from bookkeeper.services.errors import (
    CANNOT_ADD_SELF,
    CATEGORY_IN_USE,
    CATEGORY_NOT_FOUND,
    CONTENT_EMPTY,
    EMAIL_EXISTS,
    USERNAME_EXISTS,
    ConflictError,
    LedgerValidationError,
)


# =============================================================================
# ACCOUNTS
# =============================================================================

def same_handle(a: str, b: str) -> bool:
    """Case-insensitive comparison used for usernames and emails."""
    return a.casefold() == b.casefold()


def handle_matches(profile: UserProfile, handle: str) -> bool:
    """A handle is either the username or the email of a profile."""
    return same_handle(profile.username, handle) or same_handle(profile.email, handle)


def find_profile_by_handle(
    profiles: Iterable[UserProfile],
    handle: str,
) -> Optional[UserProfile]:
    """First profile whose username or email matches; None if no match."""
    for profile in profiles:
        if handle_matches(profile, handle):
            return profile
    return None


def ensure_unique_account(
    profiles: Iterable[UserProfile],
    username: str,
    email: str,
) -> None:
    """
    Reject a registration whose username or email is taken.

    Raises:
        ConflictError: "username exists" or "email exists"
    """
    for profile in profiles:
        if same_handle(profile.username, username):
            raise ConflictError(USERNAME_EXISTS)
        if same_handle(profile.email, email):
            raise ConflictError(EMAIL_EXISTS)


def ensure_not_self(user_id: str, friend_id: str) -> None:
    if user_id == friend_id:
        raise LedgerValidationError(CANNOT_ADD_SELF)


# =============================================================================
# LEDGER RECORDS
# =============================================================================

def find_category(data: UserData, category_id: str) -> Optional[Category]:
    for category in data.categories:
        if category.id == category_id:
            return category
    return None


def ensure_category_exists(data: UserData, category_id: str) -> Category:
    """
    Raises:
        LedgerValidationError: "category not found"
    """
    category = find_category(data, category_id)
    if category is None:
        raise LedgerValidationError(CATEGORY_NOT_FOUND)
    return category


def category_in_use(data: UserData, category_id: str) -> bool:
    return any(bill.category_id == category_id for bill in data.bills)


def ensure_category_unused(data: UserData, category_id: str) -> None:
    """
    Raises:
        LedgerValidationError: "category in use"
    """
    if category_in_use(data, category_id):
        raise LedgerValidationError(CATEGORY_IN_USE)


# =============================================================================
# SOCIAL
# =============================================================================

def ensure_content(content: str) -> None:
    """Posts and comments need non-whitespace content."""
    if not content.strip():
        raise LedgerValidationError(CONTENT_EMPTY)


def is_mutual_friend(viewer: UserProfile, author: UserProfile) -> bool:
    """
    Friendship is honored only when both profiles list each other.

    A friend addition that saved only one side is not enough.
    """
    return author.id in viewer.friend_ids and viewer.id in author.friend_ids


def post_visible(post: SocialPost, is_friend: bool) -> bool:
    if post.visibility == Visibility.PUBLIC:
        return True
    return post.visibility == Visibility.FRIENDS and is_friend
