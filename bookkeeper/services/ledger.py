"""
Ledger Service

The business-logic façade the presentation layer calls into.

DESIGN DECISION: The service holds no user data between calls.
Every operation is one read-modify-write:
1. Load the full user document from storage
2. Check the business rules against it
3. Mutate the in-memory copy
4. Write the full document back

Nothing makes this atomic against a concurrent call for the same user:
two overlapping calls may both read before either writes, and the later
save wins. Registration has the same gap between the uniqueness scan and
the write. addFriend writes two documents one after the other with no
rollback, so a failure in between leaves a one-sided friendship; the
timeline only honors friendships listed on both sides.

Internally the service raises LedgerError subclasses. The
@ledger_operation boundary turns them into a failed LedgerResult, so no
exception crosses into the presentation layer.
"""

import functools
import hashlib
import hmac
from datetime import datetime
from typing import Any, Callable, Optional, TypeVar, Union
from uuid import uuid4

from bookkeeper.audit import AuditLogger
from bookkeeper.models.audit import AuditEvent, AuditEventBuilder
from bookkeeper.models.ledger import (
    Bill,
    BillType,
    Category,
    CategorySummary,
    Comment,
    LedgerResult,
    Reminder,
    SocialPost,
    UserData,
    UserProfile,
    Visibility,
    utc_now,
)
from bookkeeper.queries import aggregates
from bookkeeper.services.errors import (
    BILL_NOT_FOUND,
    INVALID_VISIBILITY,
    LOAD_FRIEND_FAILED,
    LOAD_USER_FAILED,
    POST_NOT_FOUND,
    REMINDER_NOT_FOUND,
    SAVE_FAILED,
    USER_NOT_FOUND,
    WRONG_PASSWORD,
    LedgerError,
    LedgerValidationError,
    NotFoundError,
    PersistenceError,
)
from bookkeeper.services.storage import UserStorageInterface
from bookkeeper.validation import rules


# Seeded into every new account, in this order
DEFAULT_CATEGORIES: tuple[tuple[str, BillType], ...] = (
    ("daily expense", BillType.EXPENSE),
    ("dining", BillType.EXPENSE),
    ("transport", BillType.EXPENSE),
    ("salary", BillType.INCOME),
    ("other", BillType.EXPENSE),
)

RecordT = TypeVar("RecordT", Category, Bill, Reminder)


def new_id() -> str:
    return str(uuid4())


def hash_password(password: str) -> str:
    """SHA-256 hex digest; deterministic so verification is an equality check."""
    return hashlib.sha256(password.encode("utf-8", "surrogatepass")).hexdigest()


def verify_password(password: str, password_hash: str) -> bool:
    return hmac.compare_digest(hash_password(password), password_hash)


def _replace_or_append(records: list[RecordT], record: RecordT) -> None:
    for index, existing in enumerate(records):
        if existing.id == record.id:
            records[index] = record
            return
    records.append(record)


def ledger_operation(method: Callable[..., Any]) -> Callable[..., LedgerResult]:
    """
    Service boundary: run the method, wrap its return value or its
    LedgerError in a LedgerResult.
    """

    @functools.wraps(method)
    def wrapper(self: "LedgerService", *args: Any, **kwargs: Any) -> LedgerResult:
        try:
            value = method(self, *args, **kwargs)
        except LedgerError as e:
            self._audit(
                AuditEventBuilder.operation_failed(
                    operation=method.__name__,
                    error_kind=e.kind.value,
                    error_message=e.message,
                )
            )
            return LedgerResult.fail(e.message, e.kind)
        return LedgerResult.ok(value)

    return wrapper


class LedgerService:
    """
    Registration, authentication, ledger CRUD, aggregation and the
    social timeline on top of a per-user document store.

    Mutating and authenticating operations return a LedgerResult.
    Read-only queries return plain values and degrade to an empty
    result when the user cannot be loaded.
    """

    def __init__(
        self,
        storage: UserStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        """
        Args:
            storage: Per-user document store.
            audit_logger: Receives one event per mutation or failure.
                          If None, nothing is audited.
        """
        self._storage = storage
        self._audit_logger = audit_logger

    @property
    def storage(self) -> UserStorageInterface:
        return self._storage

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _audit(self, event: AuditEvent) -> None:
        if self._audit_logger:
            self._audit_logger.log(event)

    def _load(self, user_id: str, message: str = LOAD_USER_FAILED) -> UserData:
        data = self._storage.load_user(user_id)
        if data is None:
            raise NotFoundError(message)
        return data

    def _save(self, data: UserData) -> None:
        if not self._storage.save_user(data):
            raise PersistenceError(SAVE_FAILED)

    def _find_by_handle(self, handle: str) -> Optional[UserProfile]:
        return rules.find_profile_by_handle(self._storage.list_profiles(), handle)

    # =========================================================================
    # ACCOUNTS
    # =========================================================================

    @ledger_operation
    def register_user(self, username: str, email: str, password: str) -> str:
        """
        Create an account seeded with the default categories.

        Returns (as LedgerResult.value) the new user id.
        Fails with "username exists" / "email exists" (case-insensitive).
        """
        rules.ensure_unique_account(self._storage.list_profiles(), username, email)

        # Another registration may pass the same scan before this write lands
        data = UserData(
            profile=UserProfile(
                id=new_id(),
                username=username,
                email=email,
                password_hash=hash_password(password),
                notifications_enabled=True,
                privacy_level="friends",
            ),
            categories=[
                Category(id=new_id(), name=name, kind=kind)
                for name, kind in DEFAULT_CATEGORIES
            ],
        )
        self._save(data)
        self._audit(AuditEventBuilder.user_registered(data.profile.id, username))
        return data.profile.id

    @ledger_operation
    def authenticate(self, handle: str, password: str) -> UserProfile:
        """
        Match handle against username or email; the first match wins.

        Returns (as LedgerResult.value) the matching UserProfile.
        """
        profile = self._find_by_handle(handle)
        if profile is None:
            raise NotFoundError(USER_NOT_FOUND)
        if not verify_password(password, profile.password_hash):
            raise LedgerValidationError(WRONG_PASSWORD)
        self._audit(AuditEventBuilder.user_authenticated(profile.id))
        return profile

    @ledger_operation
    def update_settings(
        self,
        user_id: str,
        notifications_enabled: bool,
        privacy_level: str,
    ) -> None:
        data = self._load(user_id)
        data.profile.notifications_enabled = notifications_enabled
        data.profile.privacy_level = privacy_level
        self._save(data)
        self._audit(
            AuditEventBuilder.settings_updated(user_id, notifications_enabled, privacy_level)
        )

    @ledger_operation
    def add_friend(self, user_id: str, handle: str) -> None:
        """
        Record a mutual friendship with the user behind handle.

        Both documents are loaded before either is written, so every
        reported error other than a failed save leaves both unchanged.
        The two saves are independent; there is no rollback.
        """
        friend = self._find_by_handle(handle)
        if friend is None:
            raise NotFoundError(USER_NOT_FOUND)
        rules.ensure_not_self(user_id, friend.id)

        user_data = self._load(user_id)
        friend_data = self._load(friend.id, LOAD_FRIEND_FAILED)

        if friend.id not in user_data.profile.friend_ids:
            user_data.profile.friend_ids.append(friend.id)
        if user_id not in friend_data.profile.friend_ids:
            friend_data.profile.friend_ids.append(user_id)

        self._save(user_data)
        self._save(friend_data)
        self._audit(AuditEventBuilder.friend_added(user_id, friend.id))

    def profile(self, user_id: str) -> Optional[UserProfile]:
        data = self._storage.load_user(user_id)
        return data.profile if data is not None else None

    @ledger_operation
    def remove_user(self, user_id: str) -> None:
        if not self._storage.remove_user(user_id):
            raise NotFoundError(USER_NOT_FOUND)
        self._audit(AuditEventBuilder.user_removed(user_id))

    # =========================================================================
    # CATEGORIES
    # =========================================================================

    def categories(self, user_id: str) -> list[Category]:
        data = self._storage.load_user(user_id)
        return data.categories if data is not None else []

    @ledger_operation
    def upsert_category(self, user_id: str, category: Category) -> Category:
        """Insert, or replace the category with the same id. An empty id gets a fresh one."""
        data = self._load(user_id)
        updated = category.model_copy(deep=True)
        if not updated.id:
            updated.id = new_id()

        _replace_or_append(data.categories, updated)
        self._save(data)
        self._audit(AuditEventBuilder.record_saved("category", user_id, updated.id))
        return updated

    @ledger_operation
    def remove_category(self, user_id: str, category_id: str) -> None:
        """
        Fails with "category in use" while any bill references the category.
        Removing an unknown id is not an error.
        """
        data = self._load(user_id)
        rules.ensure_category_unused(data, category_id)

        remaining = [c for c in data.categories if c.id != category_id]
        removed = len(remaining) != len(data.categories)
        data.categories = remaining
        self._save(data)
        if removed:
            self._audit(AuditEventBuilder.record_deleted("category", user_id, category_id))

    # =========================================================================
    # BILLS
    # =========================================================================

    def bills(self, user_id: str) -> list[Bill]:
        data = self._storage.load_user(user_id)
        return data.bills if data is not None else []

    @ledger_operation
    def upsert_bill(self, user_id: str, bill: Bill) -> Bill:
        """
        Insert or replace a bill.

        An empty id gets a fresh one and a missing timestamp becomes now.
        Fails with "category not found" unless category_id names one of
        the user's categories.
        """
        data = self._load(user_id)
        updated = bill.model_copy(deep=True)
        if not updated.id:
            updated.id = new_id()
        if updated.timestamp is None:
            updated.timestamp = utc_now()

        rules.ensure_category_exists(data, updated.category_id)

        _replace_or_append(data.bills, updated)
        self._save(data)
        self._audit(AuditEventBuilder.record_saved("bill", user_id, updated.id))
        return updated

    @ledger_operation
    def remove_bill(self, user_id: str, bill_id: str) -> None:
        data = self._load(user_id)
        remaining = [b for b in data.bills if b.id != bill_id]
        if len(remaining) == len(data.bills):
            raise NotFoundError(BILL_NOT_FOUND)
        data.bills = remaining
        self._save(data)
        self._audit(AuditEventBuilder.record_deleted("bill", user_id, bill_id))

    # =========================================================================
    # AGGREGATION
    # =========================================================================

    def summarize_by_category(self, user_id: str) -> list[CategorySummary]:
        data = self._storage.load_user(user_id)
        if data is None:
            return []
        return aggregates.summarize_by_category(data)

    def total_income(self, user_id: str) -> float:
        return aggregates.total_income(self.bills(user_id))

    def total_expense(self, user_id: str) -> float:
        return aggregates.total_expense(self.bills(user_id))

    # =========================================================================
    # REMINDERS
    # =========================================================================

    def reminders(self, user_id: str) -> list[Reminder]:
        data = self._storage.load_user(user_id)
        return data.reminders if data is not None else []

    @ledger_operation
    def upsert_reminder(self, user_id: str, reminder: Reminder) -> Reminder:
        """Insert or replace a reminder; fills in a missing id and trigger time."""
        data = self._load(user_id)
        updated = reminder.model_copy(deep=True)
        if not updated.id:
            updated.id = new_id()
        if updated.remind_at is None:
            updated.remind_at = utc_now()

        _replace_or_append(data.reminders, updated)
        self._save(data)
        self._audit(AuditEventBuilder.record_saved("reminder", user_id, updated.id))
        return updated

    @ledger_operation
    def remove_reminder(self, user_id: str, reminder_id: str) -> None:
        data = self._load(user_id)
        remaining = [r for r in data.reminders if r.id != reminder_id]
        if len(remaining) == len(data.reminders):
            raise NotFoundError(REMINDER_NOT_FOUND)
        data.reminders = remaining
        self._save(data)
        self._audit(AuditEventBuilder.record_deleted("reminder", user_id, reminder_id))

    def upcoming_reminders(
        self,
        user_id: str,
        start: datetime,
        end: datetime,
    ) -> list[Reminder]:
        """Enabled reminders due within [start, end], in store order."""
        return aggregates.reminders_between(self.reminders(user_id), start, end)

    # =========================================================================
    # SOCIAL
    # =========================================================================

    @ledger_operation
    def publish_post(
        self,
        user_id: str,
        content: str,
        visibility: Union[Visibility, str] = Visibility.PUBLIC,
    ) -> SocialPost:
        rules.ensure_content(content)
        try:
            visibility = Visibility(visibility)
        except ValueError:
            raise LedgerValidationError(INVALID_VISIBILITY)

        data = self._load(user_id)
        post = SocialPost(
            id=new_id(),
            author_id=user_id,
            content=content,
            visibility=visibility,
            created_at=utc_now(),
        )
        data.posts.append(post)
        self._save(data)
        self._audit(AuditEventBuilder.post_published(user_id, post.id, visibility.value))
        return post

    @ledger_operation
    def add_comment(
        self,
        user_id: str,
        post_owner_id: str,
        post_id: str,
        content: str,
    ) -> Comment:
        """
        Append a comment by user_id to a post of post_owner_id.

        The comment is stored in the post owner's document.
        """
        rules.ensure_content(content)
        owner_data = self._load(post_owner_id)

        post = next((p for p in owner_data.posts if p.id == post_id), None)
        if post is None:
            raise NotFoundError(POST_NOT_FOUND)

        comment = Comment(
            id=new_id(),
            author_id=user_id,
            content=content,
            created_at=utc_now(),
        )
        post.comments.append(comment)
        self._save(owner_data)
        self._audit(
            AuditEventBuilder.comment_added(user_id, post_owner_id, post_id, comment.id)
        )
        return comment

    def timeline(self, user_id: str) -> list[SocialPost]:
        """
        The viewer's own posts plus every other user's visible posts,
        newest first.

        Public posts are visible to everyone; friends-only posts only
        when both users list each other. Scans every user document.
        """
        viewer = self._storage.load_user(user_id)
        if viewer is None:
            return []

        posts = list(viewer.posts)
        for profile in self._storage.list_profiles():
            if profile.id == user_id:
                continue
            author = self._storage.load_user(profile.id)
            if author is None:
                continue

            is_friend = rules.is_mutual_friend(viewer.profile, author.profile)
            posts.extend(
                post for post in author.posts if rules.post_visible(post, is_friend)
            )

        return aggregates.newest_first(posts)
