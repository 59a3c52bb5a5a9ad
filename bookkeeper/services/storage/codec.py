"""
Record Codec

Maps every ledger entity to and from a field-named JSON object.

DESIGN DECISION: Each entity has an explicit field table
(document key -> model attribute, reader, writer, default).
Decoding walks the table, so a missing or malformed field resolves to
the default listed next to it instead of fallback logic scattered
through the code. Decoding never raises for any JSON value.

Document keys keep the camelCase names of the existing on-disk format.
"""

import json
import math
from datetime import datetime
from typing import Any, Callable, NamedTuple, Optional

from bookkeeper.models.ledger import (
    Bill,
    BillType,
    Category,
    Comment,
    LedgerModel,
    Reminder,
    SocialPost,
    UserData,
    UserProfile,
    Visibility,
    ensure_utc,
)
from bookkeeper.services.storage.interface import DocumentFormatError


# =============================================================================
# FIELD READERS - (raw value, default) -> decoded value, never raise
# =============================================================================

def _read_text(raw: Any, default: str) -> str:
    return raw if isinstance(raw, str) else default


def _read_amount(raw: Any, default: float) -> float:
    # bool is an int subclass; it is not a number here
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        return default
    try:
        value = float(raw)
    except OverflowError:
        return default
    if not math.isfinite(value) or value < 0:
        return default
    return value


def _read_flag(raw: Any, default: bool) -> bool:
    return raw if isinstance(raw, bool) else default


def _read_timestamp(raw: Any, default: Optional[datetime]) -> Optional[datetime]:
    if not isinstance(raw, str) or not raw:
        return default
    text = raw[:-1] + "+00:00" if raw.endswith("Z") else raw
    try:
        return ensure_utc(datetime.fromisoformat(text))
    except ValueError:
        return default


def _read_kind(raw: Any, default: BillType) -> BillType:
    try:
        return BillType(raw)
    except (ValueError, TypeError):
        return default


def _read_visibility(raw: Any, default: Visibility) -> Visibility:
    try:
        return Visibility(raw)
    except (ValueError, TypeError):
        return default


def _read_string_list(raw: Any, default: Any) -> list[str]:
    if not isinstance(raw, list):
        return []
    return [item for item in raw if isinstance(item, str)]


def _read_comments(raw: Any, default: Any) -> list[Comment]:
    if not isinstance(raw, list):
        return []
    return [decode_comment(item) for item in raw]


# =============================================================================
# FIELD WRITERS
# =============================================================================

def _write_plain(value: Any) -> Any:
    return value


def _write_timestamp(value: Optional[datetime]) -> str:
    return value.isoformat() if value is not None else ""


def _write_enum(value: Any) -> str:
    return value.value


def _write_list(value: list) -> list:
    return list(value)


def _write_comments(value: list[Comment]) -> list[dict]:
    return [encode_comment(comment) for comment in value]


class FieldSpec(NamedTuple):
    """One row of an entity's defaulting table."""
    key: str
    attr: str
    read: Callable[[Any, Any], Any]
    write: Callable[[Any], Any]
    default: Any


def _text(key: str, attr: str) -> FieldSpec:
    return FieldSpec(key, attr, _read_text, _write_plain, "")


def _timestamp(key: str, attr: str) -> FieldSpec:
    return FieldSpec(key, attr, _read_timestamp, _write_timestamp, None)


# =============================================================================
# DEFAULTING TABLES
# =============================================================================

CATEGORY_FIELDS: tuple[FieldSpec, ...] = (
    _text("id", "id"),
    _text("name", "name"),
    FieldSpec("type", "kind", _read_kind, _write_enum, BillType.EXPENSE),
)

BILL_FIELDS: tuple[FieldSpec, ...] = (
    _text("id", "id"),
    FieldSpec("amount", "amount", _read_amount, _write_plain, 0.0),
    _text("categoryId", "category_id"),
    _text("note", "note"),
    _timestamp("timestamp", "timestamp"),
    FieldSpec("type", "kind", _read_kind, _write_enum, BillType.EXPENSE),
)

REMINDER_FIELDS: tuple[FieldSpec, ...] = (
    _text("id", "id"),
    _text("message", "message"),
    _timestamp("remindAt", "remind_at"),
    FieldSpec("enabled", "enabled", _read_flag, _write_plain, True),
)

COMMENT_FIELDS: tuple[FieldSpec, ...] = (
    _text("id", "id"),
    _text("authorId", "author_id"),
    _text("content", "content"),
    _timestamp("createdAt", "created_at"),
)

POST_FIELDS: tuple[FieldSpec, ...] = (
    _text("id", "id"),
    _text("authorId", "author_id"),
    _text("content", "content"),
    FieldSpec(
        "visibility", "visibility", _read_visibility, _write_enum, Visibility.PUBLIC
    ),
    _timestamp("createdAt", "created_at"),
    FieldSpec("comments", "comments", _read_comments, _write_comments, ()),
)

PROFILE_FIELDS: tuple[FieldSpec, ...] = (
    _text("id", "id"),
    _text("username", "username"),
    _text("email", "email"),
    _text("passwordHash", "password_hash"),
    FieldSpec(
        "notificationsEnabled", "notifications_enabled", _read_flag, _write_plain, True
    ),
    FieldSpec("privacyLevel", "privacy_level", _read_text, _write_plain, "friends"),
    FieldSpec("friendIds", "friend_ids", _read_string_list, _write_list, ()),
)


def _encode(entity: LedgerModel, table: tuple[FieldSpec, ...]) -> dict:
    return {spec.key: spec.write(getattr(entity, spec.attr)) for spec in table}


def _decode(model_cls: type, table: tuple[FieldSpec, ...], obj: Any) -> Any:
    if not isinstance(obj, dict):
        obj = {}
    # Readers map a missing key (None) to the default like any other bad value
    values = {spec.attr: spec.read(obj.get(spec.key), spec.default) for spec in table}
    return model_cls(**values)


# =============================================================================
# ENTITY CODECS
# =============================================================================

def encode_category(category: Category) -> dict:
    return _encode(category, CATEGORY_FIELDS)


def decode_category(obj: Any) -> Category:
    return _decode(Category, CATEGORY_FIELDS, obj)


def encode_bill(bill: Bill) -> dict:
    return _encode(bill, BILL_FIELDS)


def decode_bill(obj: Any) -> Bill:
    return _decode(Bill, BILL_FIELDS, obj)


def encode_reminder(reminder: Reminder) -> dict:
    return _encode(reminder, REMINDER_FIELDS)


def decode_reminder(obj: Any) -> Reminder:
    return _decode(Reminder, REMINDER_FIELDS, obj)


def encode_comment(comment: Comment) -> dict:
    return _encode(comment, COMMENT_FIELDS)


def decode_comment(obj: Any) -> Comment:
    return _decode(Comment, COMMENT_FIELDS, obj)


def encode_post(post: SocialPost) -> dict:
    return _encode(post, POST_FIELDS)


def decode_post(obj: Any) -> SocialPost:
    return _decode(SocialPost, POST_FIELDS, obj)


def encode_profile(profile: UserProfile) -> dict:
    return _encode(profile, PROFILE_FIELDS)


def decode_profile(obj: Any) -> UserProfile:
    return _decode(UserProfile, PROFILE_FIELDS, obj)


# =============================================================================
# WHOLE DOCUMENT
# =============================================================================

def _decode_section(obj: dict, key: str, decoder: Callable[[Any], Any]) -> list:
    items = obj.get(key)
    if not isinstance(items, list):
        return []
    return [decoder(item) for item in items]


def encode_document(data: UserData) -> dict:
    """Top-level sections: profile, categories, bills, reminders, posts."""
    return {
        "profile": encode_profile(data.profile),
        "categories": [encode_category(c) for c in data.categories],
        "bills": [encode_bill(b) for b in data.bills],
        "reminders": [encode_reminder(r) for r in data.reminders],
        "posts": [encode_post(p) for p in data.posts],
    }


def decode_document(obj: Any) -> UserData:
    if not isinstance(obj, dict):
        obj = {}
    return UserData(
        profile=decode_profile(obj.get("profile")),
        categories=_decode_section(obj, "categories", decode_category),
        bills=_decode_section(obj, "bills", decode_bill),
        reminders=_decode_section(obj, "reminders", decode_reminder),
        posts=_decode_section(obj, "posts", decode_post),
    )


def dumps_document(data: UserData) -> str:
    """Serialize a document to indented, ASCII-only JSON."""
    # ASCII output keeps lone surrogates writable as \u escapes
    return json.dumps(encode_document(data), ensure_ascii=True, indent=4)


def parse_document_text(text: str) -> dict:
    """
    Parse raw file content into a document object.

    Raises:
        DocumentFormatError: If the text is not a JSON object
    """
    try:
        obj = json.loads(text)
    except ValueError as e:
        raise DocumentFormatError(f"Document is not valid JSON: {e}")
    if not isinstance(obj, dict):
        raise DocumentFormatError(
            f"Document root must be an object, got {type(obj).__name__}"
        )
    return obj


def loads_document(text: str) -> UserData:
    """
    Parse and decode a whole user document.

    Raises:
        DocumentFormatError: If the text is not a JSON object
    """
    return decode_document(parse_document_text(text))
