"""Business rule checks."""

from bookkeeper.validation.rules import (
    category_in_use,
    ensure_category_exists,
    ensure_category_unused,
    ensure_content,
    ensure_not_self,
    ensure_unique_account,
    find_category,
    find_profile_by_handle,
    handle_matches,
    is_mutual_friend,
    post_visible,
    same_handle,
)

__all__ = [
    "category_in_use",
    "ensure_category_exists",
    "ensure_category_unused",
    "ensure_content",
    "ensure_not_self",
    "ensure_unique_account",
    "find_category",
    "find_profile_by_handle",
    "handle_matches",
    "is_mutual_friend",
    "post_visible",
    "same_handle",
]
