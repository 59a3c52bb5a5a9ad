"""Tests for accounts, ledger records and aggregation in the ledger service."""

import threading
from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest

from bookkeeper.audit import AuditLogger
from bookkeeper.models.ledger import (
    Bill,
    BillType,
    Category,
    ErrorKind,
    Reminder,
    UserData,
)
from bookkeeper.services.ledger import (
    DEFAULT_CATEGORIES,
    LedgerService,
    hash_password,
    verify_password,
)
from bookkeeper.services.storage import JsonUserStore


NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def category_id(service: LedgerService, user_id: str, name: str) -> str:
    return next(c.id for c in service.categories(user_id) if c.name == name)


class FailingSaveStore(JsonUserStore):
    """Saves succeed until fail_after saves have happened."""

    def __init__(self, data_dir, fail_after: Optional[int] = None):
        super().__init__(data_dir)
        self.fail_after = fail_after
        self.saves = 0

    def save_user(self, data: UserData) -> bool:
        if self.fail_after is not None and self.saves >= self.fail_after:
            return False
        self.saves += 1
        return super().save_user(data)


class TestPasswords:
    def test_hash_is_sha256_hex(self):
        assert hash_password("pw") == (
            "30c952fab122c3f9759f02a6d95c3758b246b4fee239957b2d4fee46e26170c4"
        )

    def test_verify(self):
        assert verify_password("pw", hash_password("pw"))
        assert not verify_password("other", hash_password("pw"))

    def test_lone_surrogate_password(self, service):
        result = service.register_user("alice", "alice@example.com", "pw\ud800")
        assert result.success
        assert service.authenticate("alice", "pw\ud800").success
        assert service.authenticate("alice", "pw").error_message == "wrong password"


class TestRegistration:
    """Tests for register_user."""

    def test_register_seeds_default_categories(self, service, register):
        user_id = register("alice")
        categories = service.categories(user_id)
        assert [(c.name, c.kind) for c in categories] == list(DEFAULT_CATEGORIES)
        assert len({c.id for c in categories}) == 5
        assert all(c.id for c in categories)

    def test_register_stores_hash_not_password(self, service, register):
        user_id = register("alice", "secret")
        profile = service.profile(user_id)
        assert profile.password_hash == hash_password("secret")
        assert profile.notifications_enabled is True
        assert profile.privacy_level == "friends"

    def test_duplicate_username(self, service, register):
        register("alice")
        result = service.register_user("ALICE", "other@example.com", "pw")
        assert not result.success
        assert result.error_message == "username exists"
        assert result.error_kind == ErrorKind.CONFLICT

    def test_duplicate_email(self, service, register):
        register("alice")
        result = service.register_user("alicia", "Alice@Example.com", "pw")
        assert result.error_message == "email exists"

    def test_register_audited(self, service, register, audit_recorder):
        register("alice")
        assert audit_recorder.event_types() == ["user_registered"]

    def test_save_failure(self, data_dir):
        service = LedgerService(FailingSaveStore(data_dir, fail_after=0))
        result = service.register_user("alice", "alice@example.com", "pw")
        assert result.error_message == "failed to save user data"
        assert result.error_kind == ErrorKind.IO

    def test_concurrent_registration_is_not_prevented(self, store, monkeypatch):
        """Both callers pass the uniqueness scan before either writes."""
        service = LedgerService(store)
        barrier = threading.Barrier(2, timeout=5)
        original = store.list_profiles

        def list_then_wait():
            profiles = original()
            barrier.wait()
            return profiles

        monkeypatch.setattr(store, "list_profiles", list_then_wait)
        results = []

        def attempt():
            results.append(service.register_user("alice", "alice@example.com", "pw"))

        threads = [threading.Thread(target=attempt) for _ in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(5)

        monkeypatch.setattr(store, "list_profiles", original)
        assert all(result.success for result in results)
        assert len(store.list_profiles()) == 2


class TestAuthentication:
    """Tests for authenticate."""

    def test_by_username(self, service, register):
        user_id = register("alice")
        result = service.authenticate("alice", "pw")
        assert result.success
        assert result.value.id == user_id

    def test_by_email_case_insensitive(self, service, register):
        user_id = register("alice")
        assert service.authenticate("ALICE@example.com", "pw").value.id == user_id

    def test_unknown_user(self, service, register):
        register("alice")
        result = service.authenticate("bob", "pw")
        assert result.error_message == "user not found"
        assert result.error_kind == ErrorKind.NOT_FOUND

    def test_wrong_password(self, service, register):
        register("alice")
        result = service.authenticate("alice", "nope")
        assert result.error_message == "wrong password"
        assert result.error_kind == ErrorKind.VALIDATION

    def test_failure_is_audited(self, service, register, audit_recorder):
        register("alice")
        service.authenticate("alice", "nope")
        level, _, fields = audit_recorder.records[-1]
        assert level == "warning"
        assert fields["event_type"] == "operation_failed"
        assert fields["details"]["operation"] == "authenticate"


class TestSettingsAndRemoval:
    def test_update_settings(self, service, register):
        user_id = register("alice")
        assert service.update_settings(user_id, False, "public").success
        profile = service.profile(user_id)
        assert profile.notifications_enabled is False
        assert profile.privacy_level == "public"

    def test_update_settings_unknown_user(self, service):
        result = service.update_settings("missing", True, "friends")
        assert result.error_message == "failed to load user"

    def test_remove_user(self, service, register):
        user_id = register("alice")
        assert service.remove_user(user_id).success
        assert service.profile(user_id) is None
        assert service.remove_user(user_id).error_message == "user not found"


class TestCategories:
    """Tests for category upsert and removal."""

    def test_insert_assigns_id(self, service, register):
        user_id = register("alice")
        result = service.upsert_category(user_id, Category(name="books"))
        assert result.success
        assert result.value.id
        assert len(service.categories(user_id)) == 6

    def test_upsert_does_not_mutate_argument(self, service, register):
        user_id = register("alice")
        category = Category(name="books")
        service.upsert_category(user_id, category)
        assert category.id == ""

    def test_replace_keeps_position(self, service, register):
        user_id = register("alice")
        dining = category_id(service, user_id, "dining")
        service.upsert_category(user_id, Category(id=dining, name="restaurants"))
        names = [c.name for c in service.categories(user_id)]
        assert names[1] == "restaurants"
        assert len(names) == 5

    def test_remove_unused(self, service, register):
        user_id = register("alice")
        dining = category_id(service, user_id, "dining")
        assert service.remove_category(user_id, dining).success
        assert dining not in {c.id for c in service.categories(user_id)}

    def test_remove_in_use(self, service, register):
        user_id = register("alice")
        dining = category_id(service, user_id, "dining")
        service.upsert_bill(user_id, Bill(amount=5.0, category_id=dining))
        result = service.remove_category(user_id, dining)
        assert result.error_message == "category in use"
        assert len(service.categories(user_id)) == 5

    def test_remove_unknown_id_is_not_an_error(self, service, register):
        user_id = register("alice")
        assert service.remove_category(user_id, "nope").success
        assert len(service.categories(user_id)) == 5


class TestBills:
    """Tests for bill upsert and removal."""

    def test_insert_fills_id_and_timestamp(self, service, register):
        user_id = register("alice")
        dining = category_id(service, user_id, "dining")
        before = datetime.now(timezone.utc)
        saved = service.upsert_bill(user_id, Bill(amount=12.0, category_id=dining)).value
        assert saved.id
        assert saved.timestamp >= before - timedelta(seconds=1)
        assert service.bills(user_id) == [saved]

    def test_explicit_timestamp_is_kept(self, service, register):
        user_id = register("alice")
        dining = category_id(service, user_id, "dining")
        saved = service.upsert_bill(
            user_id, Bill(amount=1.0, category_id=dining, timestamp=NOW)
        ).value
        assert saved.timestamp == NOW

    def test_unknown_category(self, service, register):
        user_id = register("alice")
        result = service.upsert_bill(user_id, Bill(amount=1.0, category_id="nope"))
        assert result.error_message == "category not found"
        assert result.error_kind == ErrorKind.VALIDATION
        assert service.bills(user_id) == []

    def test_replace(self, service, register):
        user_id = register("alice")
        dining = category_id(service, user_id, "dining")
        saved = service.upsert_bill(user_id, Bill(amount=1.0, category_id=dining)).value
        saved.amount = 9.0
        service.upsert_bill(user_id, saved)
        bills = service.bills(user_id)
        assert len(bills) == 1
        assert bills[0].amount == 9.0

    def test_remove(self, service, register):
        user_id = register("alice")
        dining = category_id(service, user_id, "dining")
        saved = service.upsert_bill(user_id, Bill(amount=1.0, category_id=dining)).value
        assert service.remove_bill(user_id, saved.id).success
        assert service.bills(user_id) == []

    def test_remove_missing(self, service, register):
        user_id = register("alice")
        result = service.remove_bill(user_id, "nope")
        assert result.error_message == "bill not found"
        assert result.error_kind == ErrorKind.NOT_FOUND

    def test_out_of_range_amount_on_disk(self, service, register, store):
        """A bill whose stored amount overflows a float still loads as 0.0."""
        user_id = register("alice")
        path = store.user_file_path(user_id)
        path.write_text(
            path.read_text(encoding="utf-8").replace(
                '"bills": []',
                '"bills": [{"id": "b1", "amount": %s}]' % ("9" * 400),
            ),
            encoding="utf-8",
        )
        assert service.bills(user_id)[0].amount == 0.0
        assert service.remove_bill(user_id, "b1").success
        assert service.bills(user_id) == []

    def test_unknown_user(self, service):
        result = service.upsert_bill("missing", Bill(amount=1.0, category_id="c"))
        assert result.error_message == "failed to load user"
        assert service.bills("missing") == []


class TestAggregation:
    """Tests for totals and per-category summaries."""

    @pytest.fixture
    def ledger(self, service, register):
        user_id = register("alice")
        dining = category_id(service, user_id, "dining")
        transport = category_id(service, user_id, "transport")
        salary = category_id(service, user_id, "salary")
        service.upsert_bill(user_id, Bill(amount=12.5, category_id=dining))
        service.upsert_bill(user_id, Bill(amount=7.5, category_id=transport))
        service.upsert_bill(
            user_id, Bill(amount=50.0, category_id=salary, kind=BillType.INCOME)
        )
        return user_id

    def test_totals(self, service, ledger):
        assert service.total_expense(ledger) == 20.0
        assert service.total_income(ledger) == 50.0

    def test_summary_covers_every_category(self, service, ledger):
        summaries = service.summarize_by_category(ledger)
        by_name = {s.name: s for s in summaries}
        assert [s.name for s in summaries] == [name for name, _ in DEFAULT_CATEGORIES]
        assert by_name["dining"].expense == 12.5
        assert by_name["transport"].expense == 7.5
        assert by_name["salary"].income == 50.0
        assert by_name["other"].income == 0.0
        assert by_name["other"].expense == 0.0

    def test_empty_for_unknown_user(self, service):
        assert service.summarize_by_category("missing") == []
        assert service.total_income("missing") == 0.0


class TestReminders:
    """Tests for reminder upsert, removal and the due-window query."""

    def test_insert_fills_id_and_time(self, service, register):
        user_id = register("alice")
        saved = service.upsert_reminder(user_id, Reminder(message="rent")).value
        assert saved.id
        assert saved.remind_at is not None
        assert saved.enabled is True

    def test_remove_missing_leaves_reminders(self, service, register):
        user_id = register("alice")
        service.upsert_reminder(user_id, Reminder(message="rent", remind_at=NOW))
        result = service.remove_reminder(user_id, "nope")
        assert result.error_message == "reminder not found"
        assert len(service.reminders(user_id)) == 1

    def test_remove(self, service, register):
        user_id = register("alice")
        saved = service.upsert_reminder(user_id, Reminder(message="rent", remind_at=NOW)).value
        assert service.remove_reminder(user_id, saved.id).success
        assert service.reminders(user_id) == []

    def test_upcoming_window_is_closed(self, service, register):
        user_id = register("alice")
        for offset, enabled in ((0, True), (10, True), (20, True), (5, False)):
            service.upsert_reminder(
                user_id,
                Reminder(
                    message=f"at {offset}",
                    remind_at=NOW + timedelta(minutes=offset),
                    enabled=enabled,
                ),
            )
        due = service.upcoming_reminders(user_id, NOW, NOW + timedelta(minutes=10))
        assert [r.message for r in due] == ["at 0", "at 10"]

    def test_naive_bounds_are_utc(self, service, register):
        user_id = register("alice")
        service.upsert_reminder(user_id, Reminder(message="rent", remind_at=NOW))
        due = service.upcoming_reminders(
            user_id, datetime(2024, 6, 1, 11, 0), datetime(2024, 6, 1, 13, 0)
        )
        assert len(due) == 1


class TestAuditTrail:
    def test_mutations_are_audited(self, data_dir, audit_recorder):
        service = LedgerService(JsonUserStore(data_dir), AuditLogger(audit_recorder))
        user_id = service.register_user("alice", "alice@example.com", "pw").value
        category = service.upsert_category(user_id, Category(name="books")).value
        bill = service.upsert_bill(user_id, Bill(amount=1.0, category_id=category.id)).value
        service.remove_bill(user_id, bill.id)
        service.remove_category(user_id, category.id)
        assert audit_recorder.event_types() == [
            "user_registered",
            "category_saved",
            "bill_saved",
            "bill_deleted",
            "category_deleted",
        ]

    def test_no_audit_logger(self, store):
        service = LedgerService(store)
        assert service.register_user("alice", "alice@example.com", "pw").success
