"""
Shared fixtures.

Every test gets its own data directory under tmp_path; BOOKEEPER_DATA_DIR
points at it so nothing touches the real application data location.
"""

from pathlib import Path
from typing import Callable

import pytest

from bookkeeper.audit import AuditLogger
from bookkeeper.services.ledger import LedgerService
from bookkeeper.services.storage import JsonUserStore


class RecordingLogger:
    """Stands in for a structlog logger and keeps every call."""

    def __init__(self):
        self.records: list[tuple[str, str, dict]] = []

    def _record(self, level: str, event: str, **kwargs) -> None:
        self.records.append((level, event, kwargs))

    def debug(self, event: str, **kwargs) -> None:
        self._record("debug", event, **kwargs)

    def info(self, event: str, **kwargs) -> None:
        self._record("info", event, **kwargs)

    def warning(self, event: str, **kwargs) -> None:
        self._record("warning", event, **kwargs)

    def error(self, event: str, **kwargs) -> None:
        self._record("error", event, **kwargs)

    def event_types(self) -> list[str]:
        return [kwargs.get("event_type") for _, _, kwargs in self.records]


@pytest.fixture
def data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    path = tmp_path / "bookeeper_data"
    monkeypatch.setenv("BOOKEEPER_DATA_DIR", str(path))
    return path


@pytest.fixture
def store(data_dir: Path) -> JsonUserStore:
    return JsonUserStore(data_dir)


@pytest.fixture
def audit_recorder() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def service(store: JsonUserStore, audit_recorder: RecordingLogger) -> LedgerService:
    return LedgerService(store, audit_logger=AuditLogger(audit_recorder))


@pytest.fixture
def register(service: LedgerService) -> Callable[..., str]:
    """Register a user named <name> with email <name>@example.com; returns the id."""

    def _register(name: str, password: str = "pw") -> str:
        result = service.register_user(name, f"{name}@example.com", password)
        assert result.success, result.error_message
        return result.value

    return _register
