"""
Application Wiring for Bookkeeper

This module is the only place where configuration meets construction:
settings -> data directory -> store -> audit logger -> ledger service.

DESIGN DECISION: The data directory is resolved here and passed down
explicitly. The store and the service never read the environment, so a
test can build a fully isolated service from a temporary directory.
"""

from pathlib import Path
from typing import Optional

from bookkeeper.audit import AuditLogger, configure_logging
from bookkeeper.config import Settings, get_settings
from bookkeeper.services.ledger import LedgerService
from bookkeeper.services.storage import JsonUserStore


def create_store(
    settings: Optional[Settings] = None,
    data_dir: Optional[Path] = None,
) -> JsonUserStore:
    """
    Build the JSON store.

    Args:
        settings: Application settings (defaults to get_settings()).
        data_dir: Explicit data directory; overrides the settings.
    """
    storage_settings = (settings or get_settings()).storage
    if data_dir is not None:
        return JsonUserStore(data_dir, storage_settings.file_extension)
    return JsonUserStore.from_settings(storage_settings)


def create_ledger_service(
    settings: Optional[Settings] = None,
    data_dir: Optional[Path] = None,
    configure_logs: bool = True,
) -> LedgerService:
    """
    Factory function to create a ready-to-use ledger service.

    Args:
        settings: Application settings (defaults to get_settings()).
        data_dir: Explicit data directory; overrides the settings.
        configure_logs: Configure structlog from the logging settings.
                        Set to False when the host application already did.

    Returns:
        LedgerService backed by a JsonUserStore with local audit logging
    """
    settings = settings or get_settings()
    if configure_logs:
        configure_logging(settings.logging)

    store = create_store(settings, data_dir)
    return LedgerService(store, audit_logger=AuditLogger())
