"""
Audit Logger

DESIGN DECISION: Every document mutation is logged.
This provides:
1. Traceability of changes per user
2. Debugging capability when a write fails
3. Visibility into half-finished friend additions

The audit logger:
- Is synchronous, like every other call in the core
- Gracefully handles failures (a logging error never fails an operation)
"""

import logging
import sys
from typing import Any, Optional

import structlog

from bookkeeper.config import LoggingSettings
from bookkeeper.models.audit import AuditEvent


def configure_logging(settings: Optional[LoggingSettings] = None) -> None:
    """
    Configure structlog on top of the stdlib logging module.

    Safe to call more than once; the last call wins.
    """
    settings = settings or LoggingSettings()
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, settings.level),
    )
    logging.getLogger().setLevel(getattr(logging, settings.level))

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.render_json
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class AuditLogger:
    """
    Central audit logging service.

    Events are written to the structured local log only.
    """

    def __init__(self, logger: Optional[Any] = None):
        """
        Initialize audit logger.

        Args:
            logger: structlog-style logger (info/warning/error methods).
                    Defaults to the module's structlog logger.
        """
        self._logger = logger or structlog.get_logger("bookkeeper.audit")

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns True if the event was written.
        """
        log_dict = event.to_log_dict()
        try:
            if event.severity.value in ("error", "critical"):
                self._logger.error("audit_event", **log_dict)
            elif event.severity.value == "warning":
                self._logger.warning("audit_event", **log_dict)
            elif event.severity.value == "debug":
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception:
            # Audit output must never break the ledger operation itself
            return False
        return True
