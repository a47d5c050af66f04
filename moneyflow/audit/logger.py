"""
Audit Logger

DESIGN DECISION: Every change to the user's data is logged.
This provides:
1. Traceability of additions, deletions and the clear-all action
2. Debugging capability when stored data turns out to be unreadable
3. A record of AI service failures that the UI only shows as a notice

The audit logger:
- Is synchronous, like every other write in the app
- Never raises; a logging failure must not break a user action
- Supports correlation IDs to trace related events
"""

import logging
import sys
from uuid import UUID, uuid4

import structlog

from moneyflow.models.audit import AuditEvent, AuditSeverity


# Configure structlog for local logging
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
        structlog.processors.JSONRenderer(ensure_ascii=False)
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route stdlib logging (and therefore structlog) to stderr at `level`."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.INFO),
    )


class AuditLogger:
    """
    Central audit logging service.

    Writes every event to the structured local log. Events are also kept
    in memory for the current session so the settings page can show
    recent activity.
    """

    def __init__(self, history_size: int = 200):
        self._logger = structlog.get_logger("moneyflow.audit")
        self._history: list[AuditEvent] = []
        self._history_size = history_size

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns False if the event could not be written.
        """
        try:
            log_dict = event.to_log_dict()
            if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception as e:
            # Log failure but don't raise
            logging.getLogger("moneyflow.audit").error(
                "audit_log_failed event_id=%s error=%s", event.event_id, e
            )
            return False
        finally:
            self._remember(event)

        return True

    def _remember(self, event: AuditEvent) -> None:
        self._history.append(event)
        if len(self._history) > self._history_size:
            del self._history[: len(self._history) - self._history_size]

    def recent_events(self, limit: int = 20) -> list[AuditEvent]:
        """Most recent events of this session, newest first."""
        return list(reversed(self._history[-limit:]))

    def events_for(self, correlation_id: UUID) -> list[AuditEvent]:
        """Events sharing a correlation ID, in chronological order."""
        return [e for e in self._history if e.correlation_id == correlation_id]


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a user session and pass it through
    all subsequent operations.
    """
    return uuid4()
