"""AuditTrail: per-request history envelopes and the system-wide audit log."""

from __future__ import annotations

import html
import re
from datetime import datetime
from typing import Any

import bleach
import structlog

from approvalflow.models.records import ApprovalAction, ApprovalRequest, HistoryEntry

_SCRIPT_BLOCK = re.compile(r"<script[^>]*>.*?</script>", re.IGNORECASE | re.DOTALL)


def strip_markup(text: str | None) -> str:
    """Remove script blocks and every HTML tag, keeping the text content unescaped."""
    if not text:
        return ""
    text = _SCRIPT_BLOCK.sub("", str(text))
    cleaned = bleach.clean(text, tags=[], attributes={}, strip=True)
    return html.unescape(cleaned).strip()


class AuditTrail:
    """Builds history entries and mirrors every mutation to a structured log.

    History is append-only: ``append`` returns a new list and never edits or
    drops an existing entry.
    """

    def __init__(self, notes_max_length: int = 1000) -> None:
        self._notes_max_length = notes_max_length
        self._log = structlog.get_logger("approvalflow.audit")

    def sanitize_notes(self, notes: str | None) -> str:
        return strip_markup(notes)[: self._notes_max_length]

    def entry(self, actor: str, action: ApprovalAction, notes: str | None, at: datetime) -> HistoryEntry:
        return HistoryEntry(
            approver_email=actor,
            action=action.history_label,
            notes=self.sanitize_notes(notes),
            timestamp=at,
        )

    def append(self, request: ApprovalRequest, entry: HistoryEntry) -> list[HistoryEntry]:
        return [*request.approval_history, entry]

    def record(self, operation: str, actor: str, outcome: str, **fields: Any) -> None:
        """Emit one audit event for a mutating operation."""
        self._log.info("audit", operation=operation, actor=actor, outcome=outcome, **fields)
