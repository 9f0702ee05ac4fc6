# src/logging/context.py — v2
"""Contextual logging support: attach document and run_id to log records.

Context variables are task-local, so documents processed concurrently by
one engine each log with their own context.
"""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

_document: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "document", default=None
)
_run_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "run_id", default=None
)

DocumentContextToken = tuple[
    contextvars.Token[str | None], contextvars.Token[str | None]
]


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    document: str | None = None
    run_id: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(document=_document.get(), run_id=_run_id.get())


def set_document_context(document: str, run_id: str) -> DocumentContextToken:
    """Set document-level context (called once per processed document)."""
    return _document.set(document), _run_id.set(run_id)


def reset_document_context(token: DocumentContextToken) -> None:
    """Restore the context that was active before set_document_context()."""
    document_token, run_token = token
    _document.reset(document_token)
    _run_id.reset(run_token)
