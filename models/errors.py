"""
Tagged error raised by services and controllers.

The failing call site picks the ``ErrorReason``; the category (``kind``) is
derived from it. Formatters and handlers consume the reason, so no caller
ever needs to inspect exception messages.
"""

from __future__ import annotations

from typing import Any

from enums.error_reason import ErrorKind, ErrorReason


class BotError(Exception):
    # ya clasificado: log_function lo registra sin traceback
    expected = True

    def __init__(self, reason: ErrorReason, detail: str = "", **context: Any) -> None:
        self.reason = reason
        self.detail = detail
        self.context = context
        super().__init__(f"{reason.value}: {detail}" if detail else reason.value)

    @property
    def kind(self) -> ErrorKind:
        return self.reason.kind

    def __repr__(self) -> str:
        return f"BotError({self.reason.value!r}, {self.detail!r})"
