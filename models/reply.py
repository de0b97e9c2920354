"""
Reply produced by the controllers and sent by the Telegram layer.

Keyboards are plain rows of ``(text, callback_data)`` so controllers stay
independent from python-telegram-bot.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from pydantic import BaseModel

from enums.error_reason import ErrorReason

Button = Tuple[str, str]


class BotReply(BaseModel):
    text: str
    buttons: Optional[List[List[Button]]] = None
    parse_mode: Optional[str] = "Markdown"
    error: Optional[ErrorReason] = None
