"""
Enumerations describing where a user is inside the trade flow.

``TradeAction`` records which flow the user chose (buy or sell) and
``FlowState`` is the explicit step of the trade session state machine.
"""

from __future__ import annotations

from enum import Enum


class TradeAction(str, Enum):
    """Flow selected from the main menu."""

    BUY = "buy"
    SELL = "sell"
    NONE = "none"


class FlowState(str, Enum):
    """Steps of the trade session state machine."""

    IDLE = "idle"
    AWAITING_TOKEN_ADDRESS = "awaiting_token_address"
    AWAITING_AMOUNT = "awaiting_amount"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    EXECUTING = "executing"
