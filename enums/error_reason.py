"""
Typed failure reasons produced at the call site that fails.

Every ``ErrorReason`` belongs to exactly one ``ErrorKind`` (the user-facing
category). The formatter matches on the reason, never on exception text.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """User-facing error categories."""

    VALIDATION = "validation"
    INSUFFICIENT_BALANCE = "insufficient_balance"
    NO_ROUTE = "no_route"
    NOT_FOUND = "not_found"
    EXTERNAL_SERVICE = "external_service"
    EXECUTION_FAILURE = "execution_failure"
    SESSION_INCONSISTENCY = "session_inconsistency"


class ErrorReason(str, Enum):
    # validación de entrada
    INVALID_ADDRESS = "invalid_address"
    INVALID_AMOUNT = "invalid_amount"
    STALE_QUOTE = "stale_quote"
    # saldo
    ZERO_BALANCE = "zero_balance"
    INSUFFICIENT_FOR_TRADE = "insufficient_for_trade"
    INSUFFICIENT_SOL = "insufficient_sol"
    INSUFFICIENT_TOKEN = "insufficient_token"
    # activo no negociable
    TOKEN_NOT_FOUND = "token_not_found"
    NO_ROUTE_FOUND = "no_route_found"
    # servicios externos
    MARKET_DATA_UNAVAILABLE = "market_data_unavailable"
    QUOTE_UNAVAILABLE = "quote_unavailable"
    RPC_UNAVAILABLE = "rpc_unavailable"
    NETWORK_TIMEOUT = "network_timeout"
    RENDER_FAILED = "render_failed"
    CHANNEL_UNAVAILABLE = "channel_unavailable"
    # ejecución
    ACCOUNT_CREATION_FAILED = "account_creation_failed"
    APPROVAL_FAILED = "approval_failed"
    SWAP_FAILED = "swap_failed"
    SIMULATION_FAILED = "simulation_failed"
    SUBMISSION_FAILED = "submission_failed"
    CONFIRMATION_FAILED = "confirmation_failed"
    UNEXPECTED = "unexpected"
    # sesión
    MISSING_WALLET = "missing_wallet"
    MISSING_TRADE_AMOUNT = "missing_trade_amount"
    MISSING_TOKEN = "missing_token"

    @property
    def kind(self) -> ErrorKind:
        return REASON_KIND[self]


REASON_KIND: dict[ErrorReason, ErrorKind] = {
    ErrorReason.INVALID_ADDRESS: ErrorKind.VALIDATION,
    ErrorReason.INVALID_AMOUNT: ErrorKind.VALIDATION,
    ErrorReason.STALE_QUOTE: ErrorKind.VALIDATION,
    ErrorReason.ZERO_BALANCE: ErrorKind.INSUFFICIENT_BALANCE,
    ErrorReason.INSUFFICIENT_FOR_TRADE: ErrorKind.INSUFFICIENT_BALANCE,
    ErrorReason.INSUFFICIENT_SOL: ErrorKind.INSUFFICIENT_BALANCE,
    ErrorReason.INSUFFICIENT_TOKEN: ErrorKind.INSUFFICIENT_BALANCE,
    ErrorReason.TOKEN_NOT_FOUND: ErrorKind.NOT_FOUND,
    ErrorReason.NO_ROUTE_FOUND: ErrorKind.NO_ROUTE,
    ErrorReason.MARKET_DATA_UNAVAILABLE: ErrorKind.EXTERNAL_SERVICE,
    ErrorReason.QUOTE_UNAVAILABLE: ErrorKind.EXTERNAL_SERVICE,
    ErrorReason.RPC_UNAVAILABLE: ErrorKind.EXTERNAL_SERVICE,
    ErrorReason.NETWORK_TIMEOUT: ErrorKind.EXTERNAL_SERVICE,
    ErrorReason.RENDER_FAILED: ErrorKind.EXTERNAL_SERVICE,
    ErrorReason.CHANNEL_UNAVAILABLE: ErrorKind.EXTERNAL_SERVICE,
    ErrorReason.ACCOUNT_CREATION_FAILED: ErrorKind.EXECUTION_FAILURE,
    ErrorReason.APPROVAL_FAILED: ErrorKind.EXECUTION_FAILURE,
    ErrorReason.SWAP_FAILED: ErrorKind.EXECUTION_FAILURE,
    ErrorReason.SIMULATION_FAILED: ErrorKind.EXECUTION_FAILURE,
    ErrorReason.SUBMISSION_FAILED: ErrorKind.EXECUTION_FAILURE,
    ErrorReason.CONFIRMATION_FAILED: ErrorKind.EXECUTION_FAILURE,
    ErrorReason.UNEXPECTED: ErrorKind.EXECUTION_FAILURE,
    ErrorReason.MISSING_WALLET: ErrorKind.SESSION_INCONSISTENCY,
    ErrorReason.MISSING_TRADE_AMOUNT: ErrorKind.SESSION_INCONSISTENCY,
    ErrorReason.MISSING_TOKEN: ErrorKind.SESSION_INCONSISTENCY,
}
