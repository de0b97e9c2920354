from __future__ import annotations

import pytest

from conftest import BONK, UNLISTED, USDC
from enums.error_reason import ErrorKind, ErrorReason
from enums.trade_action import FlowState, TradeAction
from models.errors import BotError
from utils.formatters import FALLBACK_MESSAGE, format_error

USER = "1001"


def _buy_flow_until_amount(trade, address=USDC):
    trade.start(USER)
    trade.select_action(USER, TradeAction.BUY)
    return trade.handle_text(USER, address)


def _buy_flow_until_quote(trade, amount="0.1"):
    _buy_flow_until_amount(trade)
    return trade.handle_text(USER, amount)


def test_start_creates_wallet_and_shows_menu(trade, sessions):
    replies = trade.start(USER)
    session = sessions.get(USER)
    assert session.wallet_public_key
    assert session.state == FlowState.IDLE
    assert session.wallet_public_key in replies[0].text
    assert replies[0].buttons[0][0][1] == "buy"


def test_start_deep_link_goes_straight_to_amount(trade, sessions):
    trade.start(USER, f"sell_{USDC}")
    session = sessions.get(USER)
    assert session.last_action == TradeAction.SELL
    assert session.token_address == USDC
    assert session.state == FlowState.AWAITING_AMOUNT


def test_select_action_with_zero_balance(trade, sessions, solana):
    solana.balance = 0
    trade.start(USER)
    replies = trade.select_action(USER, TradeAction.BUY)
    assert replies[0].error == ErrorReason.ZERO_BALANCE
    assert sessions.get(USER).state == FlowState.IDLE


def test_address_after_zero_balance_is_a_plain_lookup(trade, sessions, solana):
    solana.balance = 0
    trade.start(USER)
    trade.select_action(USER, TradeAction.BUY)
    assert sessions.get(USER).last_action == TradeAction.NONE

    replies = trade.handle_text(USER, USDC)
    assert replies[0].error is None
    session = sessions.get(USER)
    assert session.state == FlowState.IDLE
    assert session.last_action == TradeAction.NONE
    assert session.token_address == USDC


def test_address_after_rpc_outage_is_a_plain_lookup(trade, sessions, solana):
    trade.start(USER)

    def unavailable(address):
        raise BotError(ErrorReason.RPC_UNAVAILABLE, "all endpoints down")
    solana.get_balance = unavailable
    replies = trade.select_action(USER, TradeAction.SELL)
    assert replies[0].error == ErrorReason.RPC_UNAVAILABLE

    del solana.get_balance
    trade.handle_text(USER, USDC)
    session = sessions.get(USER)
    assert session.state == FlowState.IDLE
    assert session.last_action == TradeAction.NONE


def test_start_deep_link_with_zero_balance(trade, sessions, solana, market):
    solana.balance = 0
    replies = trade.start(USER, f"buy_{USDC}")
    assert replies[0].error == ErrorReason.ZERO_BALANCE
    session = sessions.get(USER)
    assert session.wallet_public_key
    assert session.state == FlowState.IDLE
    assert session.last_action == TradeAction.NONE
    assert session.token_address is None
    assert market.calls == []


@pytest.mark.parametrize("address", [USDC, BONK, "So11111111111111111111111111111111111111112"])
def test_valid_addresses_are_accepted(trade, sessions, market, address):
    market.tokens.setdefault(address, market.tokens[USDC].model_copy(update={"address": address}))
    replies = _buy_flow_until_amount(trade, address)
    assert replies[0].error is None
    session = sessions.get(USER)
    assert session.token_address == address
    assert session.state == FlowState.AWAITING_AMOUNT


@pytest.mark.parametrize("text", ["abc", "", "z" * 44, "0OIl" * 10, USDC + "!", "hello world"])
def test_invalid_addresses_keep_state(trade, sessions, market, text):
    trade.start(USER)
    trade.select_action(USER, TradeAction.BUY)
    replies = trade.handle_text(USER, text)
    assert replies[0].error is not None
    assert replies[0].error.kind == ErrorKind.VALIDATION
    assert sessions.get(USER).state == FlowState.AWAITING_TOKEN_ADDRESS
    assert market.calls == []


def test_unlisted_token_is_not_found(trade, sessions):
    replies = _buy_flow_until_amount(trade, UNLISTED)
    assert replies[0].error == ErrorReason.TOKEN_NOT_FOUND
    assert UNLISTED in replies[0].text
    session = sessions.get(USER)
    assert session.state == FlowState.AWAITING_TOKEN_ADDRESS
    assert session.token_address is None


def test_non_numeric_amount_requests_no_quote(trade, sessions, swap):
    _buy_flow_until_amount(trade)
    replies = trade.handle_text(USER, "abc")
    assert replies[0].error == ErrorReason.INVALID_AMOUNT
    assert sessions.get(USER).state == FlowState.AWAITING_AMOUNT
    assert swap.quotes == []


def test_amount_above_balance_requests_no_quote(trade, sessions, swap, solana):
    solana.balance = 50_000_000  # 0.05 SOL
    _buy_flow_until_amount(trade)
    replies = trade.handle_text(USER, "1000000")
    assert replies[0].error == ErrorReason.INSUFFICIENT_FOR_TRADE
    assert replies[0].error.kind == ErrorKind.INSUFFICIENT_BALANCE
    assert sessions.get(USER).state == FlowState.AWAITING_AMOUNT
    assert swap.quotes == []


def test_overflowing_amount_is_a_validation_error(trade, sessions, swap):
    _buy_flow_until_amount(trade)
    replies = trade.handle_text(USER, "1e400")
    assert replies[0].error == ErrorReason.INVALID_AMOUNT
    session = sessions.get(USER)
    assert session.state == FlowState.AWAITING_AMOUNT
    assert session.token_address == USDC
    assert swap.quotes == []


@pytest.mark.parametrize("reason", [
    ErrorReason.NO_ROUTE_FOUND,
    ErrorReason.INVALID_AMOUNT,
    ErrorReason.QUOTE_UNAVAILABLE,
])
def test_failed_quote_keeps_awaiting_amount(trade, sessions, swap, reason):
    _buy_flow_until_amount(trade)
    error = BotError(reason, "jupiter rejected the quote")
    swap.quote_error = error
    replies = trade.handle_text(USER, "0.1")

    assert replies[0].error == reason
    assert replies[0].text == format_error(error, False)
    session = sessions.get(USER)
    assert session.state == FlowState.AWAITING_AMOUNT
    assert session.token_address == USDC
    assert session.trade_amount is None
    assert session.quote_id is None
    assert swap.quotes == [(TradeAction.BUY, USDC, 0.1)]


def test_valid_amount_produces_quote(trade, sessions, swap):
    replies = _buy_flow_until_quote(trade, "0,25")
    session = sessions.get(USER)
    assert session.state == FlowState.AWAITING_CONFIRMATION
    assert session.trade_amount == 0.25
    assert swap.quotes == [(TradeAction.BUY, USDC, 0.25)]
    assert "Trade Summary" in replies[0].text
    assert replies[0].buttons[0][0][1] == f"confirm_trade:{session.quote_id}"


def test_new_action_clears_pending_trade(trade, sessions, swap):
    _buy_flow_until_quote(trade)
    old_quote = sessions.get(USER).quote_id

    trade.select_action(USER, TradeAction.SELL)
    session = sessions.get(USER)
    assert session.token_address is None
    assert session.trade_amount is None
    assert session.quote_id is None
    assert session.state == FlowState.AWAITING_TOKEN_ADDRESS

    replies = trade.confirm(USER, old_quote)
    assert replies[0].error.kind == ErrorKind.SESSION_INCONSISTENCY
    assert swap.executions == []


def test_confirm_without_amount_never_executes(trade, sessions, swap):
    _buy_flow_until_amount(trade)
    replies = trade.confirm(USER, "deadbeef0000")
    assert replies[0].error == ErrorReason.MISSING_TRADE_AMOUNT
    assert replies[0].error.kind == ErrorKind.SESSION_INCONSISTENCY
    assert swap.executions == []
    assert sessions.get(USER).state == FlowState.IDLE


def test_confirm_with_superseded_quote_is_rejected(trade, sessions, swap):
    _buy_flow_until_quote(trade, "0.1")
    first = sessions.get(USER).quote_id
    trade.handle_text(USER, "0.2")
    second = sessions.get(USER).quote_id
    assert first != second

    replies = trade.confirm(USER, first)
    assert replies[0].error == ErrorReason.STALE_QUOTE
    assert sessions.get(USER).state == FlowState.AWAITING_CONFIRMATION
    assert swap.executions == []

    replies = trade.confirm(USER, second)
    assert replies[0].error is None
    assert swap.executions[0][1:] == (TradeAction.BUY, USDC, 0.2)


def test_confirm_executes_and_returns_to_idle(trade, sessions, swap):
    _buy_flow_until_quote(trade, "0.1")
    session = sessions.get(USER)
    replies = trade.confirm(USER, session.quote_id)

    assert "5ignature" in replies[0].text
    assert swap.executions == [(session.wallet_public_key, TradeAction.BUY, USDC, 0.1)]
    after = sessions.get(USER)
    assert after.state == FlowState.IDLE
    assert after.token_address is None
    assert after.wallet_public_key == session.wallet_public_key


def test_failed_execution_reports_and_resets(trade, sessions, swap):
    swap.execute_error = BotError(ErrorReason.SIMULATION_FAILED, "slippage")
    _buy_flow_until_quote(trade)
    replies = trade.confirm(USER, sessions.get(USER).quote_id)
    assert replies[0].error == ErrorReason.SIMULATION_FAILED
    assert sessions.get(USER).state == FlowState.IDLE


@pytest.mark.parametrize("percentage,factor", [(50, 0.5), (100, 1.0)])
def test_sell_shortcuts_use_exact_fraction(trade, sessions, swap, solana, percentage, factor):
    solana.token_balance = 123.456789
    trade.start(USER)
    trade.select_action(USER, TradeAction.SELL)
    trade.handle_text(USER, USDC)

    trade.sell_percentage(USER, percentage)
    expected = 123.456789 * factor
    assert swap.quotes[-1] == (TradeAction.SELL, USDC, expected)

    session = sessions.get(USER)
    assert session.trade_amount == pytest.approx(expected, rel=0, abs=1e-12)
    trade.confirm(USER, session.quote_id)
    assert swap.executions[-1][3] == pytest.approx(expected, rel=0, abs=1e-12)


def test_sell_shortcut_without_tokens(trade, sessions, swap, solana):
    solana.token_balance = 0.0
    trade.start(USER, f"sell_{USDC}")
    replies = trade.sell_percentage(USER, 100)
    assert replies[0].error == ErrorReason.INSUFFICIENT_TOKEN
    assert "No tokens found" in replies[0].text
    assert swap.quotes == []


def test_cancel_clears_trade_but_keeps_wallet(trade, sessions):
    _buy_flow_until_quote(trade)
    wallet = sessions.get(USER).wallet_public_key

    trade.cancel(USER)
    session = sessions.get(USER)
    assert session.state == FlowState.IDLE
    assert session.token_address is None
    assert session.trade_amount is None
    assert session.quote_id is None
    assert session.wallet_public_key == wallet


def test_plain_address_in_idle_shows_token(trade, sessions):
    trade.start(USER)
    replies = trade.handle_text(USER, USDC)
    session = sessions.get(USER)
    assert session.state == FlowState.IDLE
    assert session.token_address == USDC
    assert "USDC" in replies[0].text

    trade.enter_amount(USER, USDC)
    session = sessions.get(USER)
    assert session.last_action == TradeAction.BUY
    assert session.state == FlowState.AWAITING_AMOUNT


def test_unexpected_failure_replies_generic_message(trade, sessions, market):
    _buy_flow_until_amount(trade)
    market.error = RuntimeError("boom")
    replies = trade.handle_text(USER, BONK)
    assert replies[0].text == FALLBACK_MESSAGE
    assert replies[0].error == ErrorReason.UNEXPECTED
    assert sessions.get(USER).state == FlowState.IDLE


def test_market_outage_is_an_external_error(trade, sessions, market):
    market.error = BotError(ErrorReason.MARKET_DATA_UNAVAILABLE, "503")
    trade.start(USER)
    trade.select_action(USER, TradeAction.BUY)
    replies = trade.handle_text(USER, USDC)
    assert replies[0].error.kind == ErrorKind.EXTERNAL_SERVICE
    assert sessions.get(USER).state == FlowState.AWAITING_TOKEN_ADDRESS


def test_users_do_not_share_sessions(trade, sessions):
    _buy_flow_until_quote(trade)
    trade.start("2002")
    assert sessions.get(USER).state == FlowState.AWAITING_CONFIRMATION
    assert sessions.get("2002").state == FlowState.IDLE
    assert sessions.get(USER).wallet_public_key != sessions.get("2002").wallet_public_key
