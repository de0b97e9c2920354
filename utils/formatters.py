# utils/formatters.py
"""
Textos que ve el usuario del bot.

Funciones puras: mismos datos -> mismo texto. Todo lo que viene de fuera
(símbolos, nombres, dex) pasa por escape_markdown; direcciones y hashes van
entre backticks y son base58, así que no necesitan escape.
"""
from __future__ import annotations

from typing import Callable

from enums.error_reason import ErrorReason
from models.errors import BotError
from models.quote import Quote
from models.token import TokenInfo
from utils.config import get_setting
from utils.solana_utils import lamports_to_sol

BRAND = get_setting("BOT_BRAND", "Pump Science Wallet")
SOLSCAN = "https://solscan.io"

FALLBACK_MESSAGE = f"❌ An unexpected error occurred. Please try again - {BRAND}"

def escape_markdown(text: str | None) -> str:
    # Markdown (legacy) de Telegram: solo estos cuatro son especiales
    return (text or "").replace("_", "\\_").replace("*", "\\*").replace("`", "\\`").replace("[", "\\[")

def fmt_amount(value: float | None, max_decimals: int = 9) -> str:
    """Número sin ceros de cola: 1.5 -> '1.5', 2.0 -> '2', None -> 'N/A'."""
    if value is None:
        return "N/A"
    text = f"{value:.{max_decimals}f}".rstrip("0").rstrip(".")
    return text if text not in ("", "-0") else "0"

def fmt_usd(value: float | None) -> str:
    if value is None:
        return "N/A"
    if abs(value) >= 1:
        return f"${value:,.2f}"
    return f"${fmt_amount(value, 10)}"

def _sol(lamports: int) -> str:
    return fmt_amount(lamports_to_sol(lamports))

def _wallet_links(address: str) -> str:
    return (f"🔑 Address: `{address}`\n"
            f"🔍 View on Solscan: {SOLSCAN}/account/{address}")

# ------------------------------------------------------------------
# wallet / menú
# ------------------------------------------------------------------
def format_startup_wallet_info(address: str) -> str:
    return (f"⭐ Welcome to {BRAND}!\n\n"
            f"Your Solana wallet has been created:\n"
            f"{_wallet_links(address)}\n\n"
            f"To start trading:\n"
            f"1️⃣ Copy your wallet address above\n"
            f"2️⃣ Send SOL to start trading\n"
            f"3️⃣ Use the menu below to trade tokens")

def format_wallet_info(balance_lamports: int, address: str) -> str:
    return (f"🔍 Wallet Information - {BRAND}\n\n"
            f"💰 Balance: {_sol(balance_lamports)} SOL\n"
            f"{_wallet_links(address)}")

def format_my_wallet(balance_lamports: int, address: str) -> str:
    return (f"👛 {BRAND}\n\n"
            f"{format_wallet_info(balance_lamports, address)}\n\n"
            f"📝 Note: Copy your wallet address above to deposit funds.")

def format_action_prompt(balance_lamports: int, address: str, is_sell: bool) -> str:
    verb = "sell" if is_sell else "buy"
    return (f"{format_wallet_info(balance_lamports, address)}\n"
            f"📝 Please enter the token contract address to {verb}")

def format_insufficient_balance(balance_lamports: int, address: str) -> str:
    return (f"❌ Insufficient Balance - {BRAND}\n\n"
            f"💰 Current Balance: {_sol(balance_lamports)} SOL\n"
            f"{_wallet_links(address)}\n\n"
            f"To trade on Solana Mainnet:\n"
            f"1️⃣ Copy your wallet address above\n"
            f"2️⃣ Send SOL to this address\n"
            f"3️⃣ Wait for transaction confirmation\n\n"
            f"Try again after adding funds.")

def format_insufficient_for_trade(available: float, required: float, unit: str, address: str) -> str:
    return (f"❌ Insufficient Balance for Trade - {BRAND}\n\n"
            f"💰 Required: {fmt_amount(required)} {unit}\n"
            f"💳 Available: {fmt_amount(available)} {unit}\n"
            f"{_wallet_links(address)}\n\n"
            f"Please add more funds or try a smaller amount.")

# ------------------------------------------------------------------
# token
# ------------------------------------------------------------------
def format_token_info(token: TokenInfo) -> str:
    change = "N/A" if token.price_change_h24 is None else f"{fmt_amount(token.price_change_h24, 2)}%"
    return (f"🔍 Token Information - {BRAND}\n\n"
            f"📊 Symbol: {escape_markdown(token.symbol) or 'N/A'}\n"
            f"💲 Price: {fmt_usd(token.price_usd)}\n"
            f"💰 Market Cap: {fmt_usd(token.fdv)}\n"
            f"📈 24h Volume: {fmt_usd(token.volume_h24)}\n"
            f"📊 Price Change 24h: {change}\n\n"
            f"💧 Liquidity: {fmt_usd(token.liquidity_usd)}\n"
            f"🏦 Dex: {escape_markdown(token.dex_id) or 'N/A'}\n\n"
            f"🔑 Contract Address: `{token.address}`")

def format_token_not_found(address: str) -> str:
    return (f"❌ Token Not Found - {BRAND}\n\n"
            f"🔍 The token at address `{address}` was not found on any supported DEX.\n\n"
            f"Please verify:\n"
            f"1️⃣ The token address is correct\n"
            f"2️⃣ The token is traded on Jupiter/Raydium\n"
            f"3️⃣ The token has active liquidity")

def format_invalid_address() -> str:
    return (f"❌ Invalid Address - {BRAND}\n\n"
            f"Please provide a valid Solana token address:\n"
            f"1️⃣ Should be 32-44 characters long\n"
            f"2️⃣ Contains only base58 characters\n"
            f"3️⃣ No special characters or spaces")

def format_invalid_amount(is_sell: bool = False) -> str:
    unit = "tokens" if is_sell else "SOL"
    return (f"❌ Invalid Amount - {BRAND}\n\n"
            f"Please enter a positive number of {unit}, for example `0.5`.")

def format_enter_amount(is_sell: bool = False) -> str:
    if is_sell:
        return "Please enter the amount of tokens you want to sell"
    return "Please enter the amount in SOL you want to spend on this token"

def format_service_unavailable() -> str:
    return (f"❌ Service Temporarily Unavailable - {BRAND}\n\n"
            f"We're experiencing issues with our price feed.\n"
            f"Please try again in a few minutes.")

def format_network_error() -> str:
    return (f"❌ Network Error - {BRAND}\n"
            f"Unable to connect to Solana network.\n"
            f"Please try again in a few moments.")

# ------------------------------------------------------------------
# trade
# ------------------------------------------------------------------
def format_trade_summary(quote: Quote, wallet_balance_lamports: int, is_sell: bool = False) -> str:
    input_token, output_token = ("Token", "SOL") if is_sell else ("SOL", "Token")
    return (f"💱 *Trade Summary*\n\n"
            f"*Input:* {fmt_amount(quote.ui_in_amount)} {input_token}\n"
            f"*Expected Output:* {fmt_amount(quote.ui_out_amount)} {output_token}\n"
            f"*Minimum Output:* {fmt_amount(quote.ui_min_out_amount)} {output_token}\n"
            f"*Price Impact:* {quote.price_impact_pct:.2f}%\n"
            f"*Slippage Tolerance:* {fmt_amount(quote.slippage_pct, 2)}%\n\n"
            f"💰 *Wallet Balance:* {lamports_to_sol(wallet_balance_lamports):.4f} SOL\n\n"
            f"Please confirm if you want to proceed with this trade.")

def format_trade_success(signature: str, address: str, amount: float, is_sell: bool = False) -> str:
    unit = "tokens" if is_sell else "SOL"
    return (f"🎉 Trade Successful - {BRAND}\n\n"
            f"💫 Transaction Details:\n"
            f"📍 Status: Confirmed\n"
            f"🔗 Network: Solana Mainnet\n"
            f"💰 Amount: {fmt_amount(amount)} {unit}\n\n"
            f"🔍 View Transaction:\n"
            f"{SOLSCAN}/tx/{signature}\n\n"
            f"⚡ Transaction Hash:\n"
            f"`{signature}`\n\n"
            f"👛 Wallet Information:\n"
            f"🔑 Address: `{address}`\n"
            f"🔍 View Wallet: {SOLSCAN}/account/{address}")

def format_cancelled() -> str:
    return f"🛑 Trade cancelled - {BRAND}\nNo transaction was sent."

# ------------------------------------------------------------------
# errores
# ------------------------------------------------------------------
def _zero_balance(err: BotError, is_sell: bool) -> str:
    return format_insufficient_balance(int(err.context.get("balance", 0)), err.context.get("address", ""))

def _insufficient_for_trade(err: BotError, is_sell: bool) -> str:
    ctx = err.context
    return format_insufficient_for_trade(
        float(ctx.get("available", 0.0)), float(ctx.get("required", 0.0)),
        ctx.get("unit", "tokens" if is_sell else "SOL"), ctx.get("address", ""),
    )

def _insufficient_sol(err: BotError, is_sell: bool) -> str:
    return "❌ Insufficient SOL balance for the trade and network fees."

def _insufficient_token(err: BotError, is_sell: bool) -> str:
    if err.context.get("balance") in (0, 0.0):
        return "❌ No tokens found in your wallet to sell"
    return "❌ Insufficient token balance for the trade."

def _token_not_found(err: BotError, is_sell: bool) -> str:
    return format_token_not_found(err.context.get("address", ""))

def _const(text: str) -> Callable[[BotError, bool], str]:
    return lambda err, is_sell: text

_ERROR_MESSAGES: dict[ErrorReason, Callable[[BotError, bool], str]] = {
    ErrorReason.INVALID_ADDRESS: lambda err, is_sell: format_invalid_address(),
    ErrorReason.INVALID_AMOUNT: lambda err, is_sell: format_invalid_amount(is_sell),
    ErrorReason.STALE_QUOTE: _const("⚠️ This quote is no longer valid. Please use the buttons of the latest trade summary."),
    ErrorReason.ZERO_BALANCE: _zero_balance,
    ErrorReason.INSUFFICIENT_FOR_TRADE: _insufficient_for_trade,
    ErrorReason.INSUFFICIENT_SOL: _insufficient_sol,
    ErrorReason.INSUFFICIENT_TOKEN: _insufficient_token,
    ErrorReason.TOKEN_NOT_FOUND: _token_not_found,
    ErrorReason.NO_ROUTE_FOUND: _const("❌ No trading route found. This pair might not be tradeable."),
    ErrorReason.MARKET_DATA_UNAVAILABLE: lambda err, is_sell: format_service_unavailable(),
    ErrorReason.QUOTE_UNAVAILABLE: _const(f"❌ Error fetching trade quote. The trading service is temporarily unavailable - {BRAND}"),
    ErrorReason.RPC_UNAVAILABLE: lambda err, is_sell: format_network_error(),
    ErrorReason.NETWORK_TIMEOUT: _const(f"❌ Network Timeout - {BRAND}\nThe request timed out. Please try again."),
    ErrorReason.RENDER_FAILED: _const("❌ Could not render the template image."),
    ErrorReason.CHANNEL_UNAVAILABLE: _const("❌ Could not post to the channel."),
    ErrorReason.ACCOUNT_CREATION_FAILED: _const("❌ Could not create the token account for your wallet. Please try again."),
    ErrorReason.APPROVAL_FAILED: _const("❌ Failed to approve token spending. Please try again."),
    ErrorReason.SWAP_FAILED: _const("❌ Swap failed. This could be due to price movement or insufficient liquidity."),
    ErrorReason.SIMULATION_FAILED: _const("❌ Transaction simulation failed. Please try a different amount."),
    ErrorReason.SUBMISSION_FAILED: _const("❌ The transaction could not be sent to the network. Please try again."),
    ErrorReason.CONFIRMATION_FAILED: _const("❌ The transaction was not confirmed. Check your wallet before trying again."),
    ErrorReason.UNEXPECTED: _const(FALLBACK_MESSAGE),
    ErrorReason.MISSING_WALLET: _const("❌ Wallet not found. Please restart the bot with /start"),
    ErrorReason.MISSING_TRADE_AMOUNT: _const("❌ Trade amount not found. Please try again"),
    ErrorReason.MISSING_TOKEN: _const(f"❌ Wallet or token not found. Please restart the bot - {BRAND}"),
}

def format_error(error: BotError, is_sell: bool = False) -> str:
    """Mensaje de usuario para un BotError; una entrada por cada ErrorReason."""
    return _ERROR_MESSAGES[error.reason](error, is_sell)
