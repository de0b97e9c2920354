# utils/keyboards.py
# Filas de botones (texto, callback_data). telegram_bot las convierte a InlineKeyboardMarkup.
from __future__ import annotations

from models.reply import Button

CB_BUY = "buy"
CB_SELL = "sell"
CB_MY_WALLET = "my_wallet"
CB_SELL_50 = "sell_50"
CB_SELL_100 = "sell_100"
CB_CANCEL = "cancel_trade"
CB_CONFIRM_PREFIX = "confirm_trade:"
CB_ENTER_AMOUNT_PREFIX = "enter_amount:"

def main_menu() -> list[list[Button]]:
    return [
        [("🛒 Buy", CB_BUY), ("💰 Sell", CB_SELL)],
        [("👛 My Wallet", CB_MY_WALLET)],
    ]

def trade_buttons(is_sell: bool, address: str) -> list[list[Button]]:
    if is_sell:
        return [
            [("🔄 Sell 50%", CB_SELL_50), ("🔄 Sell 100%", CB_SELL_100)],
            [("✍️ Enter token amount", f"{CB_ENTER_AMOUNT_PREFIX}{address}")],
        ]
    return [[("💸 Enter amount in SOL", f"{CB_ENTER_AMOUNT_PREFIX}{address}")]]

def confirmation_buttons(quote_id: str) -> list[list[Button]]:
    return [[("✅ Confirm", f"{CB_CONFIRM_PREFIX}{quote_id}"), ("❌ Cancel", CB_CANCEL)]]
