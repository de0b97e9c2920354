"""
Per-user session of the trade flow.

The session only references the wallet by its public key; signing material
lives in the wallets table behind ``WalletSigner``.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from enums.trade_action import FlowState, TradeAction


class Session(BaseModel):
    user_key: str
    wallet_public_key: Optional[str] = None
    last_action: TradeAction = TradeAction.NONE
    state: FlowState = FlowState.IDLE
    token_address: Optional[str] = None
    trade_amount: Optional[float] = None
    quote_id: Optional[str] = None
    updated_at: int = 0

    @property
    def is_sell(self) -> bool:
        return self.last_action == TradeAction.SELL

    def clear_trade(self) -> None:
        self.token_address = None
        self.trade_amount = None
        self.quote_id = None

    def begin(self, action: TradeAction) -> None:
        """Nueva acción buy/sell: nunca arrastra token ni importe de un flujo anterior."""
        self.last_action = action
        self.clear_trade()

    def set_token(self, address: str) -> None:
        # cambiar de token invalida cualquier cotización pendiente
        if address != self.token_address:
            self.trade_amount = None
            self.quote_id = None
        self.token_address = address

    def reset(self) -> None:
        """Vuelta a Idle conservando la wallet."""
        self.clear_trade()
        self.last_action = TradeAction.NONE
        self.state = FlowState.IDLE
