"""
Ephemeral aggregator quote and the executable transaction built from it.

Amounts are kept in base units exactly as the aggregator returns them;
the ``ui_*`` properties convert using the decimals of each side.
"""

from __future__ import annotations

import uuid
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from utils.solana_utils import from_base_units


def new_quote_id() -> str:
    # callback_data de Telegram admite 64 bytes: "confirm_trade:" + 12 hex
    return uuid.uuid4().hex[:12]


class Quote(BaseModel):
    input_mint: str
    output_mint: str
    in_amount: int
    out_amount: int
    other_amount_threshold: int
    price_impact_pct: float = 0.0
    slippage_bps: int
    input_decimals: int = 9
    output_decimals: int = 9
    quote_id: str = Field(default_factory=new_quote_id)
    raw: Dict[str, Any] = Field(default_factory=dict)

    @property
    def ui_in_amount(self) -> float:
        return from_base_units(self.in_amount, self.input_decimals)

    @property
    def ui_out_amount(self) -> float:
        return from_base_units(self.out_amount, self.output_decimals)

    @property
    def ui_min_out_amount(self) -> float:
        return from_base_units(self.other_amount_threshold, self.output_decimals)

    @property
    def slippage_pct(self) -> float:
        return self.slippage_bps / 100.0


class SwapTransaction(BaseModel):
    raw: bytes
    last_valid_block_height: Optional[int] = None
