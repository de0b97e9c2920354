"""
Domain model representing a Solana token as reported by DexScreener.

Only the fields shown to the user in the token card and the channel market
card are kept. Missing numbers come back as ``None`` instead of zero so the
formatter can print ``N/A``.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


def _to_float(value) -> Optional[float]:
    try:
        return float(value) if value is not None else None
    except (TypeError, ValueError):
        return None


class TokenInfo(BaseModel):

    address: str
    name: str = ""
    symbol: str = ""
    price_usd: Optional[float] = None
    price_native: Optional[float] = None
    fdv: Optional[float] = None
    volume_h24: Optional[float] = None
    price_change_h24: Optional[float] = None
    liquidity_usd: Optional[float] = None
    dex_id: str = ""
    pair_address: str = ""
    url: str = ""

    @classmethod
    def from_dexscreener(cls, raw: dict, address: str) -> "TokenInfo":
        base = raw.get("baseToken") or {}
        return cls(
            address=address,
            name=base.get("name", ""),
            symbol=base.get("symbol", ""),
            price_usd=_to_float(raw.get("priceUsd")),
            price_native=_to_float(raw.get("priceNative")),
            fdv=_to_float(raw.get("fdv") or raw.get("marketCap")),
            volume_h24=_to_float((raw.get("volume") or {}).get("h24")),
            price_change_h24=_to_float((raw.get("priceChange") or {}).get("h24")),
            liquidity_usd=_to_float((raw.get("liquidity") or {}).get("usd")),
            dex_id=raw.get("dexId", ""),
            pair_address=raw.get("pairAddress", ""),
            url=raw.get("url", ""),
        )
