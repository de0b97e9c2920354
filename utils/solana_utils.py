"""
Solana helpers shared by controllers, services and formatters.

Address shape checks, base-unit conversions and the well known mints and
program ids used by the swap flow.
"""

from __future__ import annotations

import math
import re
from decimal import Decimal, ROUND_DOWN

from solders.pubkey import Pubkey

LAMPORTS_PER_SOL = 1_000_000_000
SOL_DECIMALS = 9
SOL_MINT = "So11111111111111111111111111111111111111112"
# programa del agregador Jupiter (delegado en las ventas)
JUPITER_PROGRAM_ID = "JUP6LkbZbjS1jKKwapdHNy74zcZ3tLUZoi5QNyVTaV4"

_BASE58_ADDRESS = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")


def is_address_shaped(text: str) -> bool:
    """32–44 caracteres del alfabeto base58."""
    return bool(text) and bool(_BASE58_ADDRESS.match(text))


def is_valid_address(text: str) -> bool:
    """Forma base58 y además construible como clave pública."""
    if not is_address_shaped(text):
        return False
    try:
        Pubkey.from_string(text)
    except (ValueError, TypeError):
        return False
    return True


def parse_positive_amount(text: str) -> float | None:
    """Importe humano > 0 o None. Acepta coma decimal."""
    try:
        value = Decimal((text or "").strip().replace(",", "."))
    except ArithmeticError:
        return None
    if not value.is_finite() or value <= 0:
        return None
    amount = float(value)
    # "1e400" es un Decimal finito pero desborda a inf como float
    if not math.isfinite(amount) or amount <= 0:
        return None
    return amount


def to_base_units(amount: float, decimals: int) -> int:
    """Importe humano → unidades base, truncando (nunca redondea hacia arriba)."""
    scaled = Decimal(str(amount)) * (Decimal(10) ** int(decimals))
    return int(scaled.to_integral_value(rounding=ROUND_DOWN))


def from_base_units(raw: int, decimals: int) -> float:
    return float(Decimal(int(raw)) / (Decimal(10) ** int(decimals)))


def lamports_to_sol(lamports: int) -> float:
    return from_base_units(lamports, SOL_DECIMALS)


def sol_to_lamports(sol: float) -> int:
    return to_base_units(sol, SOL_DECIMALS)
