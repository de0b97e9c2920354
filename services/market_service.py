# services/market_service.py
from __future__ import annotations
import requests

from enums.error_reason import ErrorReason
from models.errors import BotError
from models.token import TokenInfo
from utils.config import get_setting
from utils.logger import log_function

class MarketService:
    """
    Datos de mercado de un token de Solana vía DexScreener.
    Se queda con el primer par que devuelve la API.
    """
    BASE = get_setting("DEXSCREENER_BASE_URL", "https://api.dexscreener.com").rstrip("/")
    TIMEOUT = 8

    def __init__(self, session: requests.Session | None = None) -> None:
        self.http = session or requests.Session()

    @log_function
    def get_token_info(self, address: str) -> TokenInfo | None:
        url = f"{self.BASE}/latest/dex/tokens/{address}"
        try:
            r = self.http.get(url, timeout=self.TIMEOUT)
            r.raise_for_status()
            data = r.json()
        except requests.Timeout as e:
            raise BotError(ErrorReason.NETWORK_TIMEOUT, f"dexscreener: {e}", address=address) from e
        except (requests.RequestException, ValueError) as e:
            raise BotError(ErrorReason.MARKET_DATA_UNAVAILABLE, str(e), address=address) from e

        pairs = (data or {}).get("pairs") or []
        if not pairs:
            return None
        return TokenInfo.from_dexscreener(pairs[0], address)
