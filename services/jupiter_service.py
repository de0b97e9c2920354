# services/jupiter_service.py
from __future__ import annotations
import base64
import requests

from enums.error_reason import ErrorReason
from models.errors import BotError
from models.quote import Quote, SwapTransaction
from utils.config import get_setting
from utils.logger import logger_manager, log_function

logger = logger_manager.setup_logger(__name__)

JUPITER_API_URL = get_setting("JUPITER_API_URL", "https://public.jupiterapi.com").rstrip("/")
SLIPPAGE_BPS = get_setting("SLIPPAGE_BPS", 100, int)
COMPUTE_UNIT_PRICE_MICRO_LAMPORTS = get_setting("COMPUTE_UNIT_PRICE_MICRO_LAMPORTS", 1000, int)

# errorCode del agregador -> motivo
_ROUTE_ERRORS = {
    "COULD_NOT_FIND_ANY_ROUTE",
    "NO_ROUTES_FOUND",
    "TOKEN_NOT_TRADABLE",
    "ROUTE_PLAN_DOES_NOT_CONSUME_ALL_THE_AMOUNT",
    "CIRCULAR_ARBITRAGE_IS_DISABLED",
    "MARKET_NOT_FOUND",
}
_AMOUNT_ERRORS = {
    "INVALID_AMOUNT",
    "AMOUNT_TOO_SMALL",
    "CANNOT_COMPUTE_OTHER_AMOUNT_THRESHOLD",
}

def classify_quote_error(error_code: str | None) -> ErrorReason:
    code = (error_code or "").upper()
    if code in _ROUTE_ERRORS:
        return ErrorReason.NO_ROUTE_FOUND
    if code in _AMOUNT_ERRORS:
        return ErrorReason.INVALID_AMOUNT
    return ErrorReason.QUOTE_UNAVAILABLE

class JupiterService:
    """Cliente HTTP del agregador Jupiter: cotización y transacción de swap."""
    TIMEOUT = 15

    def __init__(self, base_url: str | None = None, session: requests.Session | None = None) -> None:
        self.base_url = (base_url or JUPITER_API_URL).rstrip("/")
        self.http = session or requests.Session()

    @log_function
    def get_quote(self, input_mint: str, output_mint: str, amount_raw: int,
                  slippage_bps: int | None = None, input_decimals: int = 9,
                  output_decimals: int = 9) -> Quote:
        slippage = int(slippage_bps if slippage_bps is not None else SLIPPAGE_BPS)
        params = {
            "inputMint": input_mint,
            "outputMint": output_mint,
            "amount": str(int(amount_raw)),
            "slippageBps": str(slippage),
            "onlyDirectRoutes": "false",
            "platformFeeBps": "0",
        }
        if int(amount_raw) <= 0:
            raise BotError(ErrorReason.INVALID_AMOUNT, "amount must be > 0", amount_raw=amount_raw)
        try:
            r = self.http.get(f"{self.base_url}/quote", params=params, timeout=self.TIMEOUT)
        except requests.Timeout as e:
            raise BotError(ErrorReason.NETWORK_TIMEOUT, f"quote: {e}") from e
        except requests.RequestException as e:
            raise BotError(ErrorReason.QUOTE_UNAVAILABLE, str(e)) from e

        body = _json_or_empty(r)
        if not r.ok or body.get("error") or body.get("errorCode"):
            reason = classify_quote_error(body.get("errorCode"))
            detail = body.get("error") or f"HTTP {r.status_code}"
            raise BotError(reason, detail, input_mint=input_mint, output_mint=output_mint,
                           amount_raw=int(amount_raw), error_code=body.get("errorCode"))
        try:
            return Quote(
                input_mint=body.get("inputMint", input_mint),
                output_mint=body.get("outputMint", output_mint),
                in_amount=int(body["inAmount"]),
                out_amount=int(body["outAmount"]),
                other_amount_threshold=int(body.get("otherAmountThreshold") or 0),
                price_impact_pct=float(body.get("priceImpactPct") or 0.0),
                slippage_bps=int(body.get("slippageBps", slippage)),
                input_decimals=input_decimals,
                output_decimals=output_decimals,
                raw=body,
            )
        except (KeyError, TypeError, ValueError) as e:
            raise BotError(ErrorReason.QUOTE_UNAVAILABLE, f"respuesta de quote inválida: {e}") from e

    @log_function
    def get_swap_transaction(self, quote: Quote, user_public_key: str) -> SwapTransaction:
        payload = {
            "quoteResponse": quote.raw,
            "userPublicKey": user_public_key,
            "wrapAndUnwrapSol": True,
            "dynamicComputeUnitLimit": True,
            "computeUnitPriceMicroLamports": COMPUTE_UNIT_PRICE_MICRO_LAMPORTS,
        }
        try:
            r = self.http.post(f"{self.base_url}/swap", json=payload, timeout=self.TIMEOUT)
        except requests.Timeout as e:
            raise BotError(ErrorReason.NETWORK_TIMEOUT, f"swap: {e}") from e
        except requests.RequestException as e:
            raise BotError(ErrorReason.SWAP_FAILED, str(e)) from e

        body = _json_or_empty(r)
        if body.get("simulationError"):
            sim = body["simulationError"]
            detail = sim.get("error") if isinstance(sim, dict) else str(sim)
            raise BotError(ErrorReason.SIMULATION_FAILED, detail or "simulation error", quote_id=quote.quote_id)
        if not r.ok or body.get("error") or not body.get("swapTransaction"):
            raise BotError(ErrorReason.SWAP_FAILED, body.get("error") or f"HTTP {r.status_code}",
                           quote_id=quote.quote_id)
        try:
            raw = base64.b64decode(body["swapTransaction"])
        except (ValueError, TypeError) as e:
            raise BotError(ErrorReason.SWAP_FAILED, f"swapTransaction no es base64: {e}") from e
        return SwapTransaction(raw=raw, last_valid_block_height=body.get("lastValidBlockHeight"))

def _json_or_empty(r: requests.Response) -> dict:
    try:
        data = r.json()
    except ValueError:
        logger.warning(f"Respuesta no JSON de Jupiter ({r.status_code}): {r.text[:200]}")
        return {}
    return data if isinstance(data, dict) else {}
