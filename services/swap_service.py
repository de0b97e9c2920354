# services/swap_service.py
from __future__ import annotations

from enums.error_reason import ErrorReason
from enums.trade_action import TradeAction
from models.errors import BotError
from models.quote import Quote
from models.wallet import WalletSigner
from services.jupiter_service import JupiterService, SLIPPAGE_BPS
from services.solana_service import SolanaService
from utils.config import get_setting
from utils.logger import logger_manager, log_function
from utils.solana_utils import JUPITER_PROGRAM_ID, SOL_MINT, sol_to_lamports, to_base_units

logger = logger_manager.setup_logger(__name__)

# reserva fija de SOL para comisiones de red
MIN_SOL_FOR_TX = get_setting("MIN_SOL_FOR_TX", 0.005, float)

class SwapService:
    """
    Cotización y ejecución de swaps SOL <-> token.
    buy: SOL -> token (importe en SOL). sell: token -> SOL (importe en tokens).
    """
    def __init__(self, solana: SolanaService, jupiter: JupiterService,
                 slippage_bps: int | None = None, min_sol_for_tx: float | None = None) -> None:
        self.solana = solana
        self.jupiter = jupiter
        self.slippage_bps = int(slippage_bps if slippage_bps is not None else SLIPPAGE_BPS)
        self.reserve_lamports = sol_to_lamports(MIN_SOL_FOR_TX if min_sol_for_tx is None else min_sol_for_tx)

    @staticmethod
    def mints_for(action: TradeAction, token_address: str) -> tuple[str, str]:
        if action == TradeAction.SELL:
            return token_address, SOL_MINT
        return SOL_MINT, token_address

    def _decimals(self, action: TradeAction, token_address: str) -> tuple[int, int]:
        token_decimals = self.solana.get_mint_decimals(token_address)
        if action == TradeAction.SELL:
            return token_decimals, 9
        return 9, token_decimals

    @log_function
    def quote(self, action: TradeAction, token_address: str, amount: float) -> Quote:
        """Cotización para mostrar (o ejecutar) `amount` en unidades humanas del activo de entrada."""
        input_mint, output_mint = self.mints_for(action, token_address)
        in_dec, out_dec = self._decimals(action, token_address)
        raw_amount = to_base_units(amount, in_dec)
        if raw_amount <= 0:
            raise BotError(ErrorReason.INVALID_AMOUNT, "amount below one base unit", amount=amount)
        return self.jupiter.get_quote(input_mint, output_mint, raw_amount, self.slippage_bps, in_dec, out_dec)

    @log_function
    def execute(self, signer: WalletSigner, action: TradeAction, token_address: str, amount: float) -> str:
        """
        Ejecuta el swap completo y devuelve la firma confirmada.
        Cualquier paso que falle aborta todo el intento con un BotError.
        """
        owner = signer.public_key
        is_sell = action == TradeAction.SELL
        input_mint, output_mint = self.mints_for(action, token_address)

        # a) saldo suficiente (importe + reserva de comisiones)
        sol_balance = self.solana.get_balance(owner)
        if is_sell:
            if sol_balance < self.reserve_lamports:
                raise BotError(ErrorReason.INSUFFICIENT_SOL, "fee reserve not covered",
                               balance=sol_balance, required=self.reserve_lamports)
            token_balance = self.solana.get_token_balance(owner, token_address)
            if token_balance < amount:
                raise BotError(ErrorReason.INSUFFICIENT_TOKEN, "token balance below amount",
                               balance=token_balance, required=amount)
        else:
            required = sol_to_lamports(amount) + self.reserve_lamports
            if sol_balance < required:
                raise BotError(ErrorReason.INSUFFICIENT_SOL, "amount plus fee reserve not covered",
                               balance=sol_balance, required=required)

        # b) cuentas de ambos activos
        self.solana.ensure_token_account(signer, input_mint)
        self.solana.ensure_token_account(signer, output_mint)

        # c) ventas: el programa del agregador puede mover como mucho lo vendido
        if is_sell:
            in_dec, _ = self._decimals(action, token_address)
            self.solana.approve_delegate(signer, token_address, JUPITER_PROGRAM_ID, to_base_units(amount, in_dec))

        # d) cotización fresca (el precio pudo moverse desde la mostrada)
        quote = self.quote(action, token_address, amount)

        # e) transacción ejecutable
        swap_tx = self.jupiter.get_swap_transaction(quote, owner)

        # f) firma y envío, g) confirmación
        try:
            signed = signer.sign_versioned(swap_tx.raw)
        except (ValueError, TypeError) as e:
            raise BotError(ErrorReason.SWAP_FAILED, f"transacción no firmable: {e}", quote_id=quote.quote_id) from e
        signature = self.solana.send_and_confirm(bytes(signed), swap_tx.last_valid_block_height)
        logger.info(f"Swap {action.value} {amount} {token_address} confirmado: {signature}")
        return signature
