from __future__ import annotations
from typing import Callable, List, Optional

from enums.error_reason import ErrorKind, ErrorReason
from enums.trade_action import FlowState, TradeAction
from models.errors import BotError
from models.reply import BotReply
from models.session import Session
from models.wallet import WalletSigner
from controllers.wallet_controller import WalletController
from repositories.session_repository import SessionRepository
from repositories.wallet_repository import WalletRepository
from services.jupiter_service import JupiterService
from services.market_service import MarketService
from services.solana_service import SolanaService
from services.swap_service import SwapService
from utils import formatters as fmt
from utils import keyboards
from utils.logger import logger_manager, log_function, log_trade_error
from utils.solana_utils import (
    is_address_shaped,
    is_valid_address,
    lamports_to_sol,
    parse_positive_amount,
    sol_to_lamports,
)

logger = logger_manager.setup_logger(__name__)

_AMOUNT_STATES = (FlowState.AWAITING_AMOUNT, FlowState.AWAITING_CONFIRMATION)
_SELL_PERCENTAGES = (50, 100)

class TradeController:
    """
    Máquina de estados del flujo de trade por usuario.

    Idle -> AwaitingTokenAddress -> AwaitingAmount -> AwaitingConfirmation -> (Executing) -> Idle.
    Cada punto de entrada carga la sesión, la modifica, la guarda y devuelve
    las respuestas a enviar. Los fallos nunca salen de aquí: se registran y se
    convierten en un mensaje para el usuario.
    """
    def __init__(self, sessions: SessionRepository, wallets: WalletController,
                 market: MarketService, solana: SolanaService, swap: SwapService) -> None:
        self.sessions = sessions
        self.wallets = wallets
        self.market = market
        self.solana = solana
        self.swap = swap

    # ------------------------------------------------------------------
    # infraestructura común
    # ------------------------------------------------------------------
    def _run(self, operation: str, user_key: str, handler: Callable[[Session], List[BotReply]]) -> List[BotReply]:
        session = self.sessions.get(str(user_key))
        was_sell = session.is_sell
        try:
            replies = handler(session)
        except BotError as e:
            # confirm ya reinició la sesión: vale la acción con la que entró
            is_sell = session.is_sell if session.last_action != TradeAction.NONE else was_sell
            log_trade_error(logger, operation, session.user_key, e,
                            state=session.state.value, token=session.token_address)
            if e.kind == ErrorKind.SESSION_INCONSISTENCY:
                session.reset()
            replies = [BotReply(text=fmt.format_error(e, is_sell), error=e.reason)]
        except Exception as e:
            log_trade_error(logger, operation, session.user_key, e,
                            state=session.state.value, token=session.token_address)
            session.reset()
            replies = [BotReply(text=fmt.FALLBACK_MESSAGE, parse_mode=None, error=ErrorReason.UNEXPECTED)]
        self.sessions.save(session)
        return replies

    def _wallet_balance(self, signer: WalletSigner) -> int:
        return self.solana.get_balance(signer.public_key)

    def _begin_flow(self, session: Session, signer: WalletSigner, action: TradeAction) -> int:
        """Arranca un buy/sell limpio; sin SOL (o sin RPC) la acción no queda pendiente."""
        session.begin(action)
        session.state = FlowState.IDLE
        try:
            balance = self._wallet_balance(signer)
            if balance <= 0:
                raise BotError(ErrorReason.ZERO_BALANCE, "wallet has no SOL",
                               balance=balance, address=signer.public_key)
        except BotError:
            # flujo detenido: una dirección posterior vuelve a ser una consulta suelta
            session.reset()
            raise
        return balance

    # ------------------------------------------------------------------
    # /start
    # ------------------------------------------------------------------
    @log_function
    def start(self, user_key: str, payload: Optional[str] = None) -> List[BotReply]:
        """`/start` o enlace profundo `/start <buy|sell>_<address>`."""
        def handler(session: Session) -> List[BotReply]:
            signer = self.wallets.get_or_create_wallet(session)
            action, address = _parse_start_payload(payload)
            if action is None:
                session.reset()
                return [BotReply(text=fmt.format_startup_wallet_info(signer.public_key),
                                 buttons=keyboards.main_menu())]
            self._begin_flow(session, signer, action)
            session.state = FlowState.AWAITING_TOKEN_ADDRESS
            return self._lookup_token(session, address)
        return self._run("start", user_key, handler)

    # ------------------------------------------------------------------
    # menú
    # ------------------------------------------------------------------
    @log_function
    def select_action(self, user_key: str, action: TradeAction) -> List[BotReply]:
        """Botón buy/sell: siempre limpia token e importe pendientes antes de nada."""
        def handler(session: Session) -> List[BotReply]:
            signer = self.wallets.get_or_create_wallet(session)
            balance = self._begin_flow(session, signer, action)
            session.state = FlowState.AWAITING_TOKEN_ADDRESS
            return [BotReply(text=fmt.format_action_prompt(balance, signer.public_key, session.is_sell))]
        return self._run(f"select_{action.value}", user_key, handler)

    @log_function
    def show_wallet(self, user_key: str) -> List[BotReply]:
        def handler(session: Session) -> List[BotReply]:
            signer = self.wallets.get_or_create_wallet(session)
            balance = self._wallet_balance(signer)
            return [BotReply(text=fmt.format_my_wallet(balance, signer.public_key),
                             buttons=keyboards.main_menu())]
        return self._run("my_wallet", user_key, handler)

    # ------------------------------------------------------------------
    # texto libre
    # ------------------------------------------------------------------
    @log_function
    def handle_text(self, user_key: str, text: str) -> List[BotReply]:
        """
        Con token pendiente se intenta primero un importe; un texto con forma de
        dirección cambia de token. Fuera de flujo solo se aceptan direcciones.
        """
        def handler(session: Session) -> List[BotReply]:
            signer = self.wallets.get_or_create_wallet(session)
            value = (text or "").strip()
            if session.state in _AMOUNT_STATES:
                amount = parse_positive_amount(value)
                if amount is not None:
                    return self._quote_amount(session, signer, amount)
                if is_address_shaped(value):
                    return self._lookup_token(session, value)
                raise BotError(ErrorReason.INVALID_AMOUNT, "not a positive number", text=value[:64])
            if is_address_shaped(value):
                return self._lookup_token(session, value)
            raise BotError(ErrorReason.INVALID_ADDRESS, "not address shaped", text=value[:64])
        return self._run("text_input", user_key, handler)

    def _lookup_token(self, session: Session, address: str) -> List[BotReply]:
        if not is_valid_address(address):
            raise BotError(ErrorReason.INVALID_ADDRESS, "not a valid public key", address=address)
        token = self.market.get_token_info(address)
        if token is None:
            raise BotError(ErrorReason.TOKEN_NOT_FOUND, "no pairs on dexscreener", address=address)

        session.set_token(address)
        session.trade_amount = None
        session.quote_id = None
        if session.last_action == TradeAction.NONE:
            # consulta suelta: se muestra el token y los botones deciden el flujo
            session.state = FlowState.IDLE
        else:
            session.state = FlowState.AWAITING_AMOUNT
        return [BotReply(text=fmt.format_token_info(token),
                         buttons=keyboards.trade_buttons(session.is_sell, address))]

    def _quote_amount(self, session: Session, signer: WalletSigner, amount: float) -> List[BotReply]:
        if not session.token_address:
            raise BotError(ErrorReason.MISSING_TOKEN, "amount entered without a token")
        if session.last_action == TradeAction.NONE:
            session.last_action = TradeAction.BUY
        # un importe nuevo invalida cualquier cotización anterior
        session.trade_amount = None
        session.quote_id = None
        session.state = FlowState.AWAITING_AMOUNT

        sol_balance = self._wallet_balance(signer)
        if session.is_sell:
            token_balance = self.solana.get_token_balance(signer.public_key, session.token_address)
            if amount > token_balance:
                raise BotError(ErrorReason.INSUFFICIENT_FOR_TRADE, "amount above token balance",
                               available=token_balance, required=amount, unit="tokens",
                               address=signer.public_key)
        else:
            if sol_balance <= 0:
                raise BotError(ErrorReason.ZERO_BALANCE, "wallet has no SOL",
                               balance=sol_balance, address=signer.public_key)
            if sol_to_lamports(amount) > sol_balance:
                raise BotError(ErrorReason.INSUFFICIENT_FOR_TRADE, "amount above SOL balance",
                               available=lamports_to_sol(sol_balance), required=amount, unit="SOL",
                               address=signer.public_key)
        return self._present_quote(session, amount, sol_balance)

    def _present_quote(self, session: Session, amount: float, sol_balance: int) -> List[BotReply]:
        quote = self.swap.quote(session.last_action, session.token_address, amount)
        session.trade_amount = amount
        session.quote_id = quote.quote_id
        session.state = FlowState.AWAITING_CONFIRMATION
        return [BotReply(text=fmt.format_trade_summary(quote, sol_balance, session.is_sell),
                         buttons=keyboards.confirmation_buttons(quote.quote_id))]

    # ------------------------------------------------------------------
    # botones de trade
    # ------------------------------------------------------------------
    @log_function
    def enter_amount(self, user_key: str, address: str) -> List[BotReply]:
        def handler(session: Session) -> List[BotReply]:
            self.wallets.get_or_create_wallet(session)
            if not is_valid_address(address):
                raise BotError(ErrorReason.INVALID_ADDRESS, "bad enter_amount payload", address=address)
            session.set_token(address)
            if session.last_action == TradeAction.NONE:
                session.last_action = TradeAction.BUY
            session.state = FlowState.AWAITING_AMOUNT
            return [BotReply(text=fmt.format_enter_amount(session.is_sell), parse_mode=None)]
        return self._run("enter_amount", user_key, handler)

    @log_function
    def sell_percentage(self, user_key: str, percentage: int) -> List[BotReply]:
        """Atajo sell 50% / 100%: importe = saldo del token * porcentaje, directo a la cotización."""
        def handler(session: Session) -> List[BotReply]:
            if percentage not in _SELL_PERCENTAGES:
                raise BotError(ErrorReason.INVALID_AMOUNT, "unsupported percentage", percentage=percentage)
            if not session.token_address:
                raise BotError(ErrorReason.MISSING_TOKEN, "sell shortcut without a token")
            signer = self.wallets.get_or_create_wallet(session)
            session.last_action = TradeAction.SELL
            session.trade_amount = None
            session.quote_id = None
            session.state = FlowState.AWAITING_AMOUNT

            sol_balance = self._wallet_balance(signer)
            token_balance = self.solana.get_token_balance(signer.public_key, session.token_address)
            if token_balance <= 0:
                raise BotError(ErrorReason.INSUFFICIENT_TOKEN, "no tokens to sell",
                               balance=0.0, mint=session.token_address)
            sell_amount = token_balance * (percentage / 100)
            return self._present_quote(session, sell_amount, sol_balance)
        return self._run(f"sell_{percentage}", user_key, handler)

    @log_function
    def confirm(self, user_key: str, quote_id: str) -> List[BotReply]:
        """
        Ejecuta el trade pendiente. Sin wallet, importe o token la sesión es
        inconsistente: vuelve a Idle sin ejecutar nada.
        """
        def handler(session: Session) -> List[BotReply]:
            if not session.wallet_public_key:
                raise BotError(ErrorReason.MISSING_WALLET, "confirm without wallet")
            if session.trade_amount is None:
                raise BotError(ErrorReason.MISSING_TRADE_AMOUNT, "confirm without amount")
            if not session.token_address:
                raise BotError(ErrorReason.MISSING_TOKEN, "confirm without token")
            if session.state != FlowState.AWAITING_CONFIRMATION or quote_id != session.quote_id:
                raise BotError(ErrorReason.STALE_QUOTE, "quote superseded",
                               received=quote_id, current=session.quote_id)

            signer = self.wallets.signer_for(session)
            action, token, amount = session.last_action, session.token_address, session.trade_amount
            is_sell = session.is_sell
            session.state = FlowState.EXECUTING
            self.sessions.save(session)

            try:
                signature = self.swap.execute(signer, action, token, amount)
            finally:
                # éxito o fallo: el intento termina en Idle
                session.reset()
            return [BotReply(text=fmt.format_trade_success(signature, signer.public_key, amount, is_sell),
                             buttons=keyboards.main_menu())]

        return self._run("confirm_trade", user_key, handler)

    @log_function
    def cancel(self, user_key: str) -> List[BotReply]:
        def handler(session: Session) -> List[BotReply]:
            session.reset()
            return [BotReply(text=fmt.format_cancelled(), buttons=keyboards.main_menu())]
        return self._run("cancel_trade", user_key, handler)

def _parse_start_payload(payload: Optional[str]) -> tuple[Optional[TradeAction], Optional[str]]:
    """'buy_<address>' / 'sell_<address>' -> (acción, dirección); cualquier otra cosa -> (None, None)."""
    if not payload:
        return None, None
    action, _, address = payload.strip().partition("_")
    if not address or action not in (TradeAction.BUY.value, TradeAction.SELL.value):
        return None, None
    return TradeAction(action), address

def build_trade_controller(db_path: Optional[str] = None) -> TradeController:
    """Cablea el controlador con los servicios reales (sqlite, RPC, Jupiter, DexScreener)."""
    sessions = SessionRepository(db_path)
    solana = SolanaService()
    return TradeController(
        sessions=sessions,
        wallets=WalletController(WalletRepository(db_path), sessions),
        market=MarketService(),
        solana=solana,
        swap=SwapService(solana, JupiterService()),
    )
