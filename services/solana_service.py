from __future__ import annotations
from typing import Any, Callable, List, Optional
from time import sleep

from solana.rpc.api import Client
from solana.rpc.commitment import Confirmed
from solana.rpc.types import TokenAccountOpts, TxOpts
from solders.hash import Hash
from solders.pubkey import Pubkey
from spl.token.constants import TOKEN_PROGRAM_ID
from spl.token.instructions import (
    ApproveParams,
    approve,
    create_associated_token_account,
    get_associated_token_address,
)

from enums.error_reason import ErrorReason
from models.errors import BotError
from models.wallet import WalletSigner
from utils.config import get_list, get_setting
from utils.logger import logger_manager, log_function
from utils.solana_utils import SOL_DECIMALS, SOL_MINT

logger = logger_manager.setup_logger(__name__)

# ---------- ENV ----------
# RPCs: admite coma-separado para failover.
DEFAULT_RPC_URLS = [u.rstrip("/") for u in get_list("RPC_URLS", "https://api.mainnet-beta.solana.com")]

REQUEST_TIMEOUT_SECS = get_setting("RPC_TIMEOUT_SECS", 30.0, float)
# 0 = un intento por cada RPC configurado (sin repetir el mismo proveedor)
RETRY_RPC_TIMES      = get_setting("RPC_RETRIES", 0, int)
RETRY_BACKOFF_SECS   = get_setting("RPC_RETRY_BACKOFF_SECS", 0.4, float)
# reenvíos extra de una transacción firmada (único paso con reintento automático)
SEND_RETRIES         = get_setting("SEND_RETRIES", 2, int)


class SolanaService:
    """
    Cliente RPC de Solana con failover entre proveedores.
    Los fallos salen siempre como BotError con su motivo.
    """
    def __init__(self, rpc_urls: Optional[List[str]] = None, client: Optional[Client] = None) -> None:
        self._rpc_urls: List[str] = list(rpc_urls or DEFAULT_RPC_URLS)
        self._current_rpc_idx = 0
        if client is not None:
            # cliente inyectado (tests): sin rotación
            self._client = client
            self._rpc_urls = []
        else:
            self._client = self._connect(self._rpc_urls[0])
        self._active_rpc = self._rpc_urls[0] if self._rpc_urls else "custom"

    # ---------- conexión / failover ----------
    def _connect(self, url: str) -> Client:
        return Client(url, timeout=REQUEST_TIMEOUT_SECS)

    def _rotate_and_reconnect(self) -> None:
        if len(self._rpc_urls) < 2:
            return
        self._current_rpc_idx = (self._current_rpc_idx + 1) % len(self._rpc_urls)
        url = self._rpc_urls[self._current_rpc_idx]
        logger.info(f"Cambiando a RPC: {url}")
        self._client = self._connect(url)
        self._active_rpc = url

    def _rpc_call(self, label: str, fn: Callable[[Client], Any], retries: Optional[int] = None) -> Any:
        """
        Ejecuta una llamada RPC con failover de proveedor.
        Agotados los intentos lanza BotError(RPC_UNAVAILABLE).
        """
        attempts = retries or RETRY_RPC_TIMES or max(1, len(self._rpc_urls))
        last_exc: Optional[Exception] = None
        for attempt in range(1, attempts + 1):
            try:
                return fn(self._client)
            except BotError:
                raise
            except Exception as e:
                last_exc = e
                logger.warning(f"[RPC:{label}] intento {attempt}/{attempts} falló en {self._active_rpc}: {e}")
                if attempt < attempts:
                    self._rotate_and_reconnect()
                    sleep(RETRY_BACKOFF_SECS * attempt)
        raise BotError(ErrorReason.RPC_UNAVAILABLE, f"{label}: {last_exc}", rpc=self._active_rpc) from last_exc

    # ---------- lecturas ----------
    @log_function
    def get_balance(self, address: str) -> int:
        """Saldo en lamports."""
        pubkey = Pubkey.from_string(address)
        return int(self._rpc_call("get_balance", lambda c: c.get_balance(pubkey, commitment=Confirmed).value))

    @log_function
    def get_token_balance(self, owner: str, mint: str) -> float:
        """Saldo humano (uiAmount) de la primera cuenta del mint; 0 si no tiene ninguna."""
        owner_pk, mint_pk = Pubkey.from_string(owner), Pubkey.from_string(mint)
        accounts = self._rpc_call(
            "get_token_accounts_by_owner",
            lambda c: c.get_token_accounts_by_owner_json_parsed(
                owner_pk, TokenAccountOpts(mint=mint_pk), commitment=Confirmed
            ).value,
        )
        if not accounts:
            return 0.0
        token_amount = accounts[0].account.data.parsed["info"]["tokenAmount"]
        return float(token_amount.get("uiAmountString") or token_amount.get("uiAmount") or 0.0)

    @log_function
    def get_mint_decimals(self, mint: str) -> int:
        if mint == SOL_MINT:
            return SOL_DECIMALS
        mint_pk = Pubkey.from_string(mint)
        info = self._rpc_call("get_mint", lambda c: c.get_account_info_json_parsed(mint_pk).value)
        try:
            return int(info.data.parsed["info"]["decimals"])
        except (AttributeError, KeyError, TypeError):
            logger.warning(f"Mint {mint} sin decimales legibles; uso {SOL_DECIMALS}")
            return SOL_DECIMALS

    def latest_blockhash(self) -> tuple[Hash, int]:
        value = self._rpc_call("get_latest_blockhash", lambda c: c.get_latest_blockhash(Confirmed).value)
        return value.blockhash, int(value.last_valid_block_height)

    # ---------- escrituras ----------
    @log_function
    def ensure_token_account(self, signer: WalletSigner, mint: str) -> str:
        """
        Cuenta asociada del mint para la wallet; la crea on-chain si falta.
        Para SOL nativo devuelve la propia wallet (el agregador envuelve/desenvuelve).
        """
        if mint == SOL_MINT:
            return signer.public_key
        mint_pk = Pubkey.from_string(mint)
        ata = get_associated_token_address(signer.pubkey, mint_pk)
        existing = self._rpc_call("get_account_info", lambda c: c.get_account_info(ata).value)
        if existing is not None:
            return str(ata)

        logger.info(f"Creando cuenta de token {ata} para {signer.public_key} (mint {mint})")
        try:
            ix = create_associated_token_account(signer.pubkey, signer.pubkey, mint_pk)
            blockhash, last_valid = self.latest_blockhash()
            tx = signer.sign_instructions([ix], blockhash)
            self.send_and_confirm(bytes(tx), last_valid_block_height=last_valid)
        except BotError as e:
            raise BotError(ErrorReason.ACCOUNT_CREATION_FAILED, e.detail, mint=mint, ata=str(ata)) from e
        return str(ata)

    @log_function
    def approve_delegate(self, signer: WalletSigner, mint: str, delegate: str, amount_raw: int) -> str:
        """SPL approve: autoriza a `delegate` a mover hasta `amount_raw` del token."""
        mint_pk = Pubkey.from_string(mint)
        source = get_associated_token_address(signer.pubkey, mint_pk)
        try:
            ix = approve(ApproveParams(
                program_id=TOKEN_PROGRAM_ID,
                source=source,
                delegate=Pubkey.from_string(delegate),
                owner=signer.pubkey,
                amount=int(amount_raw),
            ))
            blockhash, last_valid = self.latest_blockhash()
            tx = signer.sign_instructions([ix], blockhash)
            return self.send_and_confirm(bytes(tx), last_valid_block_height=last_valid)
        except BotError as e:
            raise BotError(ErrorReason.APPROVAL_FAILED, e.detail, mint=mint, delegate=delegate) from e

    @log_function
    def send_and_confirm(self, raw_tx: bytes, last_valid_block_height: Optional[int] = None) -> str:
        """
        Envía una transacción firmada y espera confirmación.
        El envío se reintenta hasta SEND_RETRIES veces; la confirmación no.
        """
        opts = TxOpts(skip_preflight=False, preflight_commitment=Confirmed)
        signature = None
        last_exc: Optional[Exception] = None
        for attempt in range(1, SEND_RETRIES + 2):
            try:
                signature = self._client.send_raw_transaction(raw_tx, opts=opts).value
                break
            except Exception as e:
                last_exc = e
                logger.warning(f"[send] intento {attempt}/{SEND_RETRIES + 1} falló: {e}")
                if attempt <= SEND_RETRIES:
                    sleep(RETRY_BACKOFF_SECS * attempt)
        if signature is None:
            raise BotError(ErrorReason.SUBMISSION_FAILED, str(last_exc)) from last_exc

        try:
            resp = self._client.confirm_transaction(
                signature, Confirmed, last_valid_block_height=last_valid_block_height
            )
        except Exception as e:
            raise BotError(ErrorReason.CONFIRMATION_FAILED, str(e), signature=str(signature)) from e

        status = resp.value[0] if resp.value else None
        if status is not None and status.err is not None:
            raise BotError(ErrorReason.CONFIRMATION_FAILED, f"on-chain error: {status.err}", signature=str(signature))
        logger.info(f"Transacción confirmada: {signature}")
        return str(signature)
