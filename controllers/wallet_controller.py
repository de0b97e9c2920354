from __future__ import annotations

from enums.error_reason import ErrorReason
from models.errors import BotError
from models.session import Session
from models.wallet import WalletSigner
from repositories.session_repository import SessionRepository
from repositories.wallet_repository import WalletRepository
from utils.logger import logger_manager, log_function

logger = logger_manager.setup_logger(__name__)

class WalletController:
    def __init__(self, wallets: WalletRepository | None = None,
                 sessions: SessionRepository | None = None) -> None:
        self.wallets = wallets or WalletRepository()
        self.sessions = sessions or SessionRepository()

    @log_function
    def get_or_create_wallet(self, session: Session) -> WalletSigner:
        """
        Wallet de la sesión; la crea (y guarda la sesión) si aún no tiene.
        Idempotente: nunca rota ni borra una wallet existente.
        """
        if session.wallet_public_key:
            signer = self.wallets.load(session.user_key)
            if signer is None or signer.public_key != session.wallet_public_key:
                raise BotError(ErrorReason.MISSING_WALLET, "session references a wallet that is not stored",
                               public_key=session.wallet_public_key)
            return signer

        signer = self.wallets.create(session.user_key)
        session.wallet_public_key = signer.public_key
        self.sessions.save(session)
        logger.info(f"Wallet asignada a {session.user_key}: {signer.public_key}")
        return signer

    def signer_for(self, session: Session) -> WalletSigner:
        """Firmante de una sesión que ya debe tener wallet (paso de confirmación)."""
        if not session.wallet_public_key:
            raise BotError(ErrorReason.MISSING_WALLET, "session has no wallet")
        return self.get_or_create_wallet(session)
