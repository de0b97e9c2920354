# repositories/wallet_repository.py
from __future__ import annotations
import os
import time
from pathlib import Path

from cryptography.fernet import Fernet, InvalidToken
from solders.keypair import Keypair

from models.wallet import WalletSigner
from repositories.db import connect, resolve_db_path
from utils.logger import logger_manager, log_function

logger = logger_manager.setup_logger(__name__)

def _load_fernet(key: str | None = None, key_path: str | None = None) -> Fernet:
    """
    Clave Fernet: WALLET_ENCRYPTION_KEY o, si no existe, fichero de clave
    (WALLET_KEY_PATH) generado una única vez.
    """
    key = key or os.getenv("WALLET_ENCRYPTION_KEY")
    if key:
        return Fernet(key.encode("utf-8"))
    path = Path(key_path or os.getenv("WALLET_KEY_PATH", "./data/wallet.key")).expanduser()
    if not path.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(Fernet.generate_key())
        try:
            os.chmod(path, 0o600)
        except OSError:
            pass
        logger.warning(f"WALLET_ENCRYPTION_KEY no definida; generada clave en {path}. Haz copia de seguridad.")
    return Fernet(path.read_bytes().strip())

class WalletRepository:
    """
    Wallets custodiales (una por usuario). El secreto se guarda cifrado y solo
    sale de aquí envuelto en un WalletSigner.
    """
    def __init__(self, db_path: str | None = None, encryption_key: str | None = None,
                 key_path: str | None = None) -> None:
        self.db_path = resolve_db_path(db_path)
        self._fernet = _load_fernet(encryption_key, key_path)
        self._create_table()

    def _create_table(self) -> None:
        with connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS wallets(
                    id          INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_key    TEXT NOT NULL UNIQUE,
                    public_key  TEXT NOT NULL,
                    secret_key  TEXT NOT NULL,
                    created_at  INTEGER NOT NULL
                )
            """)

    @log_function
    def create(self, user_key: str) -> WalletSigner:
        """Genera y guarda la wallet. Si ya existía, devuelve la existente (nunca rota)."""
        existing = self.load(user_key)
        if existing is not None:
            return existing
        keypair = Keypair()
        token = self._fernet.encrypt(bytes(keypair)).decode("utf-8")
        with connect(self.db_path) as conn:
            conn.execute("""
                INSERT INTO wallets (user_key, public_key, secret_key, created_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(user_key) DO NOTHING
            """, (str(user_key), str(keypair.pubkey()), token, int(time.time())))
        # si otro hilo ganó la carrera, la fila buena es la suya
        return self.load(user_key) or WalletSigner(keypair)

    @log_function
    def load(self, user_key: str) -> WalletSigner | None:
        with connect(self.db_path) as conn:
            row = conn.execute("SELECT public_key, secret_key FROM wallets WHERE user_key=?",
                               (str(user_key),)).fetchone()
        if not row:
            return None
        try:
            secret = self._fernet.decrypt(row["secret_key"].encode("utf-8"))
        except InvalidToken:
            logger.error(f"No se pudo descifrar la wallet de {user_key}: clave de cifrado distinta.")
            raise
        signer = WalletSigner(Keypair.from_bytes(secret))
        if signer.public_key != row["public_key"]:
            raise ValueError(f"Wallet corrupta para {user_key}: la clave pública no coincide.")
        return signer

    def public_key(self, user_key: str) -> str | None:
        with connect(self.db_path) as conn:
            row = conn.execute("SELECT public_key FROM wallets WHERE user_key=?", (str(user_key),)).fetchone()
        return row[0] if row else None
