# repositories/session_repository.py
from __future__ import annotations
import time

from enums.trade_action import FlowState, TradeAction
from models.session import Session
from repositories.db import connect, resolve_db_path
from utils.logger import log_function

class SessionRepository:
    """
    Sesión por usuario (clave = id de Telegram).
    - save() es un upsert: último escritor gana por clave.
    - Usuarios distintos nunca comparten fila.
    """
    def __init__(self, db_path: str | None = None) -> None:
        self.db_path = resolve_db_path(db_path)
        self._create_table()

    def _create_table(self) -> None:
        with connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS sessions(
                    user_key          TEXT PRIMARY KEY,
                    wallet_public_key TEXT,
                    last_action       TEXT NOT NULL DEFAULT 'none',
                    state             TEXT NOT NULL DEFAULT 'idle',
                    token_address     TEXT,
                    trade_amount      REAL,
                    quote_id          TEXT,
                    updated_at        INTEGER
                )
            """)

    @log_function
    def get(self, user_key: str) -> Session:
        with connect(self.db_path) as conn:
            row = conn.execute("SELECT * FROM sessions WHERE user_key=?", (str(user_key),)).fetchone()
        if not row:
            return Session(user_key=str(user_key))
        return Session(
            user_key=row["user_key"],
            wallet_public_key=row["wallet_public_key"],
            last_action=TradeAction(row["last_action"]),
            state=FlowState(row["state"]),
            token_address=row["token_address"],
            trade_amount=row["trade_amount"],
            quote_id=row["quote_id"],
            updated_at=row["updated_at"] or 0,
        )

    @log_function
    def save(self, session: Session) -> None:
        session.updated_at = int(time.time())
        with connect(self.db_path) as conn:
            conn.execute("""
                INSERT INTO sessions (user_key, wallet_public_key, last_action, state,
                                      token_address, trade_amount, quote_id, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(user_key) DO UPDATE SET
                    wallet_public_key=excluded.wallet_public_key,
                    last_action=excluded.last_action,
                    state=excluded.state,
                    token_address=excluded.token_address,
                    trade_amount=excluded.trade_amount,
                    quote_id=excluded.quote_id,
                    updated_at=excluded.updated_at
            """, (
                session.user_key, session.wallet_public_key, session.last_action.value,
                session.state.value, session.token_address, session.trade_amount,
                session.quote_id, session.updated_at,
            ))

    def list_all(self, limit: int = 200) -> list[dict]:
        with connect(self.db_path) as conn:
            cur = conn.execute("""
                SELECT user_key, wallet_public_key, last_action, state, token_address, trade_amount, updated_at
                FROM sessions ORDER BY updated_at DESC LIMIT ?
            """, (limit,))
            cols = [d[0] for d in cur.description]
            return [dict(zip(cols, r)) for r in cur.fetchall()]

    def count_by_state(self) -> dict[str, int]:
        with connect(self.db_path) as conn:
            rows = conn.execute("SELECT state, COUNT(*) FROM sessions GROUP BY state").fetchall()
        return {r[0]: int(r[1]) for r in rows}
