from __future__ import annotations
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path

def resolve_db_path(db_path: str | None = None) -> str:
    env_path = db_path or os.getenv("DB_PATH")
    if env_path:
        path = Path(env_path).expanduser().resolve()
    else:
        path = Path(__file__).resolve().parents[1] / "data" / "solswap.db"
    path.parent.mkdir(parents=True, exist_ok=True)
    return str(path)

@contextmanager
def connect(db_path: str):
    # una conexión corta por operación: los handlers corren en hilos distintos
    conn = sqlite3.connect(db_path, timeout=10)
    conn.row_factory = sqlite3.Row
    try:
        yield conn
        conn.commit()
    finally:
        conn.close()
