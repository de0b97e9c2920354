# repositories/post_repository.py
from __future__ import annotations
import time

from models.template import Post
from repositories.db import connect, resolve_db_path
from utils.logger import log_function

class PostRepository:
    """Publicaciones hechas en el canal (una fila por imagen enviada)."""
    def __init__(self, db_path: str | None = None) -> None:
        self.db_path = resolve_db_path(db_path)
        self._create_table()

    def _create_table(self) -> None:
        with connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS posts(
                    id           INTEGER PRIMARY KEY AUTOINCREMENT,
                    template_id  INTEGER REFERENCES templates(id),
                    image_url    TEXT NOT NULL,
                    posted_at    INTEGER NOT NULL,
                    message_id   INTEGER NOT NULL
                )
            """)

    @log_function
    def create(self, template_id: int | None, image_url: str, message_id: int,
               posted_at: int | None = None) -> Post:
        ts = int(posted_at or time.time())
        with connect(self.db_path) as conn:
            cur = conn.execute("""
                INSERT INTO posts (template_id, image_url, posted_at, message_id)
                VALUES (?, ?, ?, ?)
            """, (template_id, image_url, ts, int(message_id)))
            new_id = cur.lastrowid
        return Post(id=new_id, template_id=template_id, image_url=image_url, posted_at=ts, message_id=int(message_id))

    def list_recent(self, limit: int = 100) -> list[dict]:
        with connect(self.db_path) as conn:
            cur = conn.execute("""
                SELECT p.id, p.template_id, t.name AS template_name, p.image_url, p.posted_at, p.message_id
                FROM posts p LEFT JOIN templates t ON t.id = p.template_id
                ORDER BY p.posted_at DESC, p.id DESC LIMIT ?
            """, (limit,))
            cols = [d[0] for d in cur.description]
            return [dict(zip(cols, r)) for r in cur.fetchall()]
