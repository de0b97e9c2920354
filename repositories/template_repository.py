# repositories/template_repository.py
from __future__ import annotations

from models.template import Template
from repositories.db import connect, resolve_db_path
from templates.defaults import DEFAULT_TEMPLATES
from utils.logger import logger_manager, log_function

logger = logger_manager.setup_logger(__name__)

class TemplateRepository:
    def __init__(self, db_path: str | None = None) -> None:
        self.db_path = resolve_db_path(db_path)
        self._create_table()

    def _create_table(self) -> None:
        with connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS templates(
                    id    INTEGER PRIMARY KEY AUTOINCREMENT,
                    name  TEXT NOT NULL,
                    html  TEXT NOT NULL,
                    css   TEXT NOT NULL
                )
            """)

    @log_function
    def create(self, name: str, html: str, css: str) -> Template:
        with connect(self.db_path) as conn:
            cur = conn.execute("INSERT INTO templates (name, html, css) VALUES (?, ?, ?)", (name, html, css))
            new_id = cur.lastrowid
        return Template(id=new_id, name=name, html=html, css=css)

    def list_all(self) -> list[Template]:
        with connect(self.db_path) as conn:
            rows = conn.execute("SELECT id, name, html, css FROM templates ORDER BY id ASC").fetchall()
        return [Template(**dict(r)) for r in rows]

    def get(self, template_id: int) -> Template | None:
        with connect(self.db_path) as conn:
            row = conn.execute("SELECT id, name, html, css FROM templates WHERE id=?", (int(template_id),)).fetchone()
        return Template(**dict(row)) if row else None

    @log_function
    def seed_defaults(self) -> int:
        """Inserta las plantillas por defecto solo si la tabla está vacía. Devuelve cuántas."""
        with connect(self.db_path) as conn:
            count = conn.execute("SELECT COUNT(*) FROM templates").fetchone()[0]
            if count:
                return 0
            conn.executemany(
                "INSERT INTO templates (name, html, css) VALUES (?, ?, ?)",
                [(t["name"], t["html"], t["css"]) for t in DEFAULT_TEMPLATES],
            )
        logger.info(f"Plantillas por defecto creadas: {len(DEFAULT_TEMPLATES)}")
        return len(DEFAULT_TEMPLATES)
