from __future__ import annotations
import asyncio
import html
import threading
from datetime import datetime, timezone
from string import Template as StringTemplate
from typing import Optional

from enums.error_reason import ErrorReason
from models.errors import BotError
from models.template import Post, Template
from repositories.post_repository import PostRepository
from repositories.template_repository import TemplateRepository
from services.market_service import MarketService
from services.render_service import RenderService
from services.telegram_service import TelegramService
from utils.config import get_setting
from utils.formatters import fmt_amount, fmt_usd
from utils.logger import logger_manager, log_function, log_trade_error

logger = logger_manager.setup_logger(__name__)

CHANNEL_POST_INTERVAL_SEC = get_setting("CHANNEL_POST_INTERVAL_SEC", 60, int)
CHANNEL_TEMPLATE_ID = get_setting("CHANNEL_TEMPLATE_ID", None, int)
CHANNEL_TOKEN_ADDRESS = get_setting("CHANNEL_TOKEN_ADDRESS")

_MARKET_KEYS = ("name", "symbol", "price_usd", "market_cap", "volume_h24", "liquidity_usd",
                "price_change_h24", "dex_id")

def fill_template(template: Template, values: dict) -> str:
    """Sustituye $marcadores del HTML; los desconocidos se dejan tal cual."""
    safe = {k: html.escape(str(v)) for k, v in values.items()}
    return StringTemplate(template.html).safe_substitute(safe)

class ChannelPoster:
    """
    Publicador periódico de imágenes en el canal.

    Es un recurso con ciclo de vida propio: start() registra su job en el
    JobQueue, stop() lo quita. Si una ejecución salta mientras la anterior
    sigue renderizando, se omite.
    """
    def __init__(self, templates: TemplateRepository, posts: PostRepository,
                 renderer: RenderService, telegram: TelegramService,
                 market: Optional[MarketService] = None,
                 interval: int = CHANNEL_POST_INTERVAL_SEC,
                 template_id: Optional[int] = CHANNEL_TEMPLATE_ID,
                 token_address: Optional[str] = CHANNEL_TOKEN_ADDRESS,
                 name: str = "channel_poster") -> None:
        self.templates = templates
        self.posts = posts
        self.renderer = renderer
        self.telegram = telegram
        self.market = market
        self.interval = interval
        self.template_id = template_id
        self.token_address = token_address
        self.name = name
        self._job = None
        self._busy = threading.Lock()
        self._update_number = 0
        self._rotation = 0

    # ---------- ciclo de vida ----------
    @property
    def running(self) -> bool:
        return self._job is not None

    def start(self, job_queue) -> None:
        if self._job is not None:
            return
        # primera publicación inmediata
        self._job = job_queue.run_repeating(self._tick, interval=self.interval, first=0, name=self.name)
        logger.info(f"[{self.name}] publicando cada {self.interval}s")

    def stop(self) -> None:
        if self._job is None:
            return
        self._job.schedule_removal()
        self._job = None
        logger.info(f"[{self.name}] detenido")

    async def _tick(self, context) -> None:
        try:
            await asyncio.to_thread(self.post_once)
        except BotError as e:
            log_trade_error(logger, "channel_post", None, e, poster=self.name)
        except Exception as e:
            logger.exception(f"[{self.name}] error publicando: {e}")

    # ---------- publicación ----------
    def _pick_template(self, template_id: Optional[int]) -> Template:
        wanted = template_id if template_id is not None else self.template_id
        if wanted is not None:
            template = self.templates.get(wanted)
            if template is None:
                raise BotError(ErrorReason.RENDER_FAILED, f"template {wanted} not found")
            return template
        available = self.templates.list_all()
        if not available:
            raise BotError(ErrorReason.RENDER_FAILED, "no templates stored")
        template = available[self._rotation % len(available)]
        self._rotation += 1
        return template

    def _values(self, update_number: int) -> dict:
        values = {
            "update_number": update_number,
            "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC"),
        }
        # sin datos de mercado la tarjeta muestra N/A
        values.update({key: "N/A" for key in _MARKET_KEYS})
        values["change_class"] = ""
        if not (self.token_address and self.market):
            return values
        try:
            token = self.market.get_token_info(self.token_address)
        except BotError as e:
            log_trade_error(logger, "channel_market_data", None, e, poster=self.name)
            token = None
        if token is None:
            return values
        change = token.price_change_h24
        values.update({
            "name": token.name or token.symbol,
            "symbol": token.symbol,
            "price_usd": fmt_usd(token.price_usd).lstrip("$"),
            "market_cap": fmt_usd(token.fdv).lstrip("$"),
            "volume_h24": fmt_usd(token.volume_h24).lstrip("$"),
            "liquidity_usd": fmt_usd(token.liquidity_usd).lstrip("$"),
            "price_change_h24": fmt_amount(change, 2),
            "change_class": "change-negative" if (change or 0) < 0 else "change-positive",
            "dex_id": token.dex_id,
        })
        return values

    def render(self, template: Template, update_number: Optional[int] = None) -> bytes:
        """PNG de la plantilla con los marcadores rellenos (también lo usa el dashboard)."""
        number = update_number if update_number is not None else self._update_number + 1
        return self.renderer.render(fill_template(template, self._values(number)), template.css)

    @log_function
    def post_once(self, template_id: Optional[int] = None) -> Optional[Post]:
        """Renderiza y publica una imagen. None si ya había una publicación en curso."""
        if not self._busy.acquire(blocking=False):
            logger.warning(f"[{self.name}] publicación anterior aún en curso; se omite esta")
            return None
        try:
            template = self._pick_template(template_id)
            number = self._update_number + 1
            image = self.render(template, number)
            message_id, file_id = self.telegram.send_photo(image)
            self._update_number = number
            post = self.posts.create(template.id, file_id, message_id)
            logger.info(f"[{self.name}] publicado #{number} plantilla={template.name} message_id={message_id}")
            return post
        finally:
            self._busy.release()

def build_channel_poster(db_path: Optional[str] = None) -> ChannelPoster:
    templates = TemplateRepository(db_path)
    templates.seed_defaults()
    return ChannelPoster(
        templates=templates,
        posts=PostRepository(db_path),
        renderer=RenderService(),
        telegram=TelegramService(),
        market=MarketService(),
    )
