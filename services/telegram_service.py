from __future__ import annotations
import requests

from enums.error_reason import ErrorReason
from models.errors import BotError
from utils.config import get_setting
from utils.logger import logger_manager, log_function

logger = logger_manager.setup_logger(__name__)

TELEGRAM_TOKEN = get_setting("TELEGRAM_BOT_TOKEN")
CHANNEL_ID = get_setting("CHANNEL_ID")

class TelegramService:
    """
    Envíos al canal por la Bot API (HTTP, síncrono).
    Lo usan el publicador periódico y el dashboard, que no tienen event loop propio.
    """
    def __init__(self, token: str | None = None, chat_id: str | None = None,
                 session: requests.Session | None = None) -> None:
        self.token = token or TELEGRAM_TOKEN
        self.chat_id = chat_id or CHANNEL_ID
        self.http = session or requests.Session()
        if not self.token or not self.chat_id:
            logger.warning("TelegramService sin TOKEN o CHANNEL_ID; se desactivan envíos.")

    @property
    def enabled(self) -> bool:
        return bool(self.token and self.chat_id)

    @property
    def api_base(self) -> str:
        return f"https://api.telegram.org/bot{self.token}"

    def _post(self, method: str, data: dict, files: dict | None = None) -> dict:
        if not self.enabled:
            raise BotError(ErrorReason.CHANNEL_UNAVAILABLE, "missing token or channel id")
        try:
            r = self.http.post(f"{self.api_base}/{method}", data=data, files=files, timeout=30)
            body = r.json()
        except (requests.RequestException, ValueError) as e:
            raise BotError(ErrorReason.CHANNEL_UNAVAILABLE, f"{method}: {e}", chat_id=self.chat_id) from e
        if not r.ok or not body.get("ok"):
            raise BotError(ErrorReason.CHANNEL_UNAVAILABLE, body.get("description") or f"HTTP {r.status_code}",
                           chat_id=self.chat_id, method=method)
        return body["result"]

    @log_function
    def send_photo(self, image: bytes, caption: str | None = None) -> tuple[int, str]:
        """Publica un PNG en el canal. Devuelve (message_id, file_id de la foto más grande)."""
        data = {"chat_id": self.chat_id}
        if caption:
            data["caption"] = caption
        result = self._post("sendPhoto", data, files={"photo": ("post.png", image, "image/png")})
        photos = result.get("photo") or []
        file_id = photos[-1]["file_id"] if photos else ""
        return int(result["message_id"]), file_id

