# services/render_service.py
from __future__ import annotations

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from enums.error_reason import ErrorReason
from models.errors import BotError
from utils.logger import logger_manager, log_function

logger = logger_manager.setup_logger(__name__)

_PAGE = """<!DOCTYPE html>
<html>
  <head>
    <meta charset="utf-8">
    <style>body {{ margin: 0; padding: 0; }} {css}</style>
  </head>
  <body>
    {html}
  </body>
</html>"""

def build_document(html: str, css: str) -> str:
    return _PAGE.format(html=html, css=css)

class RenderService:
    """
    HTML + CSS -> PNG con Chromium headless (Playwright, API síncrona).
    No llamar desde el hilo del event loop: el bot lo usa vía asyncio.to_thread.
    """
    def __init__(self, timeout_ms: int = 15000) -> None:
        self.timeout_ms = timeout_ms

    @log_function
    def render(self, html: str, css: str) -> bytes:
        document = build_document(html, css)
        try:
            with sync_playwright() as p:
                browser = p.chromium.launch(headless=True, args=["--no-sandbox", "--disable-setuid-sandbox"])
                try:
                    page = browser.new_page(device_scale_factor=2)
                    page.set_content(document, wait_until="networkidle", timeout=self.timeout_ms)
                    # recorta al primer elemento de la plantilla si existe
                    element = page.query_selector("body > *")
                    if element is not None:
                        return element.screenshot(type="png", timeout=self.timeout_ms)
                    return page.screenshot(type="png", full_page=True, timeout=self.timeout_ms)
                finally:
                    browser.close()
        except PlaywrightError as e:
            raise BotError(ErrorReason.RENDER_FAILED, str(e)) from e
