from __future__ import annotations
import asyncio
from typing import Iterable, List, Optional

from telegram import InlineKeyboardButton, InlineKeyboardMarkup, Update
from telegram.error import BadRequest
from telegram.ext import (
    Application,
    CallbackQueryHandler,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    filters,
)

from controllers.channel_controller import ChannelPoster
from controllers.trade_controller import TradeController, build_trade_controller
from enums.trade_action import TradeAction
from models.errors import BotError
from models.reply import BotReply
from utils import keyboards
from utils.config import get_list, get_setting
from utils.formatters import FALLBACK_MESSAGE, format_error
from utils.logger import logger_manager, log_function, log_trade_error

logger = logger_manager.setup_logger(__name__)

def to_markup(rows: Optional[List[List[tuple]]]) -> Optional[InlineKeyboardMarkup]:
    if not rows:
        return None
    return InlineKeyboardMarkup([[InlineKeyboardButton(text, callback_data=data) for text, data in row] for row in rows])

class TelegramBot:
    """
    Superficie del bot (python-telegram-bot v20).
    Los handlers delegan en TradeController, que es síncrono: se ejecuta con
    asyncio.to_thread para que el loop siga atendiendo a otros usuarios.
    """
    def __init__(self, token: str | None = None, trade: TradeController | None = None,
                 poster: ChannelPoster | None = None, admin_ids: Iterable[str] | None = None) -> None:
        self.token = token or get_setting("TELEGRAM_BOT_TOKEN")
        if not self.token:
            raise RuntimeError("Falta TELEGRAM_BOT_TOKEN")

        self.trade = trade or build_trade_controller()
        self.poster = poster
        self.admin_ids = {str(a) for a in (admin_ids if admin_ids is not None else get_list("ADMIN_IDS"))}

        self.application = Application.builder().token(self.token).build()
        # loop del hilo que construye el bot (main.py lo crea antes)
        self._loop = asyncio.get_event_loop()

        self.application.add_handler(CommandHandler("start", self.cmd_start))
        self.application.add_handler(CommandHandler("testpost", self.cmd_testpost))
        self.application.add_handler(CallbackQueryHandler(self.cb_menu, pattern=r"^(buy|sell|my_wallet)$"))
        self.application.add_handler(CallbackQueryHandler(
            self.cb_trade, pattern=r"^(sell_50|sell_100|cancel_trade|enter_amount:.+|confirm_trade:.+)$"))
        self.application.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, self.on_text))
        self.application.add_error_handler(self.on_error)

        # Publicación periódica en el canal
        if self.poster is not None:
            self.poster.start(self.application.job_queue)

    # ---------- envío ----------
    async def _reply(self, update: Update, replies: List[BotReply]) -> None:
        chat = update.effective_chat
        for reply in replies:
            markup = to_markup(reply.buttons)
            try:
                await chat.send_message(reply.text, parse_mode=reply.parse_mode, reply_markup=markup,
                                        disable_web_page_preview=True)
            except BadRequest as e:
                # Markdown rechazado: se reenvía en texto plano
                logger.warning(f"Markdown rechazado ({e}); reenviando sin formato")
                await chat.send_message(reply.text, reply_markup=markup, disable_web_page_preview=True)

    @staticmethod
    def _user_key(update: Update) -> str:
        return str(update.effective_user.id)

    # ---------- comandos ----------
    @log_function
    async def cmd_start(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        payload = context.args[0] if context.args else None
        replies = await asyncio.to_thread(self.trade.start, self._user_key(update), payload)
        await self._reply(update, replies)

    @log_function
    async def cmd_testpost(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        if self._user_key(update) not in self.admin_ids:
            await update.message.reply_text("⛔ Solo administradores.")
            return
        if self.poster is None:
            await update.message.reply_text("Publicador de canal no configurado.")
            return
        try:
            post = await asyncio.to_thread(self.poster.post_once)
        except BotError as e:
            log_trade_error(logger, "testpost", self._user_key(update), e)
            await update.message.reply_text(format_error(e))
            return
        if post is None:
            await update.message.reply_text("Hay una publicación en curso; inténtalo en unos segundos.")
        else:
            await update.message.reply_text(f"✅ Publicado en el canal (message_id={post.message_id}).")

    # ---------- callbacks ----------
    @log_function
    async def cb_menu(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        query = update.callback_query
        await query.answer()
        user_key = self._user_key(update)
        data = query.data or ""
        if data == keyboards.CB_MY_WALLET:
            replies = await asyncio.to_thread(self.trade.show_wallet, user_key)
        else:
            replies = await asyncio.to_thread(self.trade.select_action, user_key, TradeAction(data))
        await self._reply(update, replies)

    @log_function
    async def cb_trade(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        query = update.callback_query
        await query.answer()
        user_key = self._user_key(update)
        data = query.data or ""
        if data == keyboards.CB_SELL_50:
            replies = await asyncio.to_thread(self.trade.sell_percentage, user_key, 50)
        elif data == keyboards.CB_SELL_100:
            replies = await asyncio.to_thread(self.trade.sell_percentage, user_key, 100)
        elif data == keyboards.CB_CANCEL:
            replies = await asyncio.to_thread(self.trade.cancel, user_key)
        elif data.startswith(keyboards.CB_ENTER_AMOUNT_PREFIX):
            address = data.split(":", 1)[1]
            replies = await asyncio.to_thread(self.trade.enter_amount, user_key, address)
        else:
            quote_id = data.split(":", 1)[1]
            replies = await asyncio.to_thread(self.trade.confirm, user_key, quote_id)
        await self._reply(update, replies)

    # ---------- texto ----------
    @log_function
    async def on_text(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        text = update.message.text if update.message else None
        if not text:
            return
        replies = await asyncio.to_thread(self.trade.handle_text, self._user_key(update), text)
        await self._reply(update, replies)

    async def on_error(self, update: object, context: ContextTypes.DEFAULT_TYPE):
        # Último recurso: nada por petición tumba el proceso
        logger.error(f"Error no controlado en handler: {context.error!r}", exc_info=context.error)
        if isinstance(update, Update) and update.effective_chat:
            try:
                await update.effective_chat.send_message(FALLBACK_MESSAGE)
            except Exception as e:
                logger.warning(f"No se pudo avisar al usuario: {e}")

    # ---------- ciclo de vida ----------
    def run(self):
        logger.info("TelegramBot iniciando...")
        # main.py crea el loop en el hilo del bot; no instales signal handlers aquí
        try:
            self.application.run_polling(allowed_updates=Update.ALL_TYPES, stop_signals=None, close_loop=False)
        finally:
            if self.poster is not None:
                self.poster.stop()

    def stop_running(self):
        # se llama desde otro hilo: el stop se agenda en el loop del bot
        self._loop.call_soon_threadsafe(self.application.stop_running)
