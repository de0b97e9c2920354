# main.py
from __future__ import annotations
import os
import sys
import time
import signal
import threading
import subprocess
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# ---- imports del proyecto (después de cargar .env: leen la config al importar) ----
from utils.config import get_setting
from utils.logger import logger_manager

logger = logger_manager.setup_logger(__name__)

# ------------------------------
# Configuración
# ------------------------------
PROJECT_ROOT = Path(__file__).resolve().parent
STREAMLIT_APP = get_setting("STREAMLIT_APP", str(PROJECT_ROOT / "streamlit_app" / "dashboard.py"))
STREAMLIT_PORT = get_setting("STREAMLIT_PORT", "8501")
DASHBOARD_ENABLED = get_setting("DASHBOARD_ENABLED", True, bool)

# ------------------------------
# Lanzadores
# ------------------------------
def start_telegram_bot(stop_event: threading.Event):
    """
    Arranca el bot en un hilo secundario *creando la Application y el loop en ese hilo*.
    Desactiva signal handlers (solo válidos en el hilo principal).
    """
    start_telegram_bot.instance = None  # será asignado dentro del hilo

    def _run():
        import asyncio
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        try:
            from controllers.channel_controller import build_channel_poster
            from services.telegram_bot import TelegramBot

            poster = build_channel_poster() if get_setting("CHANNEL_ID") else None
            bot = TelegramBot(poster=poster)
            start_telegram_bot.instance = bot  # para poder pararlo desde fuera
            bot.run()
        except Exception as e:
            logger.exception(f"Fallo en TelegramBot: {e}")
        finally:
            loop.close()
            # si el bot cae, se para todo
            stop_event.set()

    t = threading.Thread(target=_run, name="TelegramLoop", daemon=True)
    t.start()

    while not stop_event.is_set():
        time.sleep(0.5)

    bot = getattr(start_telegram_bot, "instance", None)
    if bot is not None and t.is_alive():
        try:
            bot.stop_running()  # hace que run_polling() termine
        except RuntimeError as e:
            logger.error(f"Error al parar TelegramBot: {e}")
    t.join(timeout=10)

def start_streamlit_process() -> subprocess.Popen | None:
    """
    Lanza streamlit como proceso aparte.
    """
    app_path = Path(STREAMLIT_APP)
    if not app_path.exists():
        logger.error(f"Streamlit app no encontrada: {app_path}")
        return None
    cmd = [
        sys.executable, "-m", "streamlit", "run", str(app_path),
        "--server.headless=true",
        f"--server.port={STREAMLIT_PORT}",
    ]
    logger.info(f"Lanzando Streamlit: {' '.join(cmd)}")
    # heredamos entorno (DB_PATH etc.)
    return subprocess.Popen(cmd, cwd=str(PROJECT_ROOT))

# ------------------------------
# Señales / apagado limpio
# ------------------------------
stop_all_evt = threading.Event()
streamlit_proc: subprocess.Popen | None = None

def shutdown(*_):
    logger.info("🛑 Señal de apagado recibida, deteniendo servicios...")
    stop_all_evt.set()
    if streamlit_proc and streamlit_proc.poll() is None:
        try:
            if os.name == "nt":
                streamlit_proc.terminate()
            else:
                streamlit_proc.send_signal(signal.SIGTERM)
            streamlit_proc.wait(timeout=3)
        except subprocess.TimeoutExpired:
            streamlit_proc.kill()
        except OSError as e:
            logger.error(f"No se pudo cerrar Streamlit: {e}")
    logger.info("✅ Apagado completado.")

# ------------------------------
# Main
# ------------------------------
def main() -> int:
    global streamlit_proc

    if not get_setting("TELEGRAM_BOT_TOKEN"):
        logger.critical("Falta TELEGRAM_BOT_TOKEN; no se puede arrancar el bot.")
        return 1

    signal.signal(signal.SIGINT, shutdown)
    signal.signal(signal.SIGTERM, shutdown)

    logger.info("🚀 Iniciando bot" + (" y Streamlit..." if DASHBOARD_ENABLED else "..."))

    # 1) Telegram Bot (+ publicador del canal en su job queue)
    bot_thread = threading.Thread(target=start_telegram_bot, args=(stop_all_evt,), name="Telegram", daemon=True)
    bot_thread.start()

    # 2) Streamlit (proceso)
    if DASHBOARD_ENABLED:
        streamlit_proc = start_streamlit_process()

    # 3) Espera bloqueante hasta señal o caída de un componente
    try:
        while not stop_all_evt.is_set():
            if streamlit_proc and streamlit_proc.poll() is not None:
                logger.warning("El proceso de Streamlit finalizó. Cerrando servicios...")
                stop_all_evt.set()
                break
            time.sleep(0.5)
    finally:
        shutdown()
        bot_thread.join(timeout=15)
    return 0

if __name__ == "__main__":
    sys.exit(main())
