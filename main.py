import asyncio
import logging
import sys
import argparse
import signal
import functools
from src.config import settings
from src.bot.bot import setup_bot, start_polling
from src.database.db import init_db

shutdown_event = asyncio.Event()

# Обработчик сигналов для корректного завершения работы
def handle_shutdown_signal(sig):
    """Обработчик сигналов для корректного завершения работы приложения."""
    logging.info(f"Получен сигнал завершения: {sig}")
    shutdown_event.set()

async def main():
    """Точка входа в приложение."""
    parser = argparse.ArgumentParser(description="Запуск Bika Store Giveaway Bot")
    parser.add_argument("--init-db", action="store_true", help="Только создать таблицы и завершить работу")
    args = parser.parse_args()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, functools.partial(handle_shutdown_signal, sig))
        except NotImplementedError:
            # Для систем, где add_signal_handler не поддерживается (Windows)
            logging.info(f"Обработчик сигнала {sig} не зарегистрирован - не поддерживается платформой")

    logging.info("Запуск Bika Store Giveaway Bot")
    if settings.DEBUG:
        logging.getLogger().setLevel(logging.DEBUG)

    await init_db()
    if args.init_db:
        logging.info("База данных готова, завершение работы")
        return

    bot, dp = await setup_bot()
    await start_polling(bot, dp, shutdown_event=shutdown_event)
    logging.info("Бот завершил работу")

if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        logging.info("Принудительное завершение работы")
    except Exception as e:
        logging.error(f"Необработанное исключение: {e}")
        sys.exit(1)
