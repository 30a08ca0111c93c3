from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
import logging
import traceback
import asyncio

from src.config import settings

async def setup_bot() -> tuple[Bot, Dispatcher]:
    """
    Настройка и инициализация бота и диспетчера.

    Returns:
        tuple[Bot, Dispatcher]: Настроенные экземпляры бота и диспетчера
    """
    try:
        logging.info("Создание экземпляра бота...")
        bot = Bot(
            token=settings.BOT_TOKEN,
            default=DefaultBotProperties(parse_mode=None)  # Разметка указывается явно в каждом сообщении
        )

        dp = Dispatcher()

        # Регистрация обработчиков
        from .handlers import register_all_handlers
        register_all_handlers(dp)

        # Регистрация middleware
        from .middlewares import setup_middlewares
        setup_middlewares(dp)

        logging.info("Бот настроен и готов к запуску")

        return bot, dp
    except Exception as e:
        logging.error(f"Ошибка при настройке бота: {e}")
        logging.error(traceback.format_exc())
        raise

async def start_polling(bot: Bot, dp: Dispatcher, shutdown_event=None) -> None:
    """
    Запуск бота в режиме long polling.

    Args:
        bot (Bot): Экземпляр бота
        dp (Dispatcher): Экземпляр диспетчера
        shutdown_event (asyncio.Event, optional): Событие для сигнализации остановки бота
    """
    try:
        logging.info("Запуск бота в режиме long polling")
        # Пропускаем старые обновления при запуске
        await bot.delete_webhook(drop_pending_updates=True)

        if shutdown_event:
            polling_task = asyncio.create_task(
                dp.start_polling(bot, allowed_updates=dp.resolve_used_update_types()),
                name="bot_polling_task"
            )
            shutdown_task = asyncio.create_task(shutdown_event.wait(), name="shutdown_wait_task")

            done, pending = await asyncio.wait(
                [polling_task, shutdown_task],
                return_when=asyncio.FIRST_COMPLETED
            )

            if polling_task in done:
                shutdown_task.cancel()
                result = polling_task.result()
                logging.info(f"Поллинг завершился: {result}")
            else:
                logging.info("Получен сигнал завершения работы, останавливаем поллинг")
                polling_task.cancel()
                try:
                    await polling_task
                except asyncio.CancelledError:
                    logging.info("Поллинг остановлен")
        else:
            await dp.start_polling(bot, allowed_updates=dp.resolve_used_update_types())
    except Exception as e:
        logging.error(f"Ошибка при запуске поллинга: {e}")
        logging.error(traceback.format_exc())
        raise
    finally:
        await bot.session.close()
