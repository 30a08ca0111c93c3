from aiogram import Dispatcher
from .giveaway import router as giveaway_router
import logging

def register_all_handlers(dp: Dispatcher) -> None:
    """
    Регистрирует все обработчики сообщений в диспетчере.

    Args:
        dp (Dispatcher): Диспетчер, в котором регистрируются обработчики
    """
    logging.info("Регистрация обработчиков бота...")

    dp.include_router(giveaway_router)
    logging.info("Зарегистрирован роутер giveaway")

    logging.info("Все обработчики зарегистрированы успешно")
