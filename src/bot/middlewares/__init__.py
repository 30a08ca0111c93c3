from aiogram import Dispatcher
from .db_session import DbSessionMiddleware
import logging

def setup_middlewares(dp: Dispatcher):
    """
    Настройка middleware для диспетчера сообщений

    Args:
        dp (Dispatcher): Диспетчер сообщений
    """
    logging.info("Настройка middleware для диспетчера сообщений")

    dp.message.middleware.register(DbSessionMiddleware())
    dp.channel_post.middleware.register(DbSessionMiddleware())
    logging.info("Зарегистрирован DbSessionMiddleware")
