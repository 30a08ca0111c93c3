from aiogram.filters import BaseFilter
from aiogram.types import Message, CallbackQuery
from typing import Iterable, Optional, Union
import logging

from src.config import settings


class AdminFilter(BaseFilter):
    """
    Фильтр для проверки, является ли пользователь администратором.
    Администраторы задаются списком ADMIN_IDS в настройках.

    Для остальных пользователей событие просто не доходит до обработчика,
    бот ничего не отвечает.
    """

    def __init__(self, admin_ids: Optional[Iterable[int]] = None):
        self.admin_ids = set(admin_ids) if admin_ids is not None else None

    async def __call__(self, event: Union[Message, CallbackQuery]) -> bool:
        user = event.from_user
        if not user:
            return False

        admin_ids = self.admin_ids if self.admin_ids is not None else settings.ADMIN_IDS
        if user.id in admin_ids:
            return True

        logging.debug(f"Пользователь {user.id} НЕ является администратором")
        return False
