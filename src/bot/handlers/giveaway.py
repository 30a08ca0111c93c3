from aiogram import Bot, F, Router
from aiogram.enums import ParseMode
from aiogram.filters import Command
from aiogram.types import Message
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from src.bot.filters.admin import AdminFilter
from src.bot.utils.giveaway_listeners import bind_discussion_group, record_entry, register_giveaway_post
from src.bot.utils.winner_list import WRONG_CHAT_TEXT, format_winner_list
from src.bot.utils.winner_picker import WinnerPicker
from src.config import settings
from src.database.db import async_session
from src.database.repositories import WinnerHistoryRepository

router = Router(name="giveaway")

winner_picker = WinnerPicker(async_session, countdown=settings.PICK_COUNTDOWN_SECONDS)

in_group = F.chat.type.in_(settings.GROUP_CHAT_TYPES)


@router.channel_post()
async def channel_post_handler(message: Message, session: AsyncSession):
    """Регистрирует пост канала с хэштегом розыгрыша"""
    try:
        await register_giveaway_post(session, message)
    except Exception as e:
        logging.error(f"Ошибка при регистрации поста розыгрыша {message.message_id}: {e}")


@router.message(F.is_automatic_forward, in_group)
async def automatic_forward_handler(message: Message, session: AsyncSession):
    """Привязывает пост розыгрыша к группе обсуждения"""
    try:
        await bind_discussion_group(session, message)
    except Exception as e:
        logging.error(f"Ошибка при привязке поста к группе {message.chat.id}: {e}")


@router.message(Command("pickwinner"), AdminFilter())
async def pickwinner_command(message: Message, bot: Bot):
    """Обработчик команды /pickwinner (только для администраторов)"""
    logging.info(f"Вызвана команда /pickwinner пользователем {message.from_user.id} в чате {message.chat.id}")
    await winner_picker.pick(bot, message)


@router.message(Command("winnerlist"))
async def winnerlist_command(message: Message, bot: Bot, session: AsyncSession):
    """Обработчик команды /winnerlist: последние победители группы"""
    if message.chat.type not in settings.GROUP_CHAT_TYPES:
        await bot.send_message(message.chat.id, WRONG_CHAT_TEXT)
        return

    rows = await WinnerHistoryRepository(session).list_for_group(message.chat.id, limit=settings.WINNER_LIST_LIMIT)
    await bot.send_message(
        message.chat.id,
        format_winner_list(rows, settings.WINNER_LIST_LIMIT),
        parse_mode=ParseMode.HTML,
    )


@router.message(F.reply_to_message.is_automatic_forward, in_group)
async def giveaway_comment_handler(message: Message, session: AsyncSession):
    """Сохраняет комментарий под постом розыгрыша как участие"""
    try:
        await record_entry(session, message)
    except Exception as e:
        logging.error(f"Ошибка при сохранении участника розыгрыша в чате {message.chat.id}: {e}")
