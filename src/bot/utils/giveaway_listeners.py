import logging
from typing import Optional

from aiogram.types import Message
from sqlalchemy.ext.asyncio import AsyncSession

from src.bot.utils.winner_picker import resolve_channel_post_id
from src.config import settings
from src.database.models import GiveawayEntry, GiveawayPost
from src.database.repositories import GiveawayEntryRepository, GiveawayPostRepository


def message_text(message: Message) -> str:
    return message.text or message.caption or ""


def is_giveaway_post(message: Message, hashtag: Optional[str] = None) -> bool:
    """Проверяет, помечен ли пост канала хэштегом розыгрыша (без учета регистра)."""
    hashtag = (hashtag or settings.GIVEAWAY_HASHTAG).lower()
    return hashtag in message_text(message).lower()


async def register_giveaway_post(session: AsyncSession, message: Message) -> Optional[GiveawayPost]:
    """
    Регистрирует пост канала как розыгрыш, если в нем есть хэштег розыгрыша.

    Args:
        session (AsyncSession): Сессия базы данных
        message (Message): Пост канала

    Returns:
        Optional[GiveawayPost]: Зарегистрированный пост или None
    """
    if not is_giveaway_post(message):
        return None
    return await GiveawayPostRepository(session).create(message.chat.id, message.message_id)


async def bind_discussion_group(session: AsyncSession, message: Message) -> bool:
    """Запоминает группу обсуждения, в которую канал автоматически переслал пост розыгрыша."""
    if not message.is_automatic_forward:
        return False

    channel_post_id = resolve_channel_post_id(message)
    bound = await GiveawayPostRepository(session).bind_group(channel_post_id, message.chat.id)
    if bound:
        logging.info(f"Пост розыгрыша {channel_post_id} привязан к группе {message.chat.id}")
    return bound


async def record_entry(session: AsyncSession, message: Message) -> Optional[GiveawayEntry]:
    """
    Сохраняет комментарий под постом розыгрыша как участие.

    Учитываются только ответы на автоматически пересланный пост от обычных
    пользователей, пока розыгрыш открыт. Команды участием не считаются.
    """
    reply = message.reply_to_message
    if not reply or not reply.is_automatic_forward:
        return None

    user = message.from_user
    if not user or user.is_bot or message.sender_chat:
        return None

    comment = message_text(message)
    if comment.startswith('/'):
        return None

    channel_post_id = resolve_channel_post_id(reply)
    post = await GiveawayPostRepository(session).get_by_channel_post(channel_post_id)
    if not post or not post.is_open():
        return None

    entry = await GiveawayEntryRepository(session).add(
        group_chat_id=message.chat.id,
        channel_post_id=channel_post_id,
        user_id=user.id,
        username=user.username,
        name=user.full_name,
        comment=comment,
    )
    logging.info(f"Новый участник розыгрыша {channel_post_id}: {user.id}")
    return entry
