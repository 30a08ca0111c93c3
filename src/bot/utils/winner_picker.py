"""
Выбор победителя розыгрыша по команде /pickwinner.

Команда отправляется администратором в группе обсуждения ответом на
автоматически пересланный пост канала. Перед выбором показывается отсчет,
затем победитель объявляется в том же сообщении, сохраняется в историю,
а участники и сам пост удаляются.
"""

import asyncio
import logging
import random
from collections import defaultdict
from typing import Awaitable, Callable, List, Optional

from aiogram import Bot
from aiogram.enums import ParseMode
from aiogram.exceptions import TelegramAPIError, TelegramBadRequest
from aiogram.types import Message, MessageOriginChannel
from aiogram.utils.markdown import hbold, hitalic, hlink
from aiogram.utils.text_decorations import html_decoration
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.config import settings
from src.database.models import GiveawayEntry, GiveawayPost, WinnerHistory
from src.database.repositories import GiveawayEntryRepository, GiveawayPostRepository

SPINNER_FRAMES = ["⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏"]

WRONG_CHAT_TEXT = "❗ /pickwinner ကို Discussion Group ထဲမှာပဲ သုံးနိုင်ပါတယ်။"
NOT_A_REPLY_TEXT = "⚠️ Channel post (auto-forwarded) ကို Reply လုပ်ပြီး /pickwinner ပို့ပါ။"
NOT_A_GIVEAWAY_TEXT = "⚠️ ဒီ post က giveaway မဟုတ်ပါ (DB ထဲမှာ မရှိပါ)။"
NO_ENTRIES_TEXT = "⚠️ Comment မရှိသေးပါ။"
DRAW_IN_PROGRESS_TEXT = "⏳ ဒီ giveaway အတွက် Winner ရွေးချယ်နေဆဲ ဖြစ်ပါတယ်။"


def resolve_channel_post_id(message: Message) -> int:
    """
    Возвращает ID исходного поста канала для автоматически пересланного сообщения.
    Если источник пересылки неизвестен, используется ID самого сообщения.
    """
    origin = message.forward_origin
    if isinstance(origin, MessageOriginChannel):
        return origin.message_id
    return message.message_id


def format_status_text(frame: str, countdown: int) -> str:
    return f"🌀 {hbold(f'{frame} Winner ရွေးချယ်နေပါပြီ...')}\n\n⏳ {hbold(countdown)} စက္ကန့်"


def format_winner_mention(user_id: int, username: Optional[str], name: Optional[str]) -> str:
    if username:
        return f"@{html_decoration.quote(username)}"
    return hlink(name or "Winner", f"tg://user?id={user_id}")


def format_winner_text(entry: GiveawayEntry) -> str:
    mention = format_winner_mention(entry.user_id, entry.username, entry.name)
    return (
        f"✅ {hbold('Winner ထွက်ပေါ်လာပါပြီ!')}\n"
        f"━━━━━━━━━━━━━━\n"
        f"🏆 {hbold('Winner:')} {mention}\n"
        f"💬 {hbold('Comment:')} {hitalic(entry.comment or '')}"
    )


class WinnerPicker:
    """
    Проводит розыгрыш для одного поста.

    Одновременно для одного поста выполняется только один розыгрыш:
    внутри процесса это обеспечивает блокировка по ID поста, между
    процессами - атомарный перевод поста в статус drawing.
    Права администратора проверяются фильтром на уровне роутера.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        countdown: int = 10,
        tick_interval: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        rng: Optional[random.Random] = None,
    ):
        self.session_factory = session_factory
        self.countdown = countdown
        self.tick_interval = tick_interval
        self.sleep = sleep
        self.rng = rng or random.Random()
        self.locks = defaultdict(asyncio.Lock)

    async def pick(self, bot: Bot, message: Message) -> Optional[WinnerHistory]:
        """
        Обрабатывает команду /pickwinner.

        Args:
            bot (Bot): Экземпляр бота
            message (Message): Сообщение с командой

        Returns:
            Optional[WinnerHistory]: Запись истории или None, если розыгрыш не состоялся
        """
        chat_id = message.chat.id

        if message.chat.type not in settings.GROUP_CHAT_TYPES:
            await bot.send_message(chat_id, WRONG_CHAT_TEXT)
            return None

        reply = message.reply_to_message
        if not reply or not reply.is_automatic_forward:
            await bot.send_message(chat_id, NOT_A_REPLY_TEXT)
            return None

        channel_post_id = resolve_channel_post_id(reply)

        lock = self.locks[channel_post_id]
        if lock.locked():
            logging.info(f"Розыгрыш для поста {channel_post_id} уже выполняется, повторный вызов отклонен")
            await bot.send_message(chat_id, DRAW_IN_PROGRESS_TEXT)
            return None

        try:
            async with lock:
                return await self._pick_locked(bot, chat_id, channel_post_id)
        finally:
            if not lock.locked():
                self.locks.pop(channel_post_id, None)

    async def _pick_locked(self, bot: Bot, chat_id: int, channel_post_id: int) -> Optional[WinnerHistory]:
        async with self.session_factory() as session:
            post_repo = GiveawayPostRepository(session)

            if not await post_repo.claim(channel_post_id):
                post = await post_repo.get_by_channel_post(channel_post_id)
                await bot.send_message(chat_id, DRAW_IN_PROGRESS_TEXT if post else NOT_A_GIVEAWAY_TEXT)
                return None

            try:
                post = await post_repo.get_by_channel_post(channel_post_id)
                entries = await GiveawayEntryRepository(session).list_for_post(chat_id, channel_post_id)
                if not entries:
                    await post_repo.release(channel_post_id)
                    await bot.send_message(chat_id, NO_ENTRIES_TEXT)
                    return None

                logging.info(f"Старт розыгрыша для поста {channel_post_id} в группе {chat_id}, участников: {len(entries)}")
                return await self._draw(bot, chat_id, post, entries, post_repo)
            except Exception as e:
                logging.error(f"Ошибка при выборе победителя для поста {channel_post_id}: {e}")
                await self._release_claim(channel_post_id)
                raise

    async def _draw(self, bot: Bot, chat_id: int, post: GiveawayPost,
                    entries: List[GiveawayEntry], post_repo: GiveawayPostRepository) -> WinnerHistory:
        status = await bot.send_message(
            chat_id,
            format_status_text(SPINNER_FRAMES[0], self.countdown),
            parse_mode=ParseMode.HTML,
        )

        await self._run_countdown(bot, chat_id, status.message_id)

        winner = self.rng.choice(entries)
        await self._announce(bot, chat_id, status.message_id, winner)

        return await post_repo.finish_with_winner(post, chat_id, winner)

    async def _run_countdown(self, bot: Bot, chat_id: int, message_id: int) -> None:
        remaining = self.countdown
        for tick in range(1, self.countdown + 1):
            await self.sleep(self.tick_interval)
            remaining -= 1
            frame = SPINNER_FRAMES[tick % len(SPINNER_FRAMES)]
            try:
                await bot.edit_message_text(
                    text=format_status_text(frame, remaining),
                    chat_id=chat_id,
                    message_id=message_id,
                    parse_mode=ParseMode.HTML,
                )
            except TelegramAPIError as e:
                # Сообщение могли удалить или упереться в лимит - отсчет продолжается
                logging.debug(f"Не удалось обновить отсчет в чате {chat_id}: {e}")

    async def _announce(self, bot: Bot, chat_id: int, message_id: int, winner: GiveawayEntry) -> None:
        text = format_winner_text(winner)
        try:
            await bot.edit_message_text(
                text=text,
                chat_id=chat_id,
                message_id=message_id,
                parse_mode=ParseMode.HTML,
            )
        except TelegramBadRequest as e:
            logging.warning(f"Не удалось отредактировать сообщение с отсчетом ({e}), отправляем результат заново")
            await bot.send_message(chat_id, text, parse_mode=ParseMode.HTML)

    async def _release_claim(self, channel_post_id: int) -> None:
        try:
            async with self.session_factory() as session:
                await GiveawayPostRepository(session).release(channel_post_id)
        except Exception as e:
            logging.error(f"Не удалось вернуть пост {channel_post_id} в статус open: {e}")
