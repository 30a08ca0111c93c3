from sqlalchemy import select, update, delete, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
import logging

from src.database.models import GiveawayPost, GiveawayEntry, WinnerHistory


class GiveawayPostRepository:
    """
    Репозиторий постов-розыгрышей.

    Статус поста: open (принимает участников) -> drawing (идет выбор победителя).
    После выбора победителя запись удаляется.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, channel_id: int, channel_post_id: int) -> GiveawayPost:
        existing = await self.get_by_channel_post(channel_post_id)
        if existing:
            return existing

        post = GiveawayPost(channel_id=channel_id, channel_post_id=channel_post_id, status="open")
        self.session.add(post)
        try:
            await self.session.commit()
        except IntegrityError:
            # Пост уже зарегистрирован параллельным обработчиком
            await self.session.rollback()
            return await self.get_by_channel_post(channel_post_id)
        await self.session.refresh(post)
        logging.info(f"Зарегистрирован розыгрыш: канал {channel_id}, пост {channel_post_id}")
        return post

    async def get_by_channel_post(self, channel_post_id: int) -> Optional[GiveawayPost]:
        result = await self.session.execute(
            select(GiveawayPost).where(GiveawayPost.channel_post_id == channel_post_id)
        )
        return result.scalar_one_or_none()

    async def bind_group(self, channel_post_id: int, group_chat_id: int) -> bool:
        """Привязывает пост к группе обсуждения, куда он был автоматически переслан."""
        result = await self.session.execute(
            update(GiveawayPost)
            .where(GiveawayPost.channel_post_id == channel_post_id)
            .values(group_chat_id=group_chat_id)
        )
        await self.session.commit()
        return result.rowcount > 0

    async def claim(self, channel_post_id: int) -> bool:
        """
        Атомарно переводит пост из open в drawing.

        Returns:
            bool: True, если пост захвачен этим вызовом
        """
        result = await self.session.execute(
            update(GiveawayPost)
            .where(GiveawayPost.channel_post_id == channel_post_id, GiveawayPost.status == "open")
            .values(status="drawing")
        )
        await self.session.commit()
        return result.rowcount == 1

    async def release(self, channel_post_id: int) -> None:
        await self.session.execute(
            update(GiveawayPost)
            .where(GiveawayPost.channel_post_id == channel_post_id, GiveawayPost.status == "drawing")
            .values(status="open")
        )
        await self.session.commit()

    async def reopen_stale_claims(self) -> int:
        result = await self.session.execute(
            update(GiveawayPost).where(GiveawayPost.status == "drawing").values(status="open")
        )
        await self.session.commit()
        return result.rowcount

    async def finish_with_winner(self, post: GiveawayPost, group_chat_id: int, winner: GiveawayEntry) -> WinnerHistory:
        """
        Сохраняет победителя и удаляет участников и сам пост одной транзакцией.

        При ошибке транзакция откатывается и исключение пробрасывается дальше.
        """
        history = WinnerHistory(
            group_chat_id=group_chat_id,
            channel_id=post.channel_id,
            channel_post_id=post.channel_post_id,
            winner_user_id=winner.user_id,
            winner_username=winner.username or "",
            winner_name=winner.name or "",
            winner_comment=winner.comment or "",
        )
        try:
            self.session.add(history)
            await self.session.execute(
                delete(GiveawayEntry).where(
                    GiveawayEntry.group_chat_id == group_chat_id,
                    GiveawayEntry.channel_post_id == post.channel_post_id,
                )
            )
            await self.session.execute(
                delete(GiveawayPost).where(GiveawayPost.channel_post_id == post.channel_post_id)
            )
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logging.info(
            f"Розыгрыш {post.channel_post_id} завершен. Победитель: {winner.user_id} (группа {group_chat_id})"
        )
        return history


class GiveawayEntryRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def add(self, group_chat_id: int, channel_post_id: int, user_id: int,
                  username: str | None, name: str | None, comment: str) -> GiveawayEntry:
        entry = GiveawayEntry(
            group_chat_id=group_chat_id,
            channel_post_id=channel_post_id,
            user_id=user_id,
            username=username,
            name=name,
            comment=comment,
        )
        self.session.add(entry)
        await self.session.commit()
        return entry

    async def list_for_post(self, group_chat_id: int, channel_post_id: int) -> List[GiveawayEntry]:
        result = await self.session.execute(
            select(GiveawayEntry)
            .where(GiveawayEntry.group_chat_id == group_chat_id, GiveawayEntry.channel_post_id == channel_post_id)
            .order_by(GiveawayEntry.id)
        )
        return list(result.scalars().all())

    async def count_for_post(self, group_chat_id: int, channel_post_id: int) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(GiveawayEntry).where(
                GiveawayEntry.group_chat_id == group_chat_id,
                GiveawayEntry.channel_post_id == channel_post_id,
            )
        )
        return result.scalar() or 0


class WinnerHistoryRepository:
    """Только чтение: записи истории создаются при завершении розыгрыша."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_for_group(self, group_chat_id: int, limit: int = 20) -> List[WinnerHistory]:
        result = await self.session.execute(
            select(WinnerHistory)
            .where(WinnerHistory.group_chat_id == group_chat_id)
            .order_by(WinnerHistory.picked_at.desc(), WinnerHistory.id.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def list_for_post(self, channel_post_id: int) -> List[WinnerHistory]:
        result = await self.session.execute(
            select(WinnerHistory).where(WinnerHistory.channel_post_id == channel_post_id)
        )
        return list(result.scalars().all())
