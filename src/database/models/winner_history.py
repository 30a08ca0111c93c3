from sqlalchemy import Column, Integer, BigInteger, String, Text, DateTime
from datetime import datetime, timezone

from src.database.db import Base


class WinnerHistory(Base):
    """
    Запись о проведенном розыгрыше.
    Данные победителя копируются в момент выбора и больше не изменяются.
    """
    __tablename__ = "winner_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    group_chat_id = Column(BigInteger, nullable=False, index=True)
    channel_id = Column(BigInteger, nullable=True)
    channel_post_id = Column(BigInteger, nullable=False)
    winner_user_id = Column(BigInteger, nullable=False)
    winner_username = Column(String, nullable=False, default="")
    winner_name = Column(String, nullable=False, default="")
    winner_comment = Column(Text, nullable=False, default="")
    picked_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)

    def __repr__(self):
        return f"<WinnerHistory(group_chat_id={self.group_chat_id}, channel_post_id={self.channel_post_id}, winner_user_id={self.winner_user_id})>"
