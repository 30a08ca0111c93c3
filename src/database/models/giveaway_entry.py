from sqlalchemy import Column, Integer, BigInteger, String, Text, DateTime
from sqlalchemy.sql import func

from src.database.db import Base


class GiveawayEntry(Base):
    __tablename__ = "giveaway_entries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    group_chat_id = Column(BigInteger, nullable=False)
    channel_post_id = Column(BigInteger, nullable=False)
    user_id = Column(BigInteger, nullable=False)
    username = Column(String, nullable=True)
    name = Column(String, nullable=True)  # Отображаемое имя участника
    comment = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<GiveawayEntry(channel_post_id={self.channel_post_id}, user_id={self.user_id})>"
