from sqlalchemy import Column, Integer, BigInteger, String, DateTime
from sqlalchemy.sql import func

from src.database.db import Base


class GiveawayPost(Base):
    __tablename__ = "giveaway_posts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    channel_id = Column(BigInteger, nullable=False)
    channel_post_id = Column(BigInteger, nullable=False, unique=True)  # ID поста в канале
    group_chat_id = Column(BigInteger, nullable=True)  # Группа обсуждения, заполняется при автопересылке
    status = Column(String, nullable=False, default="open")  # open | drawing
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def is_open(self) -> bool:
        return self.status == "open"

    def __repr__(self):
        return f"<GiveawayPost(channel_id={self.channel_id}, channel_post_id={self.channel_post_id}, status={self.status})>"
