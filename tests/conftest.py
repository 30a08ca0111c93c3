import os

os.environ.setdefault("BOT_TOKEN", "123456:TEST-TOKEN")
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ.setdefault("ADMIN_IDS", "1001")

from datetime import datetime
from types import SimpleNamespace

import pytest
import pytest_asyncio
from aiogram.types import Chat, Message, MessageOriginChannel, User
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import src.database.models  # noqa: F401
from src.database.db import Base

ADMIN_ID = 1001
GROUP_ID = -1001234567890
CHANNEL_ID = -1009876543210


class FakeBot:
    """Записывает вызовы Bot API вместо отправки в Telegram."""

    def __init__(self):
        self.calls = []
        self.last_message_id = 500
        self.edit_error = None
        self.send_error = None

    async def send_message(self, chat_id, text, parse_mode=None, **kwargs):
        if self.send_error:
            raise self.send_error
        self.last_message_id += 1
        self.calls.append(("send", chat_id, text, self.last_message_id))
        return SimpleNamespace(message_id=self.last_message_id, chat=SimpleNamespace(id=chat_id), text=text)

    async def edit_message_text(self, text, chat_id=None, message_id=None, parse_mode=None, **kwargs):
        if self.edit_error:
            raise self.edit_error
        self.calls.append(("edit", chat_id, text, message_id))
        return True

    def sent(self):
        return [c for c in self.calls if c[0] == "send"]

    def edits(self):
        return [c for c in self.calls if c[0] == "edit"]


def make_user(user_id=ADMIN_ID, first_name="Admin", username=None, last_name=None, is_bot=False):
    return User(id=user_id, is_bot=is_bot, first_name=first_name, last_name=last_name, username=username)


def make_auto_forward(channel_post_id, group_id=GROUP_ID, message_id=None, text="#BIKA_GIVEAWAY 1000 diamonds"):
    return Message(
        message_id=message_id or channel_post_id + 9000,
        date=datetime.now(),
        chat=Chat(id=group_id, type="supergroup"),
        sender_chat=Chat(id=CHANNEL_ID, type="channel"),
        is_automatic_forward=True,
        forward_origin=MessageOriginChannel(
            date=datetime.now(),
            chat=Chat(id=CHANNEL_ID, type="channel"),
            message_id=channel_post_id,
        ),
        text=text,
    )


def make_group_message(text, reply_to=None, user=None, chat_id=GROUP_ID, chat_type="supergroup", message_id=77):
    return Message(
        message_id=message_id,
        date=datetime.now(),
        chat=Chat(id=chat_id, type=chat_type),
        from_user=user or make_user(),
        text=text,
        reply_to_message=reply_to,
    )


def make_channel_post(message_id, text=None, caption=None):
    return Message(
        message_id=message_id,
        date=datetime.now(),
        chat=Chat(id=CHANNEL_ID, type="channel", title="Bika Store"),
        text=text,
        caption=caption,
    )


@pytest_asyncio.fixture
async def session_factory():
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def bot():
    return FakeBot()
