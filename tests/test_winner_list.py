from datetime import datetime, timedelta, timezone

from src.bot.utils.winner_list import EMPTY_TEXT, format_winner_list
from src.database.models import WinnerHistory
from src.database.repositories import WinnerHistoryRepository
from tests.conftest import CHANNEL_ID, GROUP_ID

BASE_TIME = datetime(2026, 3, 1, 18, 30, tzinfo=timezone.utc)


def make_row(post_id, username="", name="", comment="", minutes=0, group_chat_id=GROUP_ID):
    return WinnerHistory(
        group_chat_id=group_chat_id,
        channel_id=CHANNEL_ID,
        channel_post_id=post_id,
        winner_user_id=7000 + post_id,
        winner_username=username,
        winner_name=name,
        winner_comment=comment,
        picked_at=BASE_TIME + timedelta(minutes=minutes),
    )


async def test_list_for_group_newest_first(session):
    session.add_all([
        make_row(1, username="first", minutes=0),
        make_row(2, username="second", minutes=5),
        make_row(3, username="third", minutes=10),
        make_row(4, username="elsewhere", minutes=20, group_chat_id=-100777),
    ])
    await session.commit()

    rows = await WinnerHistoryRepository(session).list_for_group(GROUP_ID, limit=2)

    assert [r.winner_username for r in rows] == ["third", "second"]


def test_format_empty_list():
    assert format_winner_list([]) == EMPTY_TEXT


def test_format_winner_list():
    rows = [
        make_row(2, name="Ko <Ko>", comment="thanks", minutes=5),
        make_row(1, username="mya", comment="🎉", minutes=0),
    ]

    text = format_winner_list(rows)

    assert text.startswith("📜 <b>Winners History</b> <i>(Latest 20 from this group)</i>")
    first, second = text.split("\n\n━━━━━━━━━━━━━━\n\n")
    assert "<b>Winner #2</b>" in first
    assert "<b>Ko &lt;Ko&gt;</b>" in first
    assert "<i>thanks</i>" in first
    assert "<code>01/03/2026, 18:35:00</code>" in first
    assert "<b>Winner #1</b>" in second
    assert "👤 @mya" in second
