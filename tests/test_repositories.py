import pytest

from src.database.models import GiveawayEntry, WinnerHistory
from src.database.repositories import GiveawayEntryRepository, GiveawayPostRepository, WinnerHistoryRepository
from src.config.settings import parse_admin_ids
from tests.conftest import CHANNEL_ID, GROUP_ID


async def test_claim_is_exclusive(session):
    repo = GiveawayPostRepository(session)
    await repo.create(CHANNEL_ID, 10)

    assert await repo.claim(10)
    assert not await repo.claim(10)
    assert not await repo.claim(11)

    await repo.release(10)
    assert await repo.claim(10)


async def test_reopen_stale_claims(session):
    repo = GiveawayPostRepository(session)
    await repo.create(CHANNEL_ID, 20)
    await repo.create(CHANNEL_ID, 21)
    await repo.claim(20)

    assert await repo.reopen_stale_claims() == 1
    post = await repo.get_by_channel_post(20)
    await session.refresh(post)
    assert post.status == "open"


async def test_finish_with_winner_closes_only_that_post(session):
    posts = GiveawayPostRepository(session)
    entries = GiveawayEntryRepository(session)
    post = await posts.create(CHANNEL_ID, 30)
    await posts.create(CHANNEL_ID, 31)
    winner = await entries.add(GROUP_ID, 30, 1, "alice", "Alice", "pick me")
    await entries.add(GROUP_ID, 30, 2, None, "Bob", "me too")
    await entries.add(GROUP_ID, 31, 3, None, "Carol", "other giveaway")

    history = await posts.finish_with_winner(post, GROUP_ID, winner)

    assert history.winner_user_id == 1
    assert history.winner_username == "alice"
    assert history.winner_comment == "pick me"
    assert await posts.get_by_channel_post(30) is None
    assert await posts.get_by_channel_post(31) is not None
    assert await entries.count_for_post(GROUP_ID, 30) == 0
    assert await entries.count_for_post(GROUP_ID, 31) == 1
    assert len(await WinnerHistoryRepository(session).list_for_post(30)) == 1


async def test_finish_with_winner_keeps_missing_fields_as_empty_strings(session):
    posts = GiveawayPostRepository(session)
    post = await posts.create(CHANNEL_ID, 32)
    winner = GiveawayEntry(group_chat_id=GROUP_ID, channel_post_id=32, user_id=9, username=None, name=None, comment="")

    history = await posts.finish_with_winner(post, GROUP_ID, winner)

    assert isinstance(history, WinnerHistory)
    assert history.winner_username == ""
    assert history.winner_name == ""


@pytest.mark.parametrize("raw, expected", [
    ("", set()),
    ("1, 2,3", {1, 2, 3}),
    ("5,,abc, 6 ", {5, 6}),
])
def test_parse_admin_ids(raw, expected):
    assert parse_admin_ids(raw) == expected
