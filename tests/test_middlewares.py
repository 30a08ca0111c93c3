from src.bot.middlewares.db_session import DbSessionMiddleware
from tests.conftest import make_group_message


async def test_session_is_passed_to_handler(session_factory):
    seen = {}

    async def handler(event, data):
        seen["session"] = data["session"]
        return "handled"

    middleware = DbSessionMiddleware(session_factory)
    result = await middleware(handler, make_group_message("hi"), {})

    assert result == "handled"
    assert seen["session"] is not None
