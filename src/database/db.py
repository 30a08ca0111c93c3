from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy import text
import logging

from src.config import settings


# Создаем базовый класс для моделей
Base = declarative_base()


def build_database_url(url: str) -> str:
    """
    Приводит URL базы данных к асинхронному драйверу.

    postgresql:// -> postgresql+asyncpg://, sqlite:// -> sqlite+aiosqlite://
    """
    if url.startswith('postgresql:'):
        return url.replace('postgresql:', 'postgresql+asyncpg:', 1)
    if url.startswith('sqlite:'):
        return url.replace('sqlite:', 'sqlite+aiosqlite:', 1)
    return url


async_database_url = build_database_url(settings.DATABASE_URL)
is_sqlite = async_database_url.startswith('sqlite')

if is_sqlite:
    # Для SQLite пул соединений настраивает сам драйвер
    engine = create_async_engine(async_database_url, echo=settings.DEBUG, future=True)
else:
    engine = create_async_engine(
        async_database_url,
        echo=settings.DEBUG,
        future=True,
        pool_size=10,
        max_overflow=20,
        pool_timeout=30,  # Тайм-аут ожидания соединения из пула
        pool_pre_ping=True,  # Проверка соединения перед использованием
        # Важно для PgBouncer (pool_mode transaction/statement): отключаем prepared statements
        connect_args={
            "statement_cache_size": 0,
        },
    )

# Создаем фабрику сессий
async_session = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,  # Отключаем автоматический flush для более предсказуемого поведения
)


async def init_db():
    """
    Инициализирует базу данных и создает необходимые таблицы.

    Розыгрыши, оставшиеся в статусе "drawing" после аварийной остановки,
    возвращаются в статус "open".
    """
    # Импортируем модели, чтобы они зарегистрировались в метаданных
    import src.database.models  # noqa: F401
    from src.database.repositories import GiveawayPostRepository

    logging.info("Инициализация базы данных...")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        await create_indexes(conn)

    async with async_session() as session:
        reopened = await GiveawayPostRepository(session).reopen_stale_claims()
        if reopened:
            logging.warning(f"Возвращено в статус open незавершенных розыгрышей: {reopened}")

    logging.info("База данных инициализирована успешно")
    return async_session


async def create_indexes(conn):
    """
    Создает индексы в базе данных для оптимизации запросов
    """
    try:
        # Выборка участников и их удаление по паре (группа, пост)
        await conn.execute(text(
            "CREATE INDEX IF NOT EXISTS idx_giveaway_entries_group_post "
            "ON giveaway_entries(group_chat_id, channel_post_id)"
        ))
        # /winnerlist: последние победители группы
        await conn.execute(text(
            "CREATE INDEX IF NOT EXISTS idx_winner_history_group_picked "
            "ON winner_history(group_chat_id, picked_at DESC)"
        ))
        logging.info("Индексы базы данных созданы успешно")
    except Exception as e:
        logging.warning(f"Ошибка при создании индексов: {e}")

