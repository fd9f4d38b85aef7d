from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy import text
import logging


# Создаем базовый класс для моделей
Base = declarative_base()


def normalize_database_url(database_url: str) -> str:
    """
    Подставляет асинхронный драйвер в URL PostgreSQL.

    Args:
        database_url (str): URL из окружения (postgresql://, postgres:// или sqlite+aiosqlite://)

    Returns:
        str: URL для create_async_engine
    """
    if database_url.startswith("postgres://"):
        database_url = "postgresql://" + database_url[len("postgres://"):]
    if database_url.startswith("postgresql:"):
        database_url = database_url.replace("postgresql:", "postgresql+asyncpg:", 1)
    # Заменяем ssl=true на ssl=require для совместимости с asyncpg
    if "?ssl=true" in database_url:
        database_url = database_url.replace("?ssl=true", "?ssl=require")
    return database_url


def create_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """
    Создает асинхронный движок базы данных.

    Args:
        database_url (str): URL базы данных
        echo (bool): Логировать SQL-запросы

    Returns:
        AsyncEngine: Движок SQLAlchemy
    """
    url = normalize_database_url(database_url)

    if url.startswith("postgresql+asyncpg:"):
        return create_async_engine(
            url,
            echo=echo,
            pool_size=10,
            max_overflow=20,
            pool_timeout=30,  # Тайм-аут ожидания соединения из пула
            pool_pre_ping=True,  # Проверка соединения перед использованием
            # Важно для PgBouncer (pool_mode transaction/statement): отключаем prepared statements
            connect_args={
                "statement_cache_size": 0,
            },
        )

    return create_async_engine(url, echo=echo)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Создает фабрику сессий"""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,  # Отключаем автоматический flush для более предсказуемого поведения
    )


async def init_db(engine: AsyncEngine) -> None:
    """
    Создает таблицы и индексы, если их еще нет.

    Args:
        engine (AsyncEngine): Движок базы данных
    """
    # Модели должны быть импортированы, чтобы попасть в metadata
    import comments_picker.database.models  # noqa: F401

    try:
        logging.info("Инициализация базы данных...")
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
            await create_indexes(conn)
        logging.info("База данных инициализирована успешно")
    except Exception as e:
        logging.error(f"Ошибка при инициализации базы данных: {e}")
        raise


async def create_indexes(conn):
    """
    Создает индексы в базе данных для оптимизации запросов
    """
    try:
        # Выборка участников конкретного поста
        await conn.execute(text(
            "CREATE INDEX IF NOT EXISTS idx_entries_post "
            "ON entries(group_id, channel_id, channel_post_id)"
        ))

        # История победителей группы, новые сверху
        await conn.execute(text(
            "CREATE INDEX IF NOT EXISTS idx_winner_history_group_picked_at "
            "ON winner_history(group_id, picked_at DESC)"
        ))

        logging.info("Индексы базы данных созданы успешно")
    except Exception as e:
        logging.warning(f"Ошибка при создании индексов: {e}")
