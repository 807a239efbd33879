# bingeboard/db/session.py
from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from bingeboard.core.settings import settings


def _normalise_url(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    return value.strip().strip('"').strip("'")


def _to_async_driver(url: str) -> str:
    """
    Ensure the SQLAlchemy URL uses an async driver.
    - postgres://            -> postgresql+asyncpg://
    - postgresql+psycopg://  -> postgresql+asyncpg://
    - postgresql://          -> postgresql+asyncpg://
    - sqlite:///             -> sqlite+aiosqlite:///
    - anything already async -> (as is)
    """
    if url.startswith("postgresql+asyncpg://") or url.startswith("sqlite+aiosqlite://"):
        return url
    if url.startswith("postgres://"):
        return "postgresql+asyncpg://" + url.split("postgres://", 1)[1]
    if url.startswith("postgresql+psycopg://"):
        return "postgresql+asyncpg://" + url.split("postgresql+psycopg://", 1)[1]
    if url.startswith("postgresql://"):
        return "postgresql+asyncpg://" + url.split("postgresql://", 1)[1]
    if url.startswith("sqlite://"):
        return "sqlite+aiosqlite://" + url.split("sqlite://", 1)[1]
    return url


ASYNC_DATABASE_URL = _normalise_url(settings.database_url)

if not ASYNC_DATABASE_URL:
    raise RuntimeError(
        "No DATABASE_URL found. "
        "Set DATABASE_URL like 'postgresql+asyncpg://user:pass@db:5432/bingeboard'."
    )

ASYNC_DATABASE_URL = _to_async_driver(ASYNC_DATABASE_URL)

engine = create_async_engine(
    ASYNC_DATABASE_URL,
    pool_pre_ping=True,
)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    expire_on_commit=False,
    class_=AsyncSession,
)


async def get_async_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency that yields an AsyncSession."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
