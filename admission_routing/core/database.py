from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import AsyncAdaptedQueuePool

from admission_routing.core.config import settings


def build_engine(url: str = settings.DATABASE_URL) -> AsyncEngine:
    """Create the pooled async engine used by the request path."""
    return create_async_engine(
        url,
        echo=settings.DEBUG,
        poolclass=AsyncAdaptedQueuePool,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_pre_ping=True,
    )


engine = build_engine()

# Sessions never auto-commit; repositories decide where transactions end
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for FastAPI routes to get async session."""
    async with AsyncSessionLocal() as session:
        yield session


async def dispose_engine() -> None:
    """Release pooled connections on application shutdown."""
    await engine.dispose()
