import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from config import settings

logger = logging.getLogger(__name__)


def _engine_options() -> dict:
    """SQLite shares one connection (required for :memory:); PostgreSQL pools and pings."""
    options = {"echo": settings.debug}
    if settings.is_sqlite:
        options["poolclass"] = StaticPool
        options["connect_args"] = {"check_same_thread": False}
    elif settings.is_postgresql:
        options["pool_pre_ping"] = True
    return options


engine = create_async_engine(settings.database_url, **_engine_options())

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


class Base(DeclarativeBase):
    pass


async def get_db():
    """Request-scoped session: committed when the handler returns, rolled back if it raises."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db():
    import models  # noqa: F401  (registers loan_applications on Base.metadata)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"Database ready ({engine.url.get_backend_name()})")


async def dispose_db():
    await engine.dispose()
