"""Database engine and session factory construction."""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from settlement.config.settings import Settings, get_settings


def create_settlement_engine(settings: Settings | None = None, *, use_null_pool: bool = False) -> AsyncEngine:
    """Create the async engine for settlement data sources."""
    settings = settings or get_settings()
    kwargs = {"echo": settings.database_echo}
    if use_null_pool:
        kwargs["poolclass"] = NullPool
    return create_async_engine(settings.database_url, **kwargs)


def create_session_maker(engine: AsyncEngine | None = None) -> async_sessionmaker[AsyncSession]:
    """Create a session maker; sessions keep loaded attributes after commit."""
    if engine is None:
        engine = create_settlement_engine()
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
