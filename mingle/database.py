from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from mingle.config import Settings
from mingle.middleware import install_query_counter


class Base(DeclarativeBase):
    pass


def build_engine(settings: Settings) -> AsyncEngine:
    engine = create_async_engine(
        settings.database_dsn,
        echo=settings.DEBUG,
        pool_pre_ping=True,
    )
    # Register the per-request SQL query counter on the engine.
    install_query_counter(engine)
    return engine


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def get_db(request: Request):
    """
    Request-scoped session; one transaction per request.

    Commits only after the handler returned without error.  Any exception
    rolls back, and leaving the ``async with`` block closes the session,
    which discards anything still uncommitted (client disconnects and
    task cancellation included).
    """
    session_factory: async_sessionmaker[AsyncSession] = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
