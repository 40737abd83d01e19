import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.ext.asyncio import AsyncEngine
from starlette.middleware import Middleware

from mingle import __version__
from mingle.config import Settings, get_settings
from mingle.database import Base, build_engine, build_session_factory
from mingle.errors import register_error_handlers
from mingle.logging_config import configure_logging
from mingle.middleware import RequestLogMiddleware
from mingle.routers import comments, posts, users
from mingle.security import PasswordHasher, TokenCodec

logger = logging.getLogger(__name__)


def build_middleware(settings: Settings) -> list[Middleware]:
    """Middleware in wrapping order: the first entry sees the request first."""
    return [
        Middleware(RequestLogMiddleware),
        Middleware(
            CORSMiddleware,
            allow_origins=settings.CORS_ORIGINS,
            allow_credentials=False,
            allow_methods=["*"],
            allow_headers=["*"],
        ),
    ]


def create_app(settings: Settings | None = None, engine: AsyncEngine | None = None) -> FastAPI:
    """
    Build the application.

    Settings, engine, session factory, token codec and password hasher are
    created here once and hung on ``app.state``; request handlers reach
    them only through the dependencies in ``mingle.dependencies``.
    """
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)
    engine = engine or build_engine(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        if settings.AUTO_CREATE_SCHEMA:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            logger.info("Database schema ensured")
        yield
        # Shutdown
        await engine.dispose()

    app = FastAPI(
        title="Mingle API",
        description="Social networking backend: users, posts, comments, likes and subscriptions",
        version=__version__,
        lifespan=lifespan,
        middleware=build_middleware(settings),
    )

    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.token_codec = TokenCodec.from_settings(settings)
    app.state.password_hasher = PasswordHasher(settings.BCRYPT_ROUNDS)

    register_error_handlers(app)

    # Routers
    app.include_router(users.router)
    app.include_router(posts.router)
    app.include_router(comments.router)

    @app.get("/health")
    async def health():
        return {"status": "healthy", "version": __version__}

    return app
