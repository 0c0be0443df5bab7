import logging
from urllib.parse import quote_plus

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from clinicbot.config.settings import Settings, get_settings

logger = logging.getLogger(__name__)


def get_async_database_url(settings: Settings) -> str:
    """Build the asyncpg database URL from settings."""
    host = settings.DB_HOST or "localhost"
    port = settings.DB_PORT or 5432
    user = settings.DB_USER or "postgres"
    database = settings.DB_NAME

    if not database:
        raise ValueError("Database name is required (DB_NAME)")

    encoded_user = quote_plus(user)

    if settings.DB_PASSWORD:
        encoded_password = quote_plus(settings.DB_PASSWORD)
        return f"postgresql+asyncpg://{encoded_user}:{encoded_password}@{host}:{port}/{database}"
    return f"postgresql+asyncpg://{encoded_user}@{host}:{port}/{database}"


def create_async_database_engine(settings: Settings | None = None) -> AsyncEngine:
    """Create the async engine; NullPool in development, a sized pool otherwise."""
    settings = settings or get_settings()
    database_url = get_async_database_url(settings)

    base_config = {
        "echo": settings.DB_ECHO,
        "pool_pre_ping": True,
    }

    if settings.is_development:
        logger.info("Creating async database engine for DEVELOPMENT (NullPool)")
        return create_async_engine(database_url, poolclass=NullPool, **base_config)

    logger.info("Creating async database engine for PRODUCTION (pooled)")
    return create_async_engine(
        database_url,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_recycle=settings.DB_POOL_RECYCLE,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        **base_config,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
