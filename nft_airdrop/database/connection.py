from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import AsyncAdaptedQueuePool
from nft_airdrop.core.config import settings
from nft_airdrop.core.logger import get_logger

logger = get_logger("database")


def build_engine(database_url: str):
    """Create the async engine. Pool tuning only applies to Postgres."""
    if not database_url.startswith("postgresql"):
        logger.info("Using non-pooled engine for %s", database_url.split("://", 1)[0])
        return create_async_engine(database_url, echo=False, future=True)

    ssl_config = {} if settings.ENVIRONMENT == "development" else {"ssl": "require"}
    return create_async_engine(
        database_url,
        echo=False,
        connect_args={
            **ssl_config,
            "server_settings": {
                "application_name": "nft_airdrop",
                "jit": "off",
            },
            "command_timeout": 30,
        },
        poolclass=AsyncAdaptedQueuePool,
        pool_size=10,            # Keep 10 connections ready
        max_overflow=20,         # Allow 20 additional connections under load
        pool_timeout=30,         # Wait up to 30s for a connection
        pool_recycle=1800,       # Recycle connections every 30 minutes
        pool_pre_ping=True,
        future=True
    )


def build_session_factory(bind) -> async_sessionmaker:
    """Session factory shared by the ledger; every ledger call opens its own session."""
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
        autocommit=False
    )


engine = build_engine(settings.DATABASE_URL)

AsyncSessionLocal = build_session_factory(engine)
