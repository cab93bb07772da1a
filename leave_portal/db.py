"""
Database configuration and session management.
SQLAlchemy async ORM over MySQL (aiomysql) in production; DATABASE_URL may point elsewhere (e.g. SQLite for tests).
"""
import os
import logging
from dotenv import load_dotenv

from sqlalchemy import event  # type: ignore
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker  # type: ignore
from sqlalchemy.orm import declarative_base  # type: ignore

load_dotenv()

# Database Configuration
MYSQL_HOST = os.getenv("MYSQL_HOST", "localhost")
MYSQL_PORT = int(os.getenv("MYSQL_PORT", 3306))
MYSQL_USER = os.getenv("MYSQL_USER", "root")
MYSQL_PASSWORD = os.getenv("MYSQL_PASSWORD", "adminadmin")
MYSQL_DATABASE = os.getenv("MYSQL_DATABASE", "leave_portal_db")
MYSQL_CHARSET = os.getenv("MYSQL_CHARSET", "utf8mb4")

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"mysql+aiomysql://{MYSQL_USER}:{MYSQL_PASSWORD}@{MYSQL_HOST}:{MYSQL_PORT}/{MYSQL_DATABASE}?charset={MYSQL_CHARSET}",
)

# SQLite does not take pool sizing arguments
_engine_kwargs = {}
if not DATABASE_URL.startswith("sqlite"):
    _engine_kwargs = {"pool_pre_ping": True, "pool_size": 10, "max_overflow": 20}

engine = create_async_engine(
    DATABASE_URL,
    echo=False,  # Set to True for SQL query logging
    **_engine_kwargs,
)

if DATABASE_URL.startswith("sqlite"):
    # SQLite leaves foreign keys off per connection; ON DELETE rules need them
    @event.listens_for(engine.sync_engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)

# Base class for SQLAlchemy models
Base = declarative_base()


async def get_db() -> AsyncSession:
    """
    Get SQLAlchemy database session (FastAPI dependency).
    Commits when the handler returns, rolls back if it raises.

    Example:
        @router.get("/employees")
        async def list_employees(db: AsyncSession = Depends(get_db)):
            ...
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_db():
    """Create all tables from the SQLAlchemy models. Called on application startup."""
    import leave_portal.models  # noqa: F401 - register all tables with Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database initialized: %s", engine.url.database)


async def close_db():
    """Close database connections"""
    await engine.dispose()
    logger.info("Database connections closed")
