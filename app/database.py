"""
Database connection and session management
Using SQLModel with asyncpg for async PostgreSQL operations (Supabase Postgres)
"""
from sqlmodel import SQLModel
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from typing import Optional
import ssl
import os
import logging
from app.config import DATABASE_URL, DB_SSL_CERT_PATH, DEBUG, MODE

logger = logging.getLogger(__name__)

_async_engine: Optional[AsyncEngine] = None
_session_factory: Optional[sessionmaker] = None


def _build_ssl_context() -> Optional[ssl.SSLContext]:
    """SSL context for asyncpg from the certificate written by app.config"""
    if not DB_SSL_CERT_PATH:
        return None
    try:
        if os.path.exists(DB_SSL_CERT_PATH) and os.path.getsize(DB_SSL_CERT_PATH) > 0:
            logger.info(f"Loading SSL certificate from: {DB_SSL_CERT_PATH}")
            context = ssl.create_default_context(cafile=DB_SSL_CERT_PATH)
            # Supabase hosts are reached through poolers; verify the chain but not the hostname
            context.check_hostname = False
            context.verify_mode = ssl.CERT_REQUIRED
            return context
        logger.warning(f"SSL certificate file missing or empty: {DB_SSL_CERT_PATH}")
    except Exception as e:
        logger.error(f"Failed to create SSL context: {e}", exc_info=True)
    return None


def get_async_engine() -> AsyncEngine:
    """Create the async engine on first use"""
    global _async_engine

    if _async_engine is None:
        if not DATABASE_URL:
            raise RuntimeError("DATABASE_URL is not set; use CMS_BACKEND=memory or configure the database")

        # Convert postgresql:// to postgresql+asyncpg:// for async operations
        async_database_url = DATABASE_URL.replace("postgresql://", "postgresql+asyncpg://")

        # Supabase's pooler (port 6543) runs pgbouncer, which cannot use prepared statements
        connect_args = {
            "command_timeout": 30,
            "statement_cache_size": 0,
            "server_settings": {
                "application_name": "reclaimd_cms"
            }
        }
        ssl_config = _build_ssl_context()
        if ssl_config:
            connect_args["ssl"] = ssl_config
            logger.info("SSL enabled for database connections")
        else:
            logger.warning("SSL not configured - database connections will be unencrypted")

        _async_engine = create_async_engine(
            async_database_url,
            echo=DEBUG,
            future=True,
            pool_pre_ping=True,
            pool_recycle=3600,
            pool_timeout=30,
            pool_size=10,
            max_overflow=20,
            connect_args=connect_args,
        )
        host_part = async_database_url.split("@")[-1].split("/")[0]
        logger.info(f"Database engine created (mode: {MODE}, host: ***{host_part[-20:]})")

    return _async_engine


def get_session_factory() -> sessionmaker:
    """Async session factory bound to the engine"""
    global _session_factory

    if _session_factory is None:
        _session_factory = sessionmaker(
            get_async_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
            autocommit=False,
            autoflush=False,
        )
    return _session_factory


def import_models():
    """Import every table model so SQLModel.metadata knows about it"""
    from app.apps.authentication.models import Profile  # noqa: F401
    from app.apps.cms.models import (  # noqa: F401
        Category, Post, Tag, PostTag, Page, Banner, MenuItem, Collection, Poster, SiteContent,
    )
    from app.apps.site.models import ContactMessage, Subscriber  # noqa: F401
    return SQLModel.metadata


async def init_db():
    """
    Initialize database - create all tables
    Only used when AUTO_CREATE_TABLES is enabled; Alembic owns the schema otherwise
    """
    metadata = import_models()
    async with get_async_engine().begin() as conn:
        await conn.run_sync(metadata.create_all)
    logger.info("Database tables created")


async def close_db():
    """
    Close database connections
    Call this on application shutdown
    """
    global _async_engine, _session_factory

    if _async_engine is not None:
        await _async_engine.dispose()
        _async_engine = None
        _session_factory = None
        logger.info("Database connections closed")


async def check_db_connection() -> bool:
    """
    Run SELECT 1 against the database - used by the health check
    """
    try:
        async with get_session_factory()() as session:
            result = await session.execute(text("SELECT 1"))
            value = result.scalar()
            logger.info(f"Database connection test successful: {value}")
            return True
    except Exception as e:
        logger.error(f"Database connection test failed: {e}", exc_info=True)
        return False
