# app/core/db.py
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import DeclarativeBase
from app.core.config import settings

logger = logging.getLogger(__name__)

engine = create_async_engine(settings.async_database_url, echo=settings.DB_ECHO, pool_pre_ping=True)
SessionLocal = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)

class Base(DeclarativeBase):
    pass

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with SessionLocal() as session:
        yield session

@asynccontextmanager
async def transaction(session: AsyncSession) -> AsyncGenerator[AsyncSession, None]:
    """
    Todo lo que corre adentro se confirma junto o se descarta junto.
    Cualquier excepción hace rollback y se vuelve a lanzar tal cual.
    """
    try:
        yield session
        await session.commit()
    except BaseException:
        logger.debug("Rolling back transaction")
        await session.rollback()
        raise
