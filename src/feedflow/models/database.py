"""数据库初始化和会话管理."""

import logging
from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlmodel import SQLModel

# 注册表模型
from feedflow.models.record import RecordEntry  # noqa: F401

logger = logging.getLogger(__name__)


async def init_db(
    database_url: str, **engine_kwargs: Any
) -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    """初始化数据库，创建所有表，返回引擎和会话工厂."""
    engine = create_async_engine(database_url, echo=False, **engine_kwargs)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    logger.info(f"数据库已初始化: {engine.url.render_as_string(hide_password=True)}")
    return engine, session_factory
