"""
Database connection management.
Provides SQLite database connection with async support.
"""

import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from utils import db_logger, config_manager, BASE_DIR

MEMORY_DB = ":memory:"


def _enable_foreign_keys(dbapi_connection, connection_record):
    """确保外键约束生效"""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys = ON")
    cursor.close()


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


def _register_unicode_lower(dbapi_connection, connection_record):
    """SQLite 内置 lower() 只处理 ASCII，替换为 Unicode 版本（É→é, Ñ→ñ）"""
    dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)


class DatabaseManager:
    """数据库管理器"""

    def __init__(self, db_path: str = None, echo: bool = None):
        db_config = config_manager.get_database_config()
        db_path = db_path or db_config.db_path
        self.echo = db_config.echo if echo is None else echo

        if db_path != MEMORY_DB and not os.path.isabs(db_path):
            db_path = str(BASE_DIR / db_path)
        self.db_path = db_path

        db_logger.info(f"[Database] Using database path: {self.db_path}")
        self.async_engine = None
        self.AsyncSessionLocal = None

    @property
    def url(self) -> str:
        return f"sqlite+aiosqlite:///{self.db_path}"

    @property
    def dialect_name(self) -> str:
        return self.async_engine.dialect.name if self.async_engine else "sqlite"

    def initialize(self):
        """初始化数据库连接"""
        if self.async_engine is not None:
            return

        try:
            if self.db_path != MEMORY_DB:
                # 确保数据目录存在
                os.makedirs(os.path.dirname(self.db_path), exist_ok=True)

            # 内存数据库需要共享同一个连接
            engine_kwargs = {"echo": self.echo, "connect_args": {"check_same_thread": False}}
            if self.db_path == MEMORY_DB:
                engine_kwargs["poolclass"] = StaticPool

            self.async_engine = create_async_engine(self.url, **engine_kwargs)
            event.listen(self.async_engine.sync_engine, "connect", _enable_foreign_keys)
            event.listen(self.async_engine.sync_engine, "connect", _register_unicode_lower)

            self.AsyncSessionLocal = async_sessionmaker(
                bind=self.async_engine,
                class_=AsyncSession,
                autoflush=False,
                expire_on_commit=False
            )

            db_logger.info("[Database] Database connection initialized successfully")

        except Exception as e:
            db_logger.error(f"[Database] Failed to initialize database: {e}")
            raise

    async def create_tables(self):
        """创建数据库表"""
        from .models import Base

        try:
            async with self.async_engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            db_logger.info("[Database] Database tables created successfully")
        except Exception as e:
            db_logger.error(f"[Database] Failed to create tables: {e}")
            raise

    def get_async_session(self) -> AsyncSession:
        """获取异步数据库会话"""
        if not self.AsyncSessionLocal:
            raise RuntimeError("Database not initialized")
        return self.AsyncSessionLocal()

    @asynccontextmanager
    async def session_scope(self) -> AsyncGenerator[AsyncSession, None]:
        """事务范围：成功提交，异常回滚"""
        async with self.get_async_session() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def close(self):
        """关闭数据库连接"""
        if self.async_engine is not None:
            await self.async_engine.dispose()
            self.async_engine = None
            self.AsyncSessionLocal = None
            db_logger.info("[Database] Database connections closed")
