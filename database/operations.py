"""
database operations for the quote vault.
SQLAlchemy implementation of the quote store: CRUD, tag association and search.
"""

import random
from contextlib import asynccontextmanager
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select, delete, insert
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError

from utils import (
    db_logger, log_execution, DatabaseError, ErrorCodes,
    SUPPORTED_LANGUAGES, utc_now
)
from .base_store import BaseQuoteStore, QuotePageResult
from .connection import DatabaseManager
from .models import QuoteDB, TagDB, Quote, QuoteTitle, quote_tags, generate_quote_id
from .query_builder import QuoteQuery, QuoteQueryBuilder

UPDATABLE_FIELDS = ('title', 'content', 'author', 'language')


class QuoteOperations(BaseQuoteStore):
    """quote store backed by SQLAlchemy async sessions"""

    def __init__(self, db: DatabaseManager = None):
        self.db = db or DatabaseManager()
        self.db_logger = db_logger

    async def initialize(self, create_tables: bool = True):
        """初始化数据库操作"""
        self.db_logger.info("Initializing QuoteOperations...")
        self.db.initialize()
        if create_tables:
            await self.db.create_tables()
        self.db_logger.info("QuoteOperations initialized successfully")

    async def close(self):
        await self.db.close()

    @asynccontextmanager
    async def _transaction(self, operation: str):
        """事务范围，存储异常统一转换为 DatabaseError"""
        try:
            async with self.db.session_scope() as session:
                yield session
        except SQLAlchemyError as e:
            self.db_logger.error(f"[Database] Failed to {operation}: {e}")
            raise DatabaseError(
                f"Failed to {operation}",
                ErrorCodes.DB_QUERY_FAILED
            ) from e

    async def _load_quote(self, session, quote_id: str) -> Optional[QuoteDB]:
        """重新加载语录及其标签"""
        stmt = (
            select(QuoteDB)
            .where(QuoteDB.id == quote_id)
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    # === Tag Operations ===

    async def get_or_create_tags(self, session, names: List[str]) -> List[TagDB]:
        """单条 upsert 语句创建缺失标签，再按输入顺序返回标签"""
        if not names:
            return []

        insert_fn = pg_insert if self.db.dialect_name == "postgresql" else sqlite_insert
        stmt = (
            insert_fn(TagDB)
            .values([{"name": name} for name in names])
            .on_conflict_do_nothing(index_elements=["name"])
        )
        await session.execute(stmt)

        result = await session.execute(select(TagDB).where(TagDB.name.in_(names)))
        tags_by_name = {tag.name: tag for tag in result.scalars().all()}
        return [tags_by_name[name] for name in names]

    async def _replace_tags(self, session, quote_id: str, names: List[str]):
        """整体替换语录的标签集合，保留顺序"""
        tags = await self.get_or_create_tags(session, names)
        await session.execute(delete(quote_tags).where(quote_tags.c.quote_id == quote_id))
        if tags:
            await session.execute(
                insert(quote_tags),
                [
                    {"quote_id": quote_id, "tag_id": tag.id, "position": position}
                    for position, tag in enumerate(tags)
                ]
            )

    # === Quote Operations ===

    @log_execution("Database", "create_quote")
    async def create_quote(self, title: str, content: str, author: Optional[str] = None,
                           language: Optional[str] = None, hashtags: List[str] = None,
                           created_at: Optional[datetime] = None) -> Quote:
        """创建语录"""
        async with self._transaction("create quote") as session:
            quote = QuoteDB(
                id=generate_quote_id(),
                created_at=created_at or utc_now(),
                title=title,
                content=content,
                author=author,
                language=language
            )
            session.add(quote)
            await session.flush()

            await self._replace_tags(session, quote.id, hashtags or [])
            quote = await self._load_quote(session, quote.id)

            self.db_logger.info(f"[Database] Created quote {quote.id} with {len(quote.tags)} tags")
            return quote.to_model()

    async def get_quote(self, quote_id: str) -> Optional[Quote]:
        """按ID获取语录"""
        async with self._transaction("fetch quote") as session:
            quote = await self._load_quote(session, quote_id)
            return quote.to_model() if quote else None

    @log_execution("Database", "update_quote")
    async def update_quote(self, quote_id: str, **changes) -> Optional[Quote]:
        """部分更新语录"""
        async with self._transaction("update quote") as session:
            quote = await self._load_quote(session, quote_id)
            if quote is None:
                return None

            for field_name in UPDATABLE_FIELDS:
                if field_name in changes:
                    setattr(quote, field_name, changes[field_name])

            if 'hashtags' in changes:
                await self._replace_tags(session, quote_id, changes['hashtags'] or [])

            await session.flush()
            quote = await self._load_quote(session, quote_id)

            self.db_logger.info(f"[Database] Updated quote {quote_id}: {sorted(changes)}")
            return quote.to_model()

    @log_execution("Database", "delete_quote")
    async def delete_quote(self, quote_id: str) -> bool:
        """删除语录，标签行保留"""
        async with self._transaction("delete quote") as session:
            quote = await self._load_quote(session, quote_id)
            if quote is None:
                return False

            await session.execute(delete(quote_tags).where(quote_tags.c.quote_id == quote_id))
            await session.delete(quote)

            self.db_logger.info(f"[Database] Deleted quote {quote_id}")
            return True

    # === Query Operations ===

    async def list_quotes(self, query: QuoteQuery) -> QuotePageResult:
        """搜索/过滤/游标分页"""
        builder = QuoteQueryBuilder(query)

        async with self._transaction("fetch quotes") as session:
            anchor = None
            if query.cursor:
                result = await session.execute(
                    select(QuoteDB.created_at, QuoteDB.id).where(QuoteDB.id == query.cursor)
                )
                anchor = result.first()
                if anchor is None:
                    # 游标行已不存在
                    self.db_logger.debug(f"[Database] Unknown cursor {query.cursor}, returning empty page")
                    return QuotePageResult(items=[])

            result = await session.execute(builder.build(anchor))
            page = builder.paginate(result.scalars().all())

            return QuotePageResult(
                items=[quote.to_model() for quote in page.items],
                next_cursor=page.next_cursor
            )

    async def suggest_titles(self, q: str, limit: int = 10) -> List[QuoteTitle]:
        """标题自动补全"""
        term = (q or "").strip()
        if len(term) < 1:
            return []

        async with self._transaction("fetch suggestions") as session:
            stmt = (
                select(QuoteDB.id, QuoteDB.title)
                .where(QuoteDB.title.icontains(term, autoescape=True))
                .order_by(QuoteDB.created_at.desc(), QuoteDB.id.desc())
                .limit(limit)
            )
            result = await session.execute(stmt)
            return [QuoteTitle(id=row.id, title=row.title) for row in result.all()]

    async def suggest_tags(self, prefix: str = "", language: Optional[str] = None,
                           limit: int = 20) -> List[str]:
        """标签建议：前缀匹配，可按语言过滤，按字母排序"""
        prefix = (prefix or "").strip().lower()
        if prefix.startswith('#'):
            prefix = prefix[1:]

        async with self._transaction("fetch tags") as session:
            stmt = select(TagDB.name)
            if language in SUPPORTED_LANGUAGES:
                stmt = stmt.where(TagDB.quotes.any(QuoteDB.language == language))
            if prefix:
                stmt = stmt.where(TagDB.name.startswith(prefix, autoescape=True))
            stmt = stmt.order_by(TagDB.name.asc()).limit(limit)

            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def shuffle_quotes(self, limit: int = 50) -> List[Quote]:
        """从最近的 2*limit 条中随机排列后截取 limit 条（并非全表均匀抽样）"""
        async with self._transaction("fetch quotes") as session:
            stmt = (
                select(QuoteDB)
                .order_by(QuoteDB.created_at.desc(), QuoteDB.id.desc())
                .limit(limit * 2)
            )
            result = await session.execute(stmt)
            quotes = list(result.scalars().all())

        random.shuffle(quotes)
        return [quote.to_model() for quote in quotes[:limit]]
