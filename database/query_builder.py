"""
Query builder for quote search, filtering and cursor pagination.

Filters are combined with AND; the free-text term expands into an OR over
title, content and author. Pagination is keyset based on (created_at, id),
so a cursor stays valid while other rows are inserted or deleted.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Any, Sequence

from sqlalchemy import Select, and_, or_, select

from utils import ValidationError, ErrorCodes, QueryValidator, normalize_language
from .models import QuoteDB, TagDB

SORT_NEWEST = "newest"
SORT_OLDEST = "oldest"
SORT_OPTIONS = (SORT_NEWEST, SORT_OLDEST)

DEFAULT_LIMIT = 20
MAX_LIMIT = 100


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass
class QuoteQuery:
    """语录查询参数（已规范化）"""
    q: Optional[str] = None
    author: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    language: Optional[str] = None
    sort: str = SORT_NEWEST
    cursor: Optional[str] = None
    limit: int = DEFAULT_LIMIT

    @classmethod
    def from_params(cls, q: str = None, author: str = None, tags: str = None,
                    language: str = None, sort: str = None, cursor: str = None,
                    limit: Any = None) -> "QuoteQuery":
        """从原始请求参数构建查询"""
        errors = {}

        sort = sort or SORT_NEWEST
        if sort not in SORT_OPTIONS:
            errors["sort"] = f"must be one of {', '.join(SORT_OPTIONS)}"

        if limit is None or limit == "":
            parsed_limit = DEFAULT_LIMIT
        else:
            try:
                parsed_limit = int(limit)
            except (TypeError, ValueError):
                parsed_limit = None
            if parsed_limit is None or not 1 <= parsed_limit <= MAX_LIMIT:
                errors["limit"] = f"must be an integer between 1 and {MAX_LIMIT}"

        if errors:
            raise ValidationError(
                "Invalid query",
                ErrorCodes.VALIDATION_OUT_OF_RANGE,
                context={"fieldErrors": errors}
            )

        return cls(
            q=_blank_to_none(q),
            author=_blank_to_none(author),
            tags=QueryValidator.parse_tag_filter(tags),
            language=normalize_language(language),
            sort=sort,
            cursor=_blank_to_none(cursor),
            limit=parsed_limit
        )


@dataclass
class QuotePage:
    """分页结果"""
    items: List[QuoteDB]
    next_cursor: Optional[str] = None

    @property
    def has_more(self) -> bool:
        return self.next_cursor is not None


class QuoteQueryBuilder:
    """根据 QuoteQuery 构建 SQLAlchemy 查询语句"""

    def __init__(self, query: QuoteQuery):
        self.query = query

    @property
    def descending(self) -> bool:
        return self.query.sort != SORT_OLDEST

    @staticmethod
    def text_match(term: str) -> Any:
        """标题/正文/作者任一包含关键词（大小写不敏感，通配符按字面匹配）"""
        return or_(
            QuoteDB.title.icontains(term, autoescape=True),
            QuoteDB.content.icontains(term, autoescape=True),
            QuoteDB.author.icontains(term, autoescape=True),
        )

    def conditions(self) -> List[Any]:
        """构建AND条件列表"""
        query = self.query
        clauses = []

        if query.q:
            clauses.append(self.text_match(query.q))

        if query.author:
            clauses.append(QuoteDB.author.icontains(query.author, autoescape=True))

        # 每个标签单独一个 EXISTS 条件，实现AND语义
        for name in query.tags:
            clauses.append(QuoteDB.tags.any(TagDB.name == name))

        if query.language:
            clauses.append(QuoteDB.language == query.language)

        return clauses

    def order_by(self) -> Sequence[Any]:
        """排序：created_at 为主键，id 保证稳定顺序"""
        if self.descending:
            return QuoteDB.created_at.desc(), QuoteDB.id.desc()
        return QuoteDB.created_at.asc(), QuoteDB.id.asc()

    def after_cursor(self, anchor_created_at: datetime, anchor_id: str) -> Any:
        """跳过游标行，按当前排序方向继续"""
        if self.descending:
            return or_(
                QuoteDB.created_at < anchor_created_at,
                and_(QuoteDB.created_at == anchor_created_at, QuoteDB.id < anchor_id),
            )
        return or_(
            QuoteDB.created_at > anchor_created_at,
            and_(QuoteDB.created_at == anchor_created_at, QuoteDB.id > anchor_id),
        )

    def build(self, anchor: Optional[QuoteDB] = None) -> Select:
        """构建查询，多取一行用于判断是否还有下一页"""
        clauses = self.conditions()
        if anchor is not None:
            clauses.append(self.after_cursor(anchor.created_at, anchor.id))

        stmt = select(QuoteDB)
        if clauses:
            stmt = stmt.where(and_(*clauses))
        return stmt.order_by(*self.order_by()).limit(self.query.limit + 1)

    def paginate(self, rows: Sequence[QuoteDB]) -> QuotePage:
        """截断多取的一行并计算 next_cursor"""
        rows = list(rows)
        if len(rows) > self.query.limit:
            items = rows[:self.query.limit]
            return QuotePage(items=items, next_cursor=items[-1].id)
        return QuotePage(items=rows)
