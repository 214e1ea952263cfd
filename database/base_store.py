"""
base store class for the quote vault.
Defines the persistence contract the API layer depends on.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from .models import Quote, QuoteTitle
from .query_builder import QuoteQuery


class QuotePageResult:
    """列表查询结果"""

    def __init__(self, items: List[Quote], next_cursor: Optional[str] = None):
        self.items = items
        self.next_cursor = next_cursor

    @property
    def has_more(self) -> bool:
        return self.next_cursor is not None


class BaseQuoteStore(ABC):
    """语录存储基类"""

    @abstractmethod
    async def initialize(self, create_tables: bool = True):
        """初始化存储"""

    @abstractmethod
    async def close(self):
        """释放存储连接"""

    @abstractmethod
    async def create_quote(self, title: str, content: str, author: Optional[str] = None,
                           language: Optional[str] = None, hashtags: List[str] = None) -> Quote:
        """创建语录，返回带 id/createdAt 的完整对象"""

    @abstractmethod
    async def get_quote(self, quote_id: str) -> Optional[Quote]:
        """按ID获取语录，不存在返回 None"""

    @abstractmethod
    async def update_quote(self, quote_id: str, **changes) -> Optional[Quote]:
        """部分更新语录；hashtags 若提供则整体替换。不存在返回 None"""

    @abstractmethod
    async def delete_quote(self, quote_id: str) -> bool:
        """删除语录（保留标签），返回是否删除"""

    @abstractmethod
    async def list_quotes(self, query: QuoteQuery) -> QuotePageResult:
        """搜索/过滤/分页"""

    @abstractmethod
    async def suggest_titles(self, q: str, limit: int = 10) -> List[QuoteTitle]:
        """标题自动补全"""

    @abstractmethod
    async def suggest_tags(self, prefix: str = "", language: Optional[str] = None,
                           limit: int = 20) -> List[str]:
        """标签建议"""

    @abstractmethod
    async def shuffle_quotes(self, limit: int = 50) -> List[Quote]:
        """随机排列最近的 2*limit 条语录并截取 limit 条"""

    @abstractmethod
    async def get_or_create_tags(self, session, names: List[str]) -> list:
        """原子地查找或创建标签"""
