"""
database models for the quote vault.
Quotes and tags are linked many-to-many; tag order per quote is kept in quote_tags.position.
"""

import uuid
from typing import Optional, List
from pydantic import BaseModel, Field
from sqlalchemy import Column, Integer, String, DateTime, Text, Table, ForeignKey, Index
from sqlalchemy.orm import declarative_base, relationship

from utils.date_utils import utc_now, to_iso_string

Base = declarative_base()


def generate_quote_id() -> str:
    """生成语录ID"""
    return uuid.uuid4().hex


quote_tags = Table(
    'quote_tags',
    Base.metadata,
    Column('quote_id', String(32), ForeignKey('quotes.id', ondelete='CASCADE'), primary_key=True),
    Column('tag_id', Integer, ForeignKey('tags.id', ondelete='CASCADE'), primary_key=True),
    Column('position', Integer, nullable=False, default=0),
    Index('idx_quote_tags_tag', 'tag_id'),
)


class QuoteDB(Base):
    """database model for quotes"""
    __tablename__ = 'quotes'

    id = Column(String(32), primary_key=True, default=generate_quote_id)
    created_at = Column(DateTime, nullable=False, default=utc_now, index=True)

    title = Column(String(500), nullable=False)
    content = Column(Text, nullable=False)
    author = Column(String(200), nullable=True)
    language = Column(String(2), nullable=True, index=True)  # en / es

    # Relationships
    tags = relationship(
        "TagDB",
        secondary=quote_tags,
        order_by=quote_tags.c.position,
        lazy="selectin",
        viewonly=True
    )

    __table_args__ = (
        Index('idx_quotes_created_id', 'created_at', 'id'),
    )

    def to_model(self) -> "Quote":
        """转换为API模型"""
        return Quote(
            id=self.id,
            created_at=to_iso_string(self.created_at),
            title=self.title,
            content=self.content,
            author=self.author,
            language=self.language,
            hashtags=[tag.name for tag in self.tags]
        )


class TagDB(Base):
    """database model for tags"""
    __tablename__ = 'tags'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False, unique=True, index=True)

    # Relationships
    quotes = relationship("QuoteDB", secondary=quote_tags, viewonly=True)


# Pydantic models for API
class Quote(BaseModel):
    """quote API model"""
    id: str = Field(..., description="语录ID")
    created_at: str = Field(..., alias="createdAt", description="创建时间 (ISO-8601)")
    title: str = Field(..., description="标题")
    content: str = Field(..., description="正文")
    author: Optional[str] = Field(None, description="作者")
    language: Optional[str] = Field(None, description="语言 en/es")
    hashtags: List[str] = Field(default_factory=list, description="标签")

    class Config:
        populate_by_name = True


class QuoteTitle(BaseModel):
    """title suggestion model"""
    id: str
    title: str
