"""
API data models for the quote vault.
Pydantic models for request/response validation.
"""

from typing import Optional, List, Dict, Any, Union
from pydantic import BaseModel, Field

from database.models import Quote, QuoteTitle
from utils import (
    TextSanitizer, parse_hashtags, normalize_language,
    ValidationError, ErrorCodes
)
from utils.validation import TITLE_MAX_LENGTH, CONTENT_MAX_LENGTH, AUTHOR_MAX_LENGTH


def _clean_author(author: Optional[str]) -> Optional[str]:
    """作者为空或清理后为空时视为未署名"""
    if not author:
        return None
    return TextSanitizer.sanitize_author(author) or None


class QuoteCreateRequest(BaseModel):
    """创建语录请求模型"""
    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH, description="标题")
    content: str = Field(..., min_length=1, max_length=CONTENT_MAX_LENGTH, description="正文")
    author: Optional[str] = Field(None, max_length=AUTHOR_MAX_LENGTH, description="作者")
    language: Optional[str] = Field(None, description="语言 en/es，其他值视为未设置")
    hashtags: Union[str, List[str]] = Field(default_factory=list, description="标签，字符串或列表")

    def to_fields(self) -> Dict[str, Any]:
        """清理后的存储字段，标题或正文清理后为空则拒绝"""
        title = TextSanitizer.sanitize_title(self.title)
        content = TextSanitizer.sanitize_content(self.content)
        if not title or not content:
            raise ValidationError(
                "Title and content are required",
                ErrorCodes.VALIDATION_MISSING_REQUIRED_FIELD
            )

        return {
            "title": title,
            "content": content,
            "author": _clean_author(self.author),
            "language": normalize_language(self.language),
            "hashtags": parse_hashtags(self.hashtags),
        }


class QuoteUpdateRequest(BaseModel):
    """部分更新请求模型，只应用请求体中出现的字段"""
    title: Optional[str] = Field(None, min_length=1, max_length=TITLE_MAX_LENGTH)
    content: Optional[str] = Field(None, min_length=1, max_length=CONTENT_MAX_LENGTH)
    author: Optional[str] = Field(None, max_length=AUTHOR_MAX_LENGTH)
    language: Optional[str] = None
    hashtags: Optional[Union[str, List[str]]] = None

    def to_changes(self) -> Dict[str, Any]:
        provided = self.model_fields_set
        changes: Dict[str, Any] = {}

        if "title" in provided:
            changes["title"] = TextSanitizer.sanitize_title(self.title)
            if not changes["title"]:
                raise ValidationError("Title cannot be empty", ErrorCodes.VALIDATION_MISSING_REQUIRED_FIELD)

        if "content" in provided:
            changes["content"] = TextSanitizer.sanitize_content(self.content)
            if not changes["content"]:
                raise ValidationError("Content cannot be empty", ErrorCodes.VALIDATION_MISSING_REQUIRED_FIELD)

        if "author" in provided:
            changes["author"] = _clean_author(self.author)

        if "language" in provided:
            changes["language"] = normalize_language(self.language)

        if "hashtags" in provided:
            changes["hashtags"] = parse_hashtags(self.hashtags)

        return changes


class QuoteListResponse(BaseModel):
    """语录列表响应模型"""
    items: List[Quote]
    next_cursor: Optional[str] = Field(None, alias="nextCursor")

    class Config:
        populate_by_name = True

    def to_payload(self) -> Dict[str, Any]:
        """nextCursor 仅在还有下一页时出现"""
        payload: Dict[str, Any] = {"items": [item.model_dump(by_alias=True) for item in self.items]}
        if self.next_cursor:
            payload["nextCursor"] = self.next_cursor
        return payload


class QuoteSuggestResponse(BaseModel):
    """标题建议响应模型"""
    items: List[QuoteTitle]


class QuoteShuffleResponse(BaseModel):
    """随机语录响应模型"""
    items: List[Quote]


class DeleteResponse(BaseModel):
    success: bool = True


class LoginRequest(BaseModel):
    """登录请求模型，非字符串密码按错误密码处理"""
    password: Any = None


class OkResponse(BaseModel):
    ok: bool = True


class SessionResponse(BaseModel):
    """会话状态响应模型"""
    is_admin: bool = Field(..., alias="isAdmin")

    class Config:
        populate_by_name = True

