"""
Input sanitization and validation utilities for the quote vault.
Free text is reduced to plain text (no HTML, no markdown) before it is stored.
"""

import re
from typing import List, Optional, Any

from .logging_manager import validation_logger


SUPPORTED_LANGUAGES = ('en', 'es')

TITLE_MAX_LENGTH = 500
CONTENT_MAX_LENGTH = 10000
AUTHOR_MAX_LENGTH = 200

_HTML_TAG = re.compile(r'<[^>]*>')
_SMART_DOUBLE_QUOTES = re.compile('[“”]')
_SMART_SINGLE_QUOTES = re.compile('[‘’]')
_LINE_BREAKS = re.compile(r'\s*[\r\n]+\s*')
_HASHTAG_SEPARATORS = re.compile(r'[\s,#]+')

# (pattern, replacement) 顺序与强调语法的嵌套关系有关
_MARKDOWN_RULES = [
    (re.compile(r'\*\*(.+?)\*\*'), r'\1'),
    (re.compile(r'\*(.+?)\*'), r'\1'),
    (re.compile(r'__(.+?)__'), r'\1'),
    (re.compile(r'_(.+?)_'), r'\1'),
    (re.compile(r'`(.+?)`'), r'\1'),
    (re.compile(r'\[(.+?)\]\(.+?\)'), r'\1'),
    (re.compile(r'^#{1,6}\s+', re.MULTILINE), ''),
    (re.compile(r'^\s*[-*+]\s+', re.MULTILINE), ''),
    (re.compile(r'^\s*\d+\.\s+', re.MULTILINE), ''),
]


class TextSanitizer:
    """纯文本清理器"""

    @staticmethod
    def _strip_once(text: str) -> str:
        """执行一轮清理：引号规范化、去除HTML标签、展开markdown"""
        text = _SMART_DOUBLE_QUOTES.sub('"', text)
        text = _SMART_SINGLE_QUOTES.sub("'", text)
        text = text.strip()
        text = _HTML_TAG.sub('', text)
        for pattern, replacement in _MARKDOWN_RULES:
            text = pattern.sub(replacement, text)
        return text.strip()

    @staticmethod
    def sanitize_text(value: Any, max_length: int = CONTENT_MAX_LENGTH) -> str:
        """清理为纯文本并截断，非字符串输入返回空字符串"""
        if not isinstance(value, str):
            return ""

        # 反复清理直到不再变化，保证幂等
        text = value
        while True:
            cleaned = TextSanitizer._strip_once(text)
            if cleaned == text:
                break
            text = cleaned

        return text[:max_length].strip()

    @staticmethod
    def _single_line(value: Any, max_length: int) -> str:
        text = value
        while True:
            cleaned = _LINE_BREAKS.sub(' ', TextSanitizer.sanitize_text(text, max_length)).strip()
            if cleaned == text:
                return cleaned
            text = cleaned

    @staticmethod
    def sanitize_title(value: Any, max_length: int = TITLE_MAX_LENGTH) -> str:
        """清理标题：单行，最多500字符"""
        return TextSanitizer._single_line(value, max_length)

    @staticmethod
    def sanitize_content(value: Any, max_length: int = CONTENT_MAX_LENGTH) -> str:
        """清理正文：允许换行，最多10000字符"""
        return TextSanitizer.sanitize_text(value, max_length)

    @staticmethod
    def sanitize_author(value: Any, max_length: int = AUTHOR_MAX_LENGTH) -> str:
        """清理作者：单行，最多200字符"""
        return TextSanitizer._single_line(value, max_length)


def parse_hashtags(value: Any) -> List[str]:
    """解析标签：按空白/逗号/# 分割，小写，去重并保持首次出现顺序"""
    if isinstance(value, str):
        chunks = [value]
    elif isinstance(value, (list, tuple)):
        chunks = [item for item in value if isinstance(item, str)]
    else:
        return []

    tags: List[str] = []
    seen = set()
    for chunk in chunks:
        for token in _HASHTAG_SEPARATORS.split(chunk):
            name = token.lstrip('#').lower().strip()
            if name and name not in seen:
                seen.add(name)
                tags.append(name)
    return tags


def normalize_language(value: Any) -> Optional[str]:
    """语言仅接受 en / es，其他值视为未设置"""
    if value in SUPPORTED_LANGUAGES:
        return value
    if value:
        validation_logger.debug(f"[Validation] Ignoring unsupported language: {value!r}")
    return None


class QueryValidator:
    """查询参数验证器"""

    @staticmethod
    def parse_tag_filter(tags: Optional[str]) -> List[str]:
        """解析逗号分隔的标签过滤参数，空字符串表示不过滤"""
        if not tags:
            return []

        names: List[str] = []
        for raw in tags.split(','):
            name = raw.strip().lower()
            if name.startswith('#'):
                name = name[1:].strip()
            if name and name not in names:
                names.append(name)
        return names

    @staticmethod
    def clamp_limit(raw: Any, default: int, maximum: int) -> int:
        """宽松解析limit：无法解析或为0时使用默认值，并限制在 [1, maximum]"""
        try:
            limit = int(raw) if raw is not None else default
        except (TypeError, ValueError):
            limit = default

        if limit == 0:
            limit = default

        return min(maximum, max(1, limit))
