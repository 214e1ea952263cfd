"""
Date and time utilities for the quote vault.
All stored timestamps are naive UTC; API output is ISO-8601 with a trailing Z.
"""

import time
from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """获取当前UTC时间（naive，便于SQLite存储与比较）"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def now_millis() -> int:
    """当前时间的毫秒时间戳"""
    return int(time.time() * 1000)


def to_iso_string(value: Optional[datetime]) -> Optional[str]:
    """格式化为毫秒精度的ISO-8601字符串，例如 2024-01-01T08:30:00.123Z"""
    if value is None:
        return None

    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)

    return value.strftime('%Y-%m-%dT%H:%M:%S.') + f"{value.microsecond // 1000:03d}Z"

