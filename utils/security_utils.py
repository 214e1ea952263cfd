"""
安全工具模块
提供管理员会话令牌的签发/校验、Cookie解析和敏感信息处理
"""

import base64
import hashlib
import hmac
import json
from typing import Dict, Any, Optional
from urllib.parse import unquote

from .config_manager import AuthConfig
from .date_utils import now_millis
from .exceptions import AuthError, ConfigurationError, ErrorCodes
from .logging_manager import auth_logger


SESSION_COOKIE_NAME = "quotevault-admin"
SESSION_MAX_AGE_DAYS = 7
SESSION_MAX_AGE_SECONDS = SESSION_MAX_AGE_DAYS * 24 * 60 * 60
SESSION_MAX_AGE_MS = SESSION_MAX_AGE_SECONDS * 1000


def _b64url_encode(raw: bytes) -> str:
    """base64url编码（无填充）"""
    return base64.urlsafe_b64encode(raw).rstrip(b'=').decode('ascii')


def _b64url_decode(value: str) -> bytes:
    """base64url解码，自动补齐填充"""
    padding = '=' * (-len(value) % 4)
    return base64.urlsafe_b64decode(value + padding)


def sign_payload(secret: str, payload: str) -> str:
    """HMAC-SHA256签名，结果为base64url字符串"""
    digest = hmac.new(secret.encode('utf-8'), payload.encode('utf-8'), hashlib.sha256).digest()
    return _b64url_encode(digest)


def constant_time_equals(a: str, b: str) -> bool:
    """常量时间比较两个字符串"""
    return hmac.compare_digest(a.encode('utf-8'), b.encode('utf-8'))


def create_token(secret: str, now_ms: Optional[int] = None) -> str:
    """签发会话令牌: base64url({"t": now}) + "." + signature"""
    if now_ms is None:
        now_ms = now_millis()

    payload = _b64url_encode(json.dumps({"t": now_ms}, separators=(',', ':')).encode('utf-8'))
    return f"{payload}.{sign_payload(secret, payload)}"


def verify_token(secret: str, token: Any, now_ms: Optional[int] = None,
                 max_age_ms: int = SESSION_MAX_AGE_MS) -> bool:
    """校验会话令牌，任何异常输入都返回 False"""
    if not secret or not isinstance(token, str):
        return False

    payload, sep, signature = token.rpartition('.')
    if not sep or not payload or not signature:
        return False

    expected = sign_payload(secret, payload)
    if len(expected) != len(signature) or not constant_time_equals(signature, expected):
        return False

    try:
        data = json.loads(_b64url_decode(payload).decode('utf-8'))
    except (ValueError, UnicodeDecodeError):
        return False

    issued_at = data.get('t') if isinstance(data, dict) else None
    if isinstance(issued_at, bool) or not isinstance(issued_at, (int, float)):
        return False

    if now_ms is None:
        now_ms = now_millis()
    return now_ms - issued_at <= max_age_ms


def extract_cookie(cookie_header: Optional[str], name: str = SESSION_COOKIE_NAME) -> Optional[str]:
    """从Cookie请求头中提取指定Cookie的值"""
    if not cookie_header:
        return None

    prefix = f"{name}="
    for part in cookie_header.split(';'):
        part = part.strip()
        if part.startswith(prefix):
            value = part[len(prefix):]
            if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
                value = value[1:-1]
            return unquote(value)
    return None


def is_admin_session(cookie_header: Optional[str], secret: str,
                     now_ms: Optional[int] = None,
                     cookie_name: str = SESSION_COOKIE_NAME,
                     max_age_ms: int = SESSION_MAX_AGE_MS) -> bool:
    """根据Cookie请求头判断是否为管理员会话"""
    if not secret:
        return False

    token = extract_cookie(cookie_header, cookie_name)
    if token is None:
        return False
    return verify_token(secret, token, now_ms, max_age_ms)


class SessionManager:
    """管理员会话管理器"""

    def __init__(self, auth_config: AuthConfig):
        self.config = auth_config

    @property
    def cookie_name(self) -> str:
        return self.config.cookie_name

    @property
    def max_age_seconds(self) -> int:
        return self.config.max_age_seconds

    def check_password(self, password: Any) -> None:
        """校验管理员密码，未配置时抛出 ConfigurationError，不匹配时抛出 AuthError"""
        expected = self.config.admin_password
        if not expected:
            auth_logger.error("[Auth] Login attempted but admin password is not configured")
            raise ConfigurationError(
                "Admin login is not configured",
                ErrorCodes.AUTH_NOT_CONFIGURED
            )

        if not isinstance(password, str) or not constant_time_equals(password, expected):
            auth_logger.warning("[Auth] Login rejected: invalid password")
            raise AuthError("Invalid password", ErrorCodes.AUTH_INVALID_PASSWORD)

        auth_logger.info("[Auth] Admin login succeeded")

    def issue_token(self, now_ms: Optional[int] = None) -> str:
        """签发新的会话令牌"""
        return create_token(self.config.signing_secret, now_ms)

    def is_admin(self, cookie_header: Optional[str], now_ms: Optional[int] = None) -> bool:
        """检查请求Cookie是否代表管理员会话"""
        try:
            return is_admin_session(
                cookie_header,
                self.config.signing_secret,
                now_ms,
                cookie_name=self.config.cookie_name,
                max_age_ms=self.config.max_age_seconds * 1000
            )
        except Exception as e:
            auth_logger.warning(f"[Auth] Session check failed: {e}")
            return False


class SecurityValidator:
    """安全验证器"""

    # 敏感信息字段
    SENSITIVE_FIELDS = {
        'password', 'passwd', 'pwd',
        'token', 'secret', 'key',
        'auth', 'authorization', 'bearer',
    }

    @staticmethod
    def mask_sensitive_data(data: Dict[str, Any], mask: str = '********') -> Dict[str, Any]:
        """遮蔽敏感数据，只保留是否已设置"""
        if not isinstance(data, dict):
            return data

        masked = {}
        for key, value in data.items():
            key_lower = key.lower()
            if any(sensitive in key_lower for sensitive in SecurityValidator.SENSITIVE_FIELDS):
                masked[key] = mask if value else value
            else:
                masked[key] = value

        return masked


class SecurityHeaders:
    """安全HTTP头"""

    @staticmethod
    def get_security_headers() -> Dict[str, str]:
        """获取安全HTTP头"""
        return {
            'X-Content-Type-Options': 'nosniff',
            'X-Frame-Options': 'DENY',
            'Referrer-Policy': 'strict-origin-when-cross-origin',
            'Content-Security-Policy': "default-src 'self'",
        }
