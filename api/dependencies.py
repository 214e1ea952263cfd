"""
FastAPI dependencies for the quote vault API.
Resolves the quote store, configuration and admin session per request.
"""

from fastapi import Depends, Request

from database import BaseQuoteStore
from utils import (
    config_manager, AuthConfig, QueryConfig, SessionManager,
    AuthError, ErrorCodes, auth_logger
)


def get_quote_store(request: Request) -> BaseQuoteStore:
    """应用启动时挂载到 app.state 的语录存储"""
    return request.app.state.quote_store


def get_auth_config() -> AuthConfig:
    return config_manager.get_auth_config()


def get_query_config() -> QueryConfig:
    return config_manager.get_query_config()


def get_session_manager(auth_config: AuthConfig = Depends(get_auth_config)) -> SessionManager:
    return SessionManager(auth_config)


def is_secure_request(request: Request, auth_config: AuthConfig) -> bool:
    """HTTPS 请求或强制配置时 Cookie 带 Secure 属性"""
    return auth_config.secure_cookies or request.url.scheme == "https"


async def require_admin(
    request: Request,
    sessions: SessionManager = Depends(get_session_manager)
) -> bool:
    """管理员校验，在读取请求体和访问存储之前执行"""
    if not sessions.is_admin(request.headers.get("cookie")):
        auth_logger.warning(f"[Auth] Unauthorized {request.method} {request.url.path}")
        raise AuthError("Unauthorized", ErrorCodes.AUTH_UNAUTHORIZED)
    return True
