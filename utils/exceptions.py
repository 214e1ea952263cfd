"""
统一异常定义模块
提供项目特定的异常类和错误处理机制
"""

from typing import Optional, Dict, Any


class QuoteVaultError(Exception):
    """语录库基础异常类"""

    status_code = 500

    def __init__(self, message: str, error_code: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.context = context or {}

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"


class ValidationError(QuoteVaultError):
    """数据验证错误"""
    status_code = 400


class AuthError(QuoteVaultError):
    """认证/授权错误"""
    status_code = 401


class NotFoundError(QuoteVaultError):
    """目标不存在"""
    status_code = 404


class ConfigurationError(QuoteVaultError):
    """配置相关错误（例如管理员密钥未配置）"""
    status_code = 503


class DatabaseError(QuoteVaultError):
    """数据库相关错误"""
    status_code = 500


# 错误代码常量
class ErrorCodes:
    """错误代码常量"""

    # 配置错误
    CONFIG_NOT_FOUND = "CONFIG_001"
    CONFIG_INVALID_FORMAT = "CONFIG_002"

    # 数据库错误
    DB_QUERY_FAILED = "DB_002"

    # 验证错误
    VALIDATION_MISSING_REQUIRED_FIELD = "VAL_002"
    VALIDATION_OUT_OF_RANGE = "VAL_003"

    # 认证错误
    AUTH_UNAUTHORIZED = "AUTH_001"
    AUTH_INVALID_PASSWORD = "AUTH_002"
    AUTH_NOT_CONFIGURED = "AUTH_003"

    # 资源错误
    QUOTE_NOT_FOUND = "RES_001"


def create_error_response(error: QuoteVaultError) -> Dict[str, Any]:
    """创建标准化的错误响应 {error, details?}"""
    response: Dict[str, Any] = {"error": error.message}

    if error.context:
        response["details"] = error.context

    return response

