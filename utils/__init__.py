"""
工具模块包
提供项目所需的通用工具和功能
"""

# 导出核心工具
from .config_manager import (
    config_manager,
    UnifiedConfigManager,
    LoggingConfig,
    DatabaseConfig,
    ApiConfig,
    AuthConfig,
    QueryConfig
)
from .exceptions import (
    QuoteVaultError,
    ValidationError,
    AuthError,
    NotFoundError,
    ConfigurationError,
    DatabaseError,
    ErrorCodes,
    create_error_response
)
from .logging_manager import (
    LogContext,
    log_execution,
    logging_manager,
    logger,
    LogConfig,
    initialize_logging,
    ModuleLoggers,
    api_logger,
    db_logger,
    auth_logger,
    config_logger,
    validation_logger
)
from .date_utils import utc_now, now_millis, to_iso_string
from .path_utils import BASE_DIR, CONFIG_DIR, LOG_DIR, DATA_DIR
from .validation import (
    TextSanitizer,
    QueryValidator,
    parse_hashtags,
    normalize_language,
    SUPPORTED_LANGUAGES
)
from .security_utils import (
    SessionManager,
    SecurityValidator,
    SecurityHeaders,
    create_token,
    verify_token,
    is_admin_session,
    extract_cookie,
    constant_time_equals,
    SESSION_COOKIE_NAME,
    SESSION_MAX_AGE_SECONDS
)

# 版本信息
__version__ = "1.0.0"

__all__ = [
    # 配置管理
    "config_manager",
    "UnifiedConfigManager",
    "LoggingConfig",
    "DatabaseConfig",
    "ApiConfig",
    "AuthConfig",
    "QueryConfig",

    # 异常处理
    "QuoteVaultError",
    "ValidationError",
    "AuthError",
    "NotFoundError",
    "ConfigurationError",
    "DatabaseError",
    "ErrorCodes",
    "create_error_response",

    # 日志工具
    "LogContext",
    "log_execution",
    "logging_manager",
    "logger",
    "LogConfig",
    "initialize_logging",
    "ModuleLoggers",
    "api_logger",
    "db_logger",
    "auth_logger",
    "config_logger",
    "validation_logger",

    # 时间工具
    "utc_now",
    "now_millis",
    "to_iso_string",

    # 路径工具
    "BASE_DIR",
    "CONFIG_DIR",
    "LOG_DIR",
    "DATA_DIR",

    # 文本清理与查询验证
    "TextSanitizer",
    "QueryValidator",
    "parse_hashtags",
    "normalize_language",
    "SUPPORTED_LANGUAGES",

    # 安全工具
    "SessionManager",
    "SecurityValidator",
    "SecurityHeaders",
    "create_token",
    "verify_token",
    "is_admin_session",
    "extract_cookie",
    "constant_time_equals",
    "SESSION_COOKIE_NAME",
    "SESSION_MAX_AGE_SECONDS",
]
