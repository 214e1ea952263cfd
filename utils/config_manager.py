"""
统一的配置管理模块
整合底层配置操作和应用层类型安全访问
"""

import json
import os
import logging
from typing import Any, Optional, Dict, List, TypeVar
from dataclasses import dataclass, field
from pathlib import Path

from .exceptions import ConfigurationError, ErrorCodes
from .path_utils import CONFIG_DIR

# 获取配置专用日志器
config_logger = logging.getLogger("Config")

# 为泛型类型定义一个TypeVar
T = TypeVar('T')

# ============================================================================
# 配置数据类型定义
# ============================================================================

@dataclass
class LoggingModuleConfig:
    """模块日志配置"""
    level: str = "INFO"
    enabled: bool = True

@dataclass
class FileLoggingConfig:
    """文件日志配置"""
    enabled: bool = True
    directory: str = "log"
    filename: str = "sys.log"
    rotation: Optional[Dict[str, Any]] = None

@dataclass
class ConsoleLoggingConfig:
    """控制台日志配置"""
    enabled: bool = True

@dataclass
class LoggingConfig:
    """完整日志配置"""
    level: str = "INFO"
    format: str = "[%(levelname)s][%(asctime)s][%(filename)s:%(lineno)d] - %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"
    file_config: FileLoggingConfig = field(default_factory=FileLoggingConfig)
    console_config: ConsoleLoggingConfig = field(default_factory=ConsoleLoggingConfig)
    modules: Dict[str, LoggingModuleConfig] = field(default_factory=dict)

@dataclass
class DatabaseConfig:
    """数据库配置"""
    db_path: str = "data/quotevault.db"
    echo: bool = False

@dataclass
class ApiConfig:
    """API配置"""
    host: str = "0.0.0.0"
    port: int = 8000
    workers: int = 1
    reload: bool = False
    cors_origins: List[str] = field(default_factory=lambda: ["http://localhost:3000"])

@dataclass
class AuthConfig:
    """管理员认证配置"""
    admin_password: str = ""
    session_secret: str = ""
    cookie_name: str = "quotevault-admin"
    max_age_days: int = 7
    secure_cookies: bool = False

    @property
    def signing_secret(self) -> str:
        """签名密钥：优先使用管理员密码，其次使用session_secret"""
        return self.admin_password or self.session_secret

    @property
    def max_age_seconds(self) -> int:
        return self.max_age_days * 24 * 60 * 60

@dataclass
class QueryConfig:
    """查询/分页配置"""
    default_limit: int = 20
    max_limit: int = 100
    suggest_limit: int = 10
    shuffle_default_limit: int = 50
    tag_default_limit: int = 20


# ============================================================================
# 统一配置管理器
# ============================================================================

class UnifiedConfigManager:
    """统一配置管理器 - 整合底层操作和应用层抽象"""

    def __init__(self, config_dir: str = CONFIG_DIR):
        self._config_dir = Path(config_dir)
        self._config_data: Dict[str, Any] = {}

        # 类型化配置缓存
        self._typed_cache: Dict[str, Any] = {}

        # 初始化配置
        self._load_config()

    def _load_config(self) -> None:
        """加载配置文件"""
        merged_config = {}
        config_logger.info(f"Loading configuration from directory: {self._config_dir}")

        if not self._config_dir.is_dir():
            raise ConfigurationError(
                f"Configuration path is not a directory: {self._config_dir}",
                ErrorCodes.CONFIG_NOT_FOUND
            )

        # 按文件名排序加载，确保加载顺序一致
        config_files = sorted(self._config_dir.glob('*.json'))
        if not config_files:
            raise ConfigurationError(
                f"No configuration files (.json) found in: {self._config_dir}",
                ErrorCodes.CONFIG_NOT_FOUND
            )

        for config_file in config_files:
            try:
                with open(config_file, 'r', encoding='utf-8') as f:
                    data = json.load(f)
                    merged_config.update(data)
                config_logger.debug(f"Loaded and merged: {config_file.name}")
            except json.JSONDecodeError as e:
                raise ConfigurationError(
                    f"Invalid JSON in configuration file {config_file.name}: {e}",
                    ErrorCodes.CONFIG_INVALID_FORMAT
                ) from e

        self._config_data = merged_config
        config_logger.info(f"Configuration loaded and merged from {len(config_files)} files.")
        # 清除类型化缓存
        self._typed_cache.clear()

    # ========================================================================
    # 底层访问方法
    # ========================================================================

    def get_nested(self, path: str, default: Optional[T] = None) -> Optional[T]:
        """获取嵌套配置值，支持点分隔路径"""
        keys = path.split('.')
        current = self._config_data

        for key in keys:
            if isinstance(current, dict) and key in current:
                current = current[key]
            else:
                return default

        return current

    # ========================================================================
    # 类型安全访问方法
    # ========================================================================

    def get_logging_config(self) -> LoggingConfig:
        """获取日志配置（类型安全）"""
        if 'logging_config' not in self._typed_cache:
            try:
                logging_data = self.get_nested('logging_config', {})

                # 解析文件日志配置
                file_data = logging_data.get('file_config', {})
                file_config = FileLoggingConfig(
                    enabled=file_data.get('enabled', True),
                    directory=file_data.get('directory', 'log'),
                    filename=file_data.get('filename', 'sys.log'),
                    rotation=file_data.get('rotation')
                )

                # 解析控制台日志配置
                console_data = logging_data.get('console_config', {})
                console_config = ConsoleLoggingConfig(
                    enabled=console_data.get('enabled', True)
                )

                # 解析模块配置
                modules_data = logging_data.get('modules', {})
                modules = {}
                for module_name, module_data in modules_data.items():
                    modules[module_name] = LoggingModuleConfig(
                        level=module_data.get('level', 'INFO'),
                        enabled=module_data.get('enabled', True)
                    )

                self._typed_cache['logging_config'] = LoggingConfig(
                    level=logging_data.get('level', 'INFO'),
                    file_config=file_config,
                    console_config=console_config,
                    modules=modules
                )
            except Exception as e:
                config_logger.error(f"Failed to parse logging config: {e}")
                self._typed_cache['logging_config'] = LoggingConfig()

        return self._typed_cache['logging_config']

    def get_database_config(self) -> DatabaseConfig:
        """获取数据库配置（类型安全）"""
        if 'database_config' not in self._typed_cache:
            try:
                db_data = self.get_nested('database_config', {})
                self._typed_cache['database_config'] = DatabaseConfig(
                    db_path=db_data.get('db_path', 'data/quotevault.db'),
                    echo=db_data.get('echo', False)
                )
            except Exception as e:
                config_logger.error(f"Failed to parse database config: {e}")
                self._typed_cache['database_config'] = DatabaseConfig()

        return self._typed_cache['database_config']

    def get_api_config(self) -> ApiConfig:
        """获取API配置（类型安全）"""
        if 'api_config' not in self._typed_cache:
            try:
                api_data = self.get_nested('api_config', {})
                self._typed_cache['api_config'] = ApiConfig(
                    host=api_data.get('host', '0.0.0.0'),
                    port=api_data.get('port', 8000),
                    workers=api_data.get('workers', 1),
                    reload=api_data.get('reload', False),
                    cors_origins=api_data.get('cors_origins', ['http://localhost:3000'])
                )
            except Exception as e:
                config_logger.error(f"Failed to parse api config: {e}")
                self._typed_cache['api_config'] = ApiConfig()

        return self._typed_cache['api_config']

    def get_auth_config(self) -> AuthConfig:
        """获取认证配置（类型安全），环境变量优先于配置文件"""
        if 'auth_config' not in self._typed_cache:
            try:
                auth_data = self.get_nested('auth_config', {})
                admin_password = os.environ.get('ADMIN_PASSWORD', auth_data.get('admin_password', ''))
                session_secret = os.environ.get('SESSION_SECRET', auth_data.get('session_secret', ''))

                # 记录时遮蔽敏感信息
                config_logger.debug(f"Admin password: {'set' if admin_password else 'None'}")

                self._typed_cache['auth_config'] = AuthConfig(
                    admin_password=admin_password or '',
                    session_secret=session_secret or '',
                    cookie_name=auth_data.get('cookie_name', 'quotevault-admin'),
                    max_age_days=auth_data.get('max_age_days', 7),
                    secure_cookies=auth_data.get('secure_cookies', False)
                )
            except Exception as e:
                config_logger.error(f"Failed to parse auth config: {e}")
                self._typed_cache['auth_config'] = AuthConfig()

        return self._typed_cache['auth_config']

    def get_query_config(self) -> QueryConfig:
        """获取查询配置（类型安全）"""
        if 'query_config' not in self._typed_cache:
            try:
                query_data = self.get_nested('query_config', {})
                self._typed_cache['query_config'] = QueryConfig(
                    default_limit=query_data.get('default_limit', 20),
                    max_limit=query_data.get('max_limit', 100),
                    suggest_limit=query_data.get('suggest_limit', 10),
                    shuffle_default_limit=query_data.get('shuffle_default_limit', 50),
                    tag_default_limit=query_data.get('tag_default_limit', 20)
                )
            except Exception as e:
                config_logger.error(f"Failed to parse query config: {e}")
                self._typed_cache['query_config'] = QueryConfig()

        return self._typed_cache['query_config']


# ============================================================================
# 全局单例实例
# ============================================================================

config_manager = UnifiedConfigManager()
