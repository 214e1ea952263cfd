"""
Main entry point for QuoteVault.
Provides command-line interface and system initialization.
"""

import asyncio
import argparse
import sys
from dataclasses import asdict

from utils import (
    api_logger, db_logger, config_manager, initialize_logging, SecurityValidator
)
from database import QuoteOperations
from api.app import app as api_app
from api.models import QuoteCreateRequest

# 示例数据
SEED_QUOTES = [
    {
        "title": "The only way to do great work",
        "content": (
            "The only way to do great work is to love what you do. "
            "If you haven't found it yet, keep looking. Don't settle."
        ),
        "author": "Steve Jobs",
        "hashtags": ["motivation", "work"],
    },
    {
        "title": "Be the change",
        "content": "Be the change that you wish to see in the world.",
        "author": "Mahatma Gandhi",
        "hashtags": ["wisdom", "inspiration"],
    },
]


class QuoteVault:
    """语录库主类"""

    def __init__(self):
        self.config = config_manager
        self.store = QuoteOperations()

    async def start_api_server(self, host: str = None, port: int = None):
        """启动API服务器"""
        api_config = self.config.get_api_config()
        auth_config = self.config.get_auth_config()

        final_host = host if host is not None else api_config.host
        final_port = port if port is not None else api_config.port

        api_logger.info(f"[Main] Starting API server on {final_host}:{final_port}...")
        self.log_auth_config(auth_config)

        import uvicorn
        config = uvicorn.Config(
            api_app,
            host=final_host,
            port=final_port,
            log_level="info"
        )
        server = uvicorn.Server(config)
        await server.serve()

    def log_auth_config(self, auth_config):
        """记录认证配置，密钥只显示是否已设置"""
        api_logger.info(f"[Main] Auth config: {SecurityValidator.mask_sensitive_data(asdict(auth_config))}")
        if not auth_config.admin_password:
            api_logger.warning("[Main] ADMIN_PASSWORD is not set, admin login is disabled")

    async def init_db(self):
        """创建数据库表"""
        try:
            await self.store.initialize(create_tables=True)
            db_logger.info(f"[Main] Database ready at {self.store.db.db_path}")
        finally:
            await self.store.close()

    async def seed(self):
        """写入示例语录"""
        try:
            await self.store.initialize(create_tables=True)
            for data in SEED_QUOTES:
                fields = QuoteCreateRequest(**data).to_fields()
                quote = await self.store.create_quote(**fields)
                db_logger.info(f"[Main] Seeded quote {quote.id}: {quote.title}")
            print("Seed completed.")
        finally:
            await self.store.close()


def create_parser():
    """创建命令行参数解析器"""
    parser = argparse.ArgumentParser(
        description="QuoteVault - 语录收藏与检索服务",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
使用示例:
  python main.py serve --host 0.0.0.0 --port 8000  # 启动API服务器
  python main.py init-db                           # 创建数据库表
  python main.py seed                              # 写入示例语录
        """
    )

    subparsers = parser.add_subparsers(dest='command', help='可用命令')

    serve_parser = subparsers.add_parser('serve', help='启动API服务器')
    serve_parser.add_argument('--host', default=None, help='监听地址 (默认: api_config.host)')
    serve_parser.add_argument('--port', type=int, default=None, help='监听端口 (默认: api_config.port)')

    subparsers.add_parser('init-db', help='创建数据库表')
    subparsers.add_parser('seed', help='写入示例语录')

    return parser


async def main():
    """主函数"""
    parser = create_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return

    initialize_logging()
    vault = QuoteVault()

    try:
        if args.command == 'serve':
            await vault.start_api_server(host=args.host, port=args.port)

        elif args.command == 'init-db':
            await vault.init_db()

        elif args.command == 'seed':
            await vault.seed()

        else:
            parser.print_help()

    except KeyboardInterrupt:
        api_logger.info("[Main] Received keyboard interrupt")
    except Exception as e:
        api_logger.error(f"[Main] System error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
