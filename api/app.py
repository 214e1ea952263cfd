"""
FastAPI application for the quote vault.
Main application entry point for the API server.
"""

from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI

from database import BaseQuoteStore, QuoteOperations
from utils import api_logger, config_manager, utc_now, to_iso_string, __version__

from .routes import router
from .middleware import setup_middleware


def create_app(quote_store: Optional[BaseQuoteStore] = None) -> FastAPI:
    """创建应用实例，未指定存储时使用配置文件中的数据库"""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """应用生命周期管理"""
        api_logger.info("[API] Starting QuoteVault API...")

        store = quote_store or QuoteOperations()
        await store.initialize()
        app.state.quote_store = store
        api_logger.info("[API] Quote store initialized successfully")

        try:
            yield
        finally:
            api_logger.info("[API] Shutting down QuoteVault API...")
            await store.close()

    app = FastAPI(
        title="QuoteVault API",
        description="Collect, tag, search and browse quotes",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan
    )

    setup_middleware(app)

    # 根路径与 /api 前缀提供相同的路由
    app.include_router(router)
    app.include_router(router, prefix="/api")

    @app.get("/")
    async def root():
        """根路径"""
        return {
            "message": "QuoteVault API",
            "version": __version__,
            "docs": "/docs",
            "status": "running"
        }

    @app.get("/health")
    async def health_check():
        """健康检查端点"""
        return {
            "status": "healthy",
            "timestamp": to_iso_string(utc_now()),
            "version": __version__
        }

    return app


app = create_app()


if __name__ == "__main__":
    # 获取API配置
    api_config = config_manager.get_api_config()
    api_logger.info(f"[API] Starting server on {api_config.host}:{api_config.port}")

    uvicorn.run(
        "api.app:app",
        host=api_config.host,
        port=api_config.port,
        reload=api_config.reload,
        workers=None if api_config.reload else api_config.workers,
        log_level="info"
    )
