"""
Middleware for the quote vault API.
Provides CORS, request logging, security headers and the JSON error envelope.
"""

import time
from typing import Callable
from fastapi import Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.cors import CORSMiddleware

from utils import (
    api_logger, config_manager, SecurityHeaders,
    QuoteVaultError, DatabaseError, create_error_response
)


class LoggingMiddleware(BaseHTTPMiddleware):
    """日志中间件"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()

        # 只记录路径，查询参数可能包含用户输入
        api_logger.debug(f"[API] {request.method} {request.url.path}")

        try:
            response = await call_next(request)

            process_time = time.time() - start_time
            api_logger.info(f"[API] {request.method} {request.url.path} - {response.status_code} - {process_time:.3f}s")

            response.headers["X-Process-Time"] = f"{process_time:.6f}"
            return response

        except Exception as e:
            process_time = time.time() - start_time
            api_logger.error(f"[API] {request.method} {request.url.path} - ERROR - {process_time:.3f}s - {str(e)}")
            raise


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """兜底错误处理中间件，任何未处理异常都转换为500错误信封"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)

        except Exception as e:
            api_logger.error(f"[API] Unexpected error: {str(e)}", exc_info=True)
            return JSONResponse(
                status_code=500,
                content={"error": "Internal server error"}
            )


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """安全头中间件"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        for header, value in SecurityHeaders.get_security_headers().items():
            response.headers.setdefault(header, value)

        return response


def _quote_vault_error_response(error: QuoteVaultError) -> JSONResponse:
    """将项目异常转换为 {error, details?} 响应"""
    if isinstance(error, DatabaseError):
        # 存储错误只返回通用信息
        api_logger.error(f"[API] Store failure: {error}")
        return JSONResponse(status_code=error.status_code, content={"error": "Internal server error"})

    if error.status_code >= 500:
        api_logger.error(f"[API] {error}")
    else:
        api_logger.warning(f"[API] {error}")
    return JSONResponse(status_code=error.status_code, content=create_error_response(error))


def setup_exception_handlers(app):
    """注册异常处理器"""

    @app.exception_handler(QuoteVaultError)
    async def quote_vault_error_handler(request: Request, exc: QuoteVaultError):
        return _quote_vault_error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(request: Request, exc: RequestValidationError):
        api_logger.warning(f"[API] Validation error on {request.method} {request.url.path}")
        field_errors = {}
        for error in exc.errors():
            location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
            field_errors.setdefault(location or "body", []).append(error.get("msg", "Invalid value"))
        return JSONResponse(
            status_code=400,
            content={"error": "Validation failed", "details": {"fieldErrors": field_errors}}
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None)
        )


def setup_cors(app):
    """设置CORS"""
    cors_origins = config_manager.get_api_config().cors_origins

    if "*" in cors_origins:
        # 会话Cookie需要 allow_credentials，不能与通配符同时使用
        api_logger.warning("[CORS] Wildcard origin ignored because credentials are enabled")
        cors_origins = [origin for origin in cors_origins if origin != "*"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )


def setup_middleware(app):
    """设置所有中间件"""
    setup_exception_handlers(app)
    setup_cors(app)

    # 后添加的中间件位于外层
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(LoggingMiddleware)

    api_logger.info("[API] Middleware setup completed")
