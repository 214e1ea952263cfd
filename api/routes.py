"""
API routes for the quote vault.
Defines the REST endpoints for quotes, tags and admin sessions.
"""

from typing import List, Optional, Dict, Any
from fastapi import APIRouter, Query, Depends, Request, Response

from database import BaseQuoteStore, QuoteQuery
from database.models import Quote
from utils import (
    QueryConfig, AuthConfig, SessionManager, QueryValidator,
    NotFoundError, ErrorCodes, api_logger, auth_logger
)
from .dependencies import (
    get_quote_store, get_query_config, get_auth_config,
    get_session_manager, require_admin, is_secure_request
)
from .models import (
    QuoteCreateRequest, QuoteUpdateRequest, QuoteListResponse,
    QuoteSuggestResponse, QuoteShuffleResponse, DeleteResponse,
    LoginRequest, OkResponse, SessionResponse
)

router = APIRouter()


def _quote_not_found(quote_id: str) -> NotFoundError:
    return NotFoundError("Not found", ErrorCodes.QUOTE_NOT_FOUND, context={"id": quote_id})


# Quote Search
@router.get("/quotes", tags=["Quotes"])
async def list_quotes(
    q: Optional[str] = Query(None, description="标题/正文/作者关键词"),
    author: Optional[str] = Query(None, description="作者"),
    tags: Optional[str] = Query(None, description="逗号分隔的标签，全部匹配"),
    language: Optional[str] = Query(None, description="语言 en/es"),
    sort: Optional[str] = Query(None, description="newest 或 oldest"),
    cursor: Optional[str] = Query(None, description="上一页最后一条的ID"),
    limit: Optional[str] = Query(None, description="每页数量 1-100"),
    store: BaseQuoteStore = Depends(get_quote_store)
) -> Dict[str, Any]:
    """搜索/过滤语录，游标分页"""
    query = QuoteQuery.from_params(
        q=q, author=author, tags=tags, language=language,
        sort=sort, cursor=cursor, limit=limit
    )
    page = await store.list_quotes(query)
    return QuoteListResponse(items=page.items, next_cursor=page.next_cursor).to_payload()


@router.get("/quotes/suggest", response_model=QuoteSuggestResponse, tags=["Quotes"])
async def suggest_quotes(
    q: Optional[str] = Query(None, description="标题关键词"),
    store: BaseQuoteStore = Depends(get_quote_store),
    query_config: QueryConfig = Depends(get_query_config)
):
    """标题自动补全"""
    if not q or not q.strip():
        return QuoteSuggestResponse(items=[])

    items = await store.suggest_titles(q, limit=query_config.suggest_limit)
    return QuoteSuggestResponse(items=items)


@router.get("/quotes/shuffle", response_model=QuoteShuffleResponse, tags=["Quotes"])
async def shuffle_quotes(
    limit: Optional[str] = Query(None, description="返回数量"),
    store: BaseQuoteStore = Depends(get_quote_store),
    query_config: QueryConfig = Depends(get_query_config)
):
    """随机浏览最近的语录"""
    size = QueryValidator.clamp_limit(limit, query_config.shuffle_default_limit, query_config.max_limit)
    items = await store.shuffle_quotes(size)
    return QuoteShuffleResponse(items=items)


@router.get("/quotes/{quote_id}", response_model=Quote, tags=["Quotes"])
async def get_quote(quote_id: str, store: BaseQuoteStore = Depends(get_quote_store)):
    """根据ID获取语录"""
    quote = await store.get_quote(quote_id)
    if quote is None:
        raise _quote_not_found(quote_id)
    return quote


# Quote Management
@router.post("/quotes", response_model=Quote, tags=["Quotes"])
async def create_quote(body: QuoteCreateRequest, store: BaseQuoteStore = Depends(get_quote_store)):
    """创建语录，无需登录"""
    fields = body.to_fields()
    quote = await store.create_quote(**fields)
    api_logger.info(f"[API] Quote created: {quote.id}")
    return quote


@router.patch("/quotes/{quote_id}", response_model=Quote, tags=["Quotes"])
async def update_quote(
    quote_id: str,
    _: bool = Depends(require_admin),
    body: QuoteUpdateRequest = None,
    store: BaseQuoteStore = Depends(get_quote_store)
):
    """部分更新语录（管理员）"""
    changes = body.to_changes() if body is not None else {}
    quote = await store.update_quote(quote_id, **changes)
    if quote is None:
        raise _quote_not_found(quote_id)
    api_logger.info(f"[API] Quote updated: {quote_id}")
    return quote


@router.delete("/quotes/{quote_id}", response_model=DeleteResponse, tags=["Quotes"])
async def delete_quote(
    quote_id: str,
    _: bool = Depends(require_admin),
    store: BaseQuoteStore = Depends(get_quote_store)
):
    """删除语录（管理员），标签保留"""
    if not await store.delete_quote(quote_id):
        raise _quote_not_found(quote_id)
    api_logger.info(f"[API] Quote deleted: {quote_id}")
    return DeleteResponse(success=True)


# Tags
@router.get("/tags", response_model=List[str], tags=["Tags"])
async def suggest_tags(
    prefix: Optional[str] = Query(None, description="标签前缀，可带#"),
    language: Optional[str] = Query(None, description="只返回该语言语录使用的标签"),
    limit: Optional[str] = Query(None, description="返回数量"),
    store: BaseQuoteStore = Depends(get_quote_store),
    query_config: QueryConfig = Depends(get_query_config)
):
    """标签建议"""
    size = QueryValidator.clamp_limit(limit, query_config.tag_default_limit, query_config.max_limit)
    return await store.suggest_tags(prefix or "", language=language, limit=size)


# Admin Session
@router.post("/auth/login", response_model=OkResponse, tags=["Auth"])
async def login(
    body: LoginRequest,
    request: Request,
    response: Response,
    sessions: SessionManager = Depends(get_session_manager),
    auth_config: AuthConfig = Depends(get_auth_config)
):
    """管理员登录，成功后写入会话Cookie"""
    sessions.check_password(body.password)

    response.set_cookie(
        key=sessions.cookie_name,
        value=sessions.issue_token(),
        max_age=sessions.max_age_seconds,
        path="/",
        httponly=True,
        samesite="lax",
        secure=is_secure_request(request, auth_config)
    )
    return OkResponse(ok=True)


@router.post("/auth/logout", response_model=OkResponse, tags=["Auth"])
async def logout(
    request: Request,
    response: Response,
    sessions: SessionManager = Depends(get_session_manager),
    auth_config: AuthConfig = Depends(get_auth_config)
):
    """清除会话Cookie"""
    response.set_cookie(
        key=sessions.cookie_name,
        value="",
        max_age=0,
        path="/",
        httponly=True,
        samesite="lax",
        secure=is_secure_request(request, auth_config)
    )
    auth_logger.info("[Auth] Admin session cleared")
    return OkResponse(ok=True)


@router.get("/auth/session", response_model=SessionResponse, tags=["Auth"])
async def get_session(request: Request, sessions: SessionManager = Depends(get_session_manager)):
    """当前请求是否带有效的管理员会话"""
    return SessionResponse(is_admin=sessions.is_admin(request.headers.get("cookie")))
