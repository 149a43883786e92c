"""API 레이어 공용 의존성."""

from __future__ import annotations

from fastapi import Depends, Request, Response

from ..config import AuthConfig
from ..models.context import RequestContext
from ..models.session import Session
from ..services.accounts_service import AccountsService, get_accounts_service


SESSION_COOKIE_NAME = "session"
BEARER_PREFIX = "bearer "


def extract_session_id(request: Request) -> str | None:
    """세션 쿠키를 우선 보고, 없으면 Authorization: Bearer 헤더를 본다."""

    cookie = request.cookies.get(SESSION_COOKIE_NAME)
    if cookie:
        return cookie

    header = request.headers.get("Authorization") or ""
    if header.lower().startswith(BEARER_PREFIX):
        token = header[len(BEARER_PREFIX) :].strip()
        return token or None
    return None


def get_request_context(
    request: Request,
    accounts: AccountsService = Depends(get_accounts_service),
) -> RequestContext:
    """요청마다 세션을 한 번 검증해 서비스에 넘길 RequestContext 를 만든다."""

    ctx = accounts.resolve(extract_session_id(request))
    if ctx.user is not None:
        # 요청 로그(RequestTraceMiddleware)에 사용자 ID 를 싣는다.
        request.state.user_id = ctx.user.user_id
    return ctx


def set_session_cookie(response: Response, session: Session, config: AuthConfig) -> None:
    response.set_cookie(
        SESSION_COOKIE_NAME,
        session.session_id,
        max_age=config.session_ttl_hours * 3600,
        httponly=True,
        secure=config.cookie_secure,
        samesite="lax",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(SESSION_COOKIE_NAME)
