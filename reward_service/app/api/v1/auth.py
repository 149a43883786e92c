from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from ...config import AppConfig, get_config
from ...models.context import RequestContext
from ...services.accounts_service import AccountsService, get_accounts_service
from ..deps import clear_session_cookie, get_request_context, set_session_cookie
from ..schemas.auth import (
    AuthResponse,
    LoginRequest,
    ProfileUpdateRequest,
    SignupRequest,
    UserResponse,
)
from ..schemas.common import MessageResponse


router = APIRouter()


@router.post(
    "/signup",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="회원가입",
)
def signup(
    body: SignupRequest,
    response: Response,
    service: AccountsService = Depends(get_accounts_service),
    config: AppConfig = Depends(get_config),
) -> AuthResponse:
    user, session = service.signup(body.name, body.password)
    set_session_cookie(response, session, config.auth)
    return AuthResponse(
        user=UserResponse.from_domain(user),
        token=session.session_id,
        expires_at=session.expires_at,
    )


@router.post("/login", response_model=AuthResponse, summary="로그인")
def login(
    body: LoginRequest,
    response: Response,
    service: AccountsService = Depends(get_accounts_service),
    config: AppConfig = Depends(get_config),
) -> AuthResponse:
    user, session = service.login(body.name, body.password)
    set_session_cookie(response, session, config.auth)
    return AuthResponse(
        user=UserResponse.from_domain(user),
        token=session.session_id,
        expires_at=session.expires_at,
    )


@router.post("/logout", response_model=MessageResponse, summary="로그아웃")
def logout(
    response: Response,
    ctx: RequestContext = Depends(get_request_context),
    service: AccountsService = Depends(get_accounts_service),
) -> MessageResponse:
    service.logout(ctx)
    clear_session_cookie(response)
    return MessageResponse(message="Logged out")


@router.get(
    "/user",
    response_model=UserResponse,
    summary="현재 유저 조회",
    description="세션이 없으면 204 를 반환한다.",
)
def current_user(ctx: RequestContext = Depends(get_request_context)):
    if ctx.user is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return UserResponse.from_domain(ctx.user)


@router.post("/profile/update", response_model=AuthResponse, summary="프로필 변경")
def update_profile(
    body: ProfileUpdateRequest,
    response: Response,
    ctx: RequestContext = Depends(get_request_context),
    service: AccountsService = Depends(get_accounts_service),
    config: AppConfig = Depends(get_config),
) -> AuthResponse:
    """이름/비밀번호를 바꾸고 기존 세션을 모두 끊은 뒤 새 세션을 발급한다."""
    user, session = service.update_profile(
        ctx,
        name=body.name,
        current_password=body.current_password,
        new_password=body.new_password,
    )
    set_session_cookie(response, session, config.auth)
    return AuthResponse(
        user=UserResponse.from_domain(user),
        token=session.session_id,
        expires_at=session.expires_at,
    )
