"""관리자 전용 API. 모든 엔드포인트는 서비스에서 관리자 여부를 확인한다."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ...models.context import RequestContext
from ...services.moderation_service import ModerationService, get_moderation_service
from ..deps import get_request_context
from ..schemas.admin import (
    AdjustCoinsRequest,
    AdjustCoinsResponse,
    AdminDataResponse,
    AdminUserResponse,
    UpdateVideoStatusRequest,
)
from ..schemas.videos import VideoResponse


router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/data", response_model=AdminDataResponse, summary="검수 대기열 및 유저 목록")
def get_admin_data(
    ctx: RequestContext = Depends(get_request_context),
    service: ModerationService = Depends(get_moderation_service),
) -> AdminDataResponse:
    return AdminDataResponse.from_domain(service.admin_data(ctx))


@router.get("/users", response_model=list[AdminUserResponse], summary="유저 목록")
def list_users(
    ctx: RequestContext = Depends(get_request_context),
    service: ModerationService = Depends(get_moderation_service),
) -> list[AdminUserResponse]:
    return [AdminUserResponse.from_profile(u) for u in service.list_users(ctx)]


@router.post(
    "/update-video-status",
    response_model=VideoResponse,
    summary="영상 검수 결과 반영",
    description="pending 상태의 영상만 approved 또는 rejected 로 바꿀 수 있다.",
)
def update_video_status(
    body: UpdateVideoStatusRequest,
    ctx: RequestContext = Depends(get_request_context),
    service: ModerationService = Depends(get_moderation_service),
) -> VideoResponse:
    video = service.update_status(ctx, body.video_id, body.status)
    return VideoResponse.from_domain(video)


@router.post("/adjust-coins", response_model=AdjustCoinsResponse, summary="코인 수동 조정")
def adjust_coins(
    body: AdjustCoinsRequest,
    ctx: RequestContext = Depends(get_request_context),
    service: ModerationService = Depends(get_moderation_service),
) -> AdjustCoinsResponse:
    balance = service.adjust_coins(ctx, body.user_id, body.amount, body.reason)
    return AdjustCoinsResponse(user_id=body.user_id, coins=balance)
