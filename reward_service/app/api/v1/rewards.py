from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from ...models.context import RequestContext
from ...services.coin_service import CoinService, get_coin_service
from ...services.rewards_service import RewardsService, get_rewards_service
from ..deps import get_request_context
from ..schemas.common import PaginatedResponse
from ..schemas.rewards import (
    ClaimRequest,
    ClaimResponse,
    CoinTransactionResponse,
    WatchDataResponse,
)


router = APIRouter()


@router.post("/rewards/claim", response_model=ClaimResponse, summary="보상 수령")
def claim_reward(
    body: ClaimRequest,
    ctx: RequestContext = Depends(get_request_context),
    service: RewardsService = Depends(get_rewards_service),
) -> ClaimResponse:
    result = service.claim(ctx, body.type, body.entity_id)
    return ClaimResponse.from_domain(result)


@router.get(
    "/watch-data",
    response_model=WatchDataResponse,
    summary="시청 화면 상태 조회",
    description="잔액, 오늘 누적 보상, 다음 gift 시각, 영상/채널별 수령 여부를 반환한다.",
)
def get_watch_data(
    video_id: str | None = Query(None, alias="videoId"),
    channel: str | None = Query(None, description="구독 여부를 확인할 채널 ID"),
    ctx: RequestContext = Depends(get_request_context),
    service: RewardsService = Depends(get_rewards_service),
) -> WatchDataResponse:
    data = service.watch_data(ctx, video_id, channel)
    return WatchDataResponse.from_domain(data)


@router.get(
    "/coins/history",
    response_model=PaginatedResponse[CoinTransactionResponse],
    summary="코인 변경 이력 조회",
)
def get_coin_history(
    page: int = Query(1, ge=1, description="조회할 페이지 (1부터 시작)"),
    page_size: int = Query(20, ge=1, le=100, alias="pageSize"),
    ctx: RequestContext = Depends(get_request_context),
    service: CoinService = Depends(get_coin_service),
) -> PaginatedResponse[CoinTransactionResponse]:
    user = ctx.require_user()
    items, total, page, page_size = service.get_history(user.user_id, page, page_size)
    return PaginatedResponse[CoinTransactionResponse](
        items=[CoinTransactionResponse.from_domain(tx) for tx in items],
        total=total,
        page=page,
        page_size=page_size,
    )
