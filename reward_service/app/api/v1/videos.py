from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ...models.context import RequestContext
from ...services.videos_service import VideosService, get_videos_service
from ..deps import get_request_context
from ..schemas.videos import (
    ListVideosResponse,
    SubmitVideoRequest,
    SubmitVideoResponse,
    VideoResponse,
)


router = APIRouter()


@router.post(
    "/submit",
    response_model=SubmitVideoResponse,
    status_code=status.HTTP_201_CREATED,
    summary="영상 제출",
    description="제출 비용을 차감하고 검수 대기열(pending)에 영상을 등록한다.",
)
def submit_video(
    body: SubmitVideoRequest,
    ctx: RequestContext = Depends(get_request_context),
    service: VideosService = Depends(get_videos_service),
) -> SubmitVideoResponse:
    video, balance = service.submit(ctx, body.video_url)
    return SubmitVideoResponse(video=VideoResponse.from_domain(video), coins=balance)


@router.get("/mine", response_model=ListVideosResponse, summary="내 제출 영상 목록")
def list_my_videos(
    ctx: RequestContext = Depends(get_request_context),
    service: VideosService = Depends(get_videos_service),
) -> ListVideosResponse:
    items = service.list_mine(ctx)
    return ListVideosResponse(
        total=len(items),
        items=[VideoResponse.from_domain(v) for v in items],
    )
