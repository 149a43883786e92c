from fastapi import APIRouter

from .admin import router as admin_router
from .auth import router as auth_router
from .rewards import router as rewards_router
from .videos import router as videos_router

api_router = APIRouter()
api_router.include_router(auth_router, tags=["auth"])
api_router.include_router(rewards_router, tags=["rewards"])
api_router.include_router(videos_router, prefix="/videos", tags=["videos"])
api_router.include_router(
    admin_router
)  # prefix는 router 파일 내부에서 정의되어 있음 (/admin)
