from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI

from common.logger import setup_logger
from common.middleware.request_trace import RequestTraceMiddleware
from common.mongo.client import close_client, get_database

from .api.errors import register_exception_handlers
from .api.health import router as health_router
from .api.v1 import api_router
from .config import get_config
from .repositories.session_repository import SessionRepository
from .repositories.user_repository import UserRepository
from .services.accounts_service import AccountsService


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):  # pragma: no cover - framework hook
    """기동 시 설정을 검증하고 MongoDB 연결과 관리자 계정을 준비한다."""

    config = get_config()
    # 첫 연결 시 ping 과 인덱스 생성이 함께 수행된다.
    db = get_database()

    if config.auth.admin_password:
        accounts = AccountsService(
            user_repo=UserRepository(db),
            session_repo=SessionRepository(db),
            config=config.auth,
        )
        admin = accounts.ensure_admin()
        if admin is not None:
            logger.info("admin account ready", extra={"user_id": admin.user_id})

    try:
        yield
    finally:
        close_client()


def create_app() -> FastAPI:
    setup_logger(name="reward-service")
    app = FastAPI(
        title="Watch & Earn Reward Service",
        version="0.1.0",
        lifespan=lifespan,
    )

    # 공통 Request/Span ID 로그 미들웨어
    app.add_middleware(RequestTraceMiddleware)
    register_exception_handlers(app)

    app.include_router(health_router, tags=["health"])
    app.include_router(api_router, prefix="/api/v1")

    return app


app = create_app()


def main() -> None:
    import uvicorn

    port = int(os.getenv("REWARD_SERVICE_PORT", "8003"))
    uvicorn.run(
        "reward_service.app.main:app",
        host="0.0.0.0",
        port=port,
        reload=False,
        access_log=False,
    )


if __name__ == "__main__":  # pragma: no cover - CLI entrypoint
    main()
