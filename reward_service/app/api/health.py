from __future__ import annotations

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pymongo.database import Database
from pymongo.errors import PyMongoError

from common.mongo.client import get_database


SERVICE_NAME = "reward-service"

router = APIRouter()


@router.get("/health", summary="헬스 체크")
async def health() -> dict[str, str]:
    return {"status": "ok", "service": SERVICE_NAME}


@router.get("/health/ready", summary="MongoDB 연결 확인")
def ready(db: Database = Depends(get_database)) -> JSONResponse:
    try:
        db.command("ping")
    except PyMongoError:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unavailable", "service": SERVICE_NAME},
        )
    return JSONResponse(content={"status": "ok", "service": SERVICE_NAME})
