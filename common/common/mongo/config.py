from __future__ import annotations

import os
from dataclasses import dataclass


MONGO_URI_ENV = "MONGO_URI"
MONGO_DB_NAME_ENV = "MONGO_DB_NAME"
MONGO_SERVER_SELECTION_TIMEOUT_MS_ENV = "MONGO_SERVER_SELECTION_TIMEOUT_MS"

DEFAULT_SERVER_SELECTION_TIMEOUT_MS = 5000


@dataclass(frozen=True, slots=True)
class MongoSettings:
    """MongoDB 연결 설정.

    - uri 는 필수이며, 없으면 기동 시점에 RuntimeError 로 실패한다.
    - db_name 이 None 이면 URI 에 포함된 기본 DB 를 사용한다.
    """

    uri: str
    db_name: str | None
    server_selection_timeout_ms: int


def _read_timeout_ms() -> int:
    raw = os.getenv(MONGO_SERVER_SELECTION_TIMEOUT_MS_ENV, "").strip()
    if not raw:
        return DEFAULT_SERVER_SELECTION_TIMEOUT_MS
    try:
        value = int(raw)
    except ValueError as exc:
        raise RuntimeError(
            f"{MONGO_SERVER_SELECTION_TIMEOUT_MS_ENV} must be an integer, got: {raw!r}"
        ) from exc
    if value <= 0:
        raise RuntimeError(
            f"{MONGO_SERVER_SELECTION_TIMEOUT_MS_ENV} must be > 0, got: {value}"
        )
    return value


def load_mongo_settings() -> MongoSettings:
    """환경 변수에서 MongoDB 연결 설정을 읽는다."""

    uri = os.getenv(MONGO_URI_ENV)
    if not uri:
        raise RuntimeError(
            f"{MONGO_URI_ENV} environment variable is required for MongoDB",
        )
    db_name = os.getenv(MONGO_DB_NAME_ENV, "").strip() or None
    return MongoSettings(
        uri=uri,
        db_name=db_name,
        server_selection_timeout_ms=_read_timeout_ms(),
    )
