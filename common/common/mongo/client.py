from __future__ import annotations

import logging
import threading
from typing import Optional

from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.database import Database
from pymongo.errors import ConfigurationError, PyMongoError

from .config import MongoSettings, load_mongo_settings


logger = logging.getLogger(__name__)


_client: Optional[MongoClient] = None
_db: Optional[Database] = None
_lock = threading.Lock()


def _connect(settings: MongoSettings) -> tuple[MongoClient, Database]:
    """클라이언트를 만들고 ping 으로 검증한 뒤 사용할 Database 를 고른다.

    datetime 은 tz-aware(UTC) 로 읽도록 tz_aware=True 를 사용한다.
    """

    client: MongoClient = MongoClient(
        settings.uri,
        tz_aware=True,
        serverSelectionTimeoutMS=settings.server_selection_timeout_ms,
    )
    try:
        client.admin.command("ping")
    except PyMongoError as exc:
        client.close()
        raise RuntimeError(f"failed to connect to MongoDB: {exc}") from exc

    try:
        db = client[settings.db_name] if settings.db_name else client.get_default_database()
    except ConfigurationError as exc:
        client.close()
        raise RuntimeError(
            "MongoDB database name must be specified via MONGO_DB_NAME or in MONGO_URI (mongodb://.../db_name)",
        ) from exc
    return client, db


def get_client() -> MongoClient:
    """전역 MongoClient 싱글톤을 반환한다. 최초 연결 시 인덱스를 한 번 보장한다."""

    global _client, _db

    if _client is not None:
        return _client

    with _lock:
        if _client is not None:
            return _client

        client, db = _connect(load_mongo_settings())
        try:
            ensure_indexes(db)
        except PyMongoError:
            # 인덱스 생성 실패 시 기동을 중단한다.
            logger.exception("failed to ensure MongoDB indexes")
            client.close()
            raise

        _client, _db = client, db
        logger.info("MongoDB connected and indexes ensured (db=%s)", db.name)
        return client


def get_database() -> Database:
    """전역 기본 Database 객체를 반환한다. FastAPI DI 에서 사용한다."""

    if _db is None:
        get_client()
    assert _db is not None
    return _db


def close_client() -> None:
    global _client, _db

    with _lock:
        if _client is not None:
            _client.close()
        _client = None
        _db = None


def ensure_indexes(db: Database) -> None:
    """필수 인덱스를 생성한다.

    중복 생성해도 MongoDB 가 처리하므로 idempotent 하다.
    유니크 인덱스는 중복 지급 방지의 마지막 방어선이므로 반드시 존재해야 한다.
    """

    users = db["users"]
    users.create_index([("user_id", ASCENDING)], name="uniq_user_id", unique=True)
    users.create_index([("name", ASCENDING)], name="uniq_name", unique=True)
    users.create_index(
        [("telegram_id", ASCENDING)],
        name="uniq_telegram_id",
        unique=True,
        partialFilterExpression={"telegram_id": {"$type": "string"}},
    )

    rewards = db["rewards"]
    rewards.create_index(
        [("user_id", ASCENDING), ("type", ASCENDING), ("claimed_at", DESCENDING)],
        name="idx_user_type_claimed_at",
    )

    windows = db["reward_windows"]
    windows.create_index(
        [("user_id", ASCENDING), ("type", ASCENDING), ("window_key", ASCENDING)],
        name="uniq_user_type_window",
        unique=True,
    )
    # 지난 윈도우는 만료 시각이 지나면 자동 삭제된다.
    windows.create_index(
        [("expires_at", ASCENDING)],
        name="ttl_expires_at",
        expireAfterSeconds=0,
    )

    subscriptions = db["subscriptions"]
    subscriptions.create_index(
        [("user_id", ASCENDING), ("channel_id", ASCENDING)],
        name="uniq_user_channel",
        unique=True,
    )

    videos = db["videos"]
    videos.create_index(
        [("status", ASCENDING), ("submitted_at", DESCENDING)],
        name="idx_status_submitted_at",
    )
    videos.create_index(
        [("submitted_by_user_id", ASCENDING), ("submitted_at", DESCENDING)],
        name="idx_submitter_submitted_at",
    )

    sessions = db["sessions"]
    sessions.create_index(
        [("session_id", ASCENDING)], name="uniq_session_id", unique=True
    )
    sessions.create_index([("user_id", ASCENDING)], name="idx_user_id")
    sessions.create_index(
        [("expires_at", ASCENDING)],
        name="ttl_expires_at",
        expireAfterSeconds=0,
    )

    transactions = db["coin_transactions"]
    transactions.create_index(
        [("user_id", ASCENDING), ("created_at", DESCENDING), ("_id", DESCENDING)],
        name="idx_user_created_at",
    )
