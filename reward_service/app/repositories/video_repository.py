from __future__ import annotations

from datetime import datetime

from pymongo import ReturnDocument
from pymongo.database import Database

from common.mongo.types import parse_object_id

from ..models.video import VideoStatus, VideoSubmission
from .documents.video_document import VideoDocument
from .interfaces import VideoRepositoryInterface


class VideoRepository(VideoRepositoryInterface):
    """videos 컬렉션에 대한 MongoDB 접근 레이어."""

    def __init__(self, database: Database) -> None:
        self._db = database
        self._col = database["videos"]

    @staticmethod
    def _from_document(doc: dict) -> VideoSubmission:
        return VideoDocument.model_validate(doc).to_domain()

    def insert(self, video: VideoSubmission) -> VideoSubmission:
        payload = VideoDocument.from_domain(video).to_mongo_record()
        result = self._col.insert_one(payload)
        return video.model_copy(update={"id": str(result.inserted_id)})

    def find_by_id(self, video_id: str) -> VideoSubmission | None:
        object_id = parse_object_id(video_id)
        if object_id is None:
            return None
        doc = self._col.find_one({"_id": object_id})
        if not doc:
            return None
        return self._from_document(doc)

    def transition(
        self,
        video_id: str,
        from_status: VideoStatus,
        to_status: VideoStatus,
        reviewer_user_id: str,
        now: datetime,
    ) -> VideoSubmission | None:
        object_id = parse_object_id(video_id)
        if object_id is None:
            return None
        # 상태 조건을 필터에 포함해 동시에 두 번 전이되지 않도록 한다.
        doc = self._col.find_one_and_update(
            {"_id": object_id, "status": str(from_status)},
            {
                "$set": {
                    "status": str(to_status),
                    "reviewed_by_user_id": reviewer_user_id,
                    "reviewed_at": now,
                    "updated_at": now,
                }
            },
            return_document=ReturnDocument.AFTER,
        )
        if not doc:
            return None
        return self._from_document(doc)

    def list_all(self) -> list[VideoSubmission]:
        cursor = self._col.find({}, sort=[("submitted_at", -1), ("_id", -1)])
        return [self._from_document(doc) for doc in cursor]

    def list_by_user(self, user_id: str) -> list[VideoSubmission]:
        cursor = self._col.find(
            {"submitted_by_user_id": user_id},
            sort=[("submitted_at", -1), ("_id", -1)],
        )
        return [self._from_document(doc) for doc in cursor]
