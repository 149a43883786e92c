from __future__ import annotations

from common.mongo.types import (
    BaseDocument,
    MongoDateTime,
    build_document_data_from_domain,
    from_object_id,
)

from ...models.video import VideoStatus, VideoSubmission


class VideoDocument(BaseDocument):
    """MongoDB videos 컬렉션 도큐먼트 모델."""

    url: str
    submitted_by_user_id: str
    submitted_at: MongoDateTime
    status: VideoStatus
    reviewed_by_user_id: str | None = None
    reviewed_at: MongoDateTime | None = None

    @classmethod
    def from_domain(cls, video: VideoSubmission) -> "VideoDocument":
        data = build_document_data_from_domain(video)
        data["created_at"] = video.submitted_at
        data["updated_at"] = video.reviewed_at or video.submitted_at
        return cls.model_validate(data)

    def to_domain(self) -> VideoSubmission:
        return VideoSubmission(
            id=from_object_id(self.id),
            url=self.url,
            submitted_by_user_id=self.submitted_by_user_id,
            submitted_at=self.submitted_at,
            status=self.status,
            reviewed_by_user_id=self.reviewed_by_user_id,
            reviewed_at=self.reviewed_at,
        )
