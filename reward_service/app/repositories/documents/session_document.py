from __future__ import annotations

from common.mongo.types import (
    BaseDocument,
    MongoDateTime,
    build_document_data_from_domain,
)
from ...models.session import Session


class SessionDocument(BaseDocument):
    """MongoDB sessions 컬렉션 도큐먼트 모델."""

    session_id: str
    user_id: str
    expires_at: MongoDateTime

    @classmethod
    def from_domain(cls, session: Session) -> "SessionDocument":
        data = build_document_data_from_domain(session)
        return cls.model_validate(data)

    def to_domain(self) -> Session:
        return Session(
            session_id=self.session_id,
            user_id=self.user_id,
            expires_at=self.expires_at,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
