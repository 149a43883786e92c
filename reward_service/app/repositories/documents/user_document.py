from __future__ import annotations

from common.models.user import User
from common.mongo.types import BaseDocument, build_document_data_from_domain


class UserDocument(BaseDocument):
    """MongoDB users 컬렉션 도큐먼트 모델."""

    user_id: str
    name: str
    password_hash: str
    coins: int = 0
    is_admin: bool = False
    telegram_id: str | None = None

    @classmethod
    def from_domain(cls, user: User) -> "UserDocument":
        data = build_document_data_from_domain(user)
        # User 도메인 모델에는 _id 를 노출하지 않으므로 단순 검증만 수행한다.
        return cls.model_validate(data)

    def to_domain(self) -> User:
        return User(
            user_id=self.user_id,
            name=self.name,
            password_hash=self.password_hash,
            coins=self.coins,
            is_admin=self.is_admin,
            telegram_id=self.telegram_id,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
