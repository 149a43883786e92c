from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, field_validator, model_validator


class Session(BaseModel):
    """로그인 세션 도메인 모델.

    - session_id 는 쿠키(또는 Bearer 토큰)로만 노출된다.
    - expires_at 이 지나면 TTL 인덱스로 삭제되며, 조회 시에도 만료 여부를 다시 확인한다.
    """

    session_id: str
    user_id: str
    expires_at: datetime
    created_at: datetime
    updated_at: datetime

    @field_validator("session_id", "user_id")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("must not be blank")
        return value

    @model_validator(mode="after")
    def _validate_expiry(self) -> "Session":
        if self.expires_at <= self.created_at:
            raise ValueError("expires_at must be greater than created_at")
        return self

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now
