from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class User(BaseModel):
    """유저 도메인 모델.

    - Mongo users 컬렉션과 1:1로 매핑되는 공용 모델이다.
    - 내부 식별자는 user_id(uuid hex)이며, name 은 로그인에 쓰이는 유니크 표시 이름이다.
    - coins 는 0 이상의 정수 잔액이다. 잔액 변경은 코인 계정(조건부 $inc)만 수행한다.
    """

    user_id: str
    name: str
    password_hash: str
    coins: int = Field(default=0, ge=0)
    is_admin: bool = False
    telegram_id: str | None = None
    created_at: datetime
    updated_at: datetime


class UserProfile(BaseModel):
    """비밀번호 해시를 제외한 유저 조회 모델."""

    user_id: str
    name: str
    coins: int
    is_admin: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_user(cls, user: User) -> "UserProfile":
        return cls(
            user_id=user.user_id,
            name=user.name,
            coins=user.coins,
            is_admin=user.is_admin,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )
