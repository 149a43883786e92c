from __future__ import annotations

from pydantic import Field

from common.models.user import User
from common.types.datetime import UtcDateTime

from .common import CamelModel


class SignupRequest(CamelModel):
    name: str
    password: str


class LoginRequest(CamelModel):
    name: str
    password: str


class ProfileUpdateRequest(CamelModel):
    name: str
    current_password: str = ""
    new_password: str | None = None


class UserResponse(CamelModel):
    """비밀번호 해시를 제외한 현재 유저 응답 DTO."""

    id: str
    name: str
    coins: int
    is_admin: bool
    created_at: UtcDateTime

    @classmethod
    def from_domain(cls, user: User) -> "UserResponse":
        return cls(
            id=user.user_id,
            name=user.name,
            coins=user.coins,
            is_admin=user.is_admin,
            created_at=user.created_at,
        )


class AuthResponse(CamelModel):
    """로그인/회원가입 결과. token 은 Authorization: Bearer 로도 쓸 수 있는 세션 ID 이다."""

    user: UserResponse
    token: str = Field(description="세션 ID")
    expires_at: UtcDateTime
