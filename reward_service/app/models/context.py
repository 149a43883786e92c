from __future__ import annotations

from dataclasses import dataclass

from common.models.user import User

from ..exceptions import Forbidden, Unauthorized


@dataclass(frozen=True, slots=True)
class RequestContext:
    """요청 단위로 검증된 사용자 정보를 서비스에 명시적으로 전달한다.

    세션 조회는 API 레이어에서 한 번만 수행되고, 서비스는 전역 상태를 보지 않는다.
    """

    user: User | None = None
    session_id: str | None = None

    @classmethod
    def anonymous(cls) -> "RequestContext":
        return cls()

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    def require_user(self) -> User:
        if self.user is None:
            raise Unauthorized("Unauthorized")
        return self.user

    def require_admin(self) -> User:
        user = self.require_user()
        if not user.is_admin:
            raise Forbidden("Admin access required")
        return user
