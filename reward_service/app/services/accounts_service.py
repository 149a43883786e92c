from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable
from uuid import uuid4

from fastapi import Depends
from pymongo.database import Database

from common.mongo.client import get_database
from common.models.user import User
from common.types.datetime import utc_now

from ..config import AppConfig, AuthConfig, get_config
from ..exceptions import Conflict, Forbidden, NotFound, Unauthorized, ValidationError
from ..models.context import RequestContext
from ..models.session import Session
from ..repositories.interfaces import (
    SessionRepositoryInterface,
    UserRepositoryInterface,
)
from ..repositories.session_repository import SessionRepository
from ..security import hash_password, new_session_id, verify_password
from .coin_service import get_user_repository


logger = logging.getLogger(__name__)

MIN_NAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 6
INVALID_CREDENTIALS_MESSAGE = "Incorrect username or password"


class AccountsService:
    """회원가입, 로그인/로그아웃, 세션 검증, 프로필 변경 비즈니스 로직.

    - Repository 인터페이스에만 의존하고, Mongo 세부 구현은 알지 않는다.
    - 세션 검증 결과는 RequestContext 로 만들어 다른 서비스에 명시적으로 넘긴다.
    """

    def __init__(
        self,
        user_repo: UserRepositoryInterface,
        session_repo: SessionRepositoryInterface,
        config: AuthConfig,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._user_repo = user_repo
        self._session_repo = session_repo
        self._config = config
        self._clock = clock

    def signup(self, name: str, password: str) -> tuple[User, Session]:
        name = self._validate_name(name)
        self._validate_password(password)
        if self._is_reserved(name):
            raise ValidationError("This name is reserved.")
        if self._user_repo.find_by_name(name) is not None:
            raise Conflict("This name is already in use.")

        now = self._clock()
        user = self._user_repo.insert(
            User(
                user_id=uuid4().hex,
                name=name,
                password_hash=hash_password(password),
                coins=0,
                is_admin=False,
                created_at=now,
                updated_at=now,
            )
        )
        logger.info("user signed up", extra={"user_id": user.user_id})
        return user, self._open_session(user.user_id, now)

    def login(self, name: str, password: str) -> tuple[User, Session]:
        user = self._user_repo.find_by_name((name or "").strip())
        if user is None or not verify_password(password or "", user.password_hash):
            raise Unauthorized(INVALID_CREDENTIALS_MESSAGE)
        return user, self._open_session(user.user_id, self._clock())

    def logout(self, ctx: RequestContext) -> None:
        if ctx.session_id is None or not ctx.is_authenticated:
            raise Unauthorized("Unauthorized")
        self._session_repo.delete_by_session_id(ctx.session_id)

    def resolve(self, session_id: str | None) -> RequestContext:
        """세션 ID 를 검증해 요청 컨텍스트를 만든다. 무효/만료 세션은 익명으로 취급한다."""
        if not session_id:
            return RequestContext.anonymous()

        session = self._session_repo.find_by_session_id(session_id)
        if session is None:
            return RequestContext.anonymous()

        # TTL 인덱스는 지연될 수 있으므로 애플리케이션 레벨에서도 만료를 한 번 더 확인한다.
        if session.is_expired(self._clock()):
            self._session_repo.delete_by_session_id(session_id)
            return RequestContext.anonymous()

        user = self._user_repo.find_by_user_id(session.user_id)
        if user is None:
            return RequestContext.anonymous()
        return RequestContext(user=user, session_id=session_id)

    def update_profile(
        self,
        ctx: RequestContext,
        name: str,
        current_password: str,
        new_password: str | None = None,
    ) -> tuple[User, Session]:
        """이름/비밀번호 변경. 성공하면 기존 세션을 모두 끊고 새 세션을 연다."""
        user = ctx.require_user()
        name = self._validate_name(name)
        if not current_password:
            raise ValidationError("Current password is required.")
        if new_password:
            self._validate_password(new_password, field="New password")

        existing = self._user_repo.find_by_user_id(user.user_id)
        if existing is None:
            raise NotFound("User not found")
        if not verify_password(current_password, existing.password_hash):
            raise ValidationError("The current password you entered is incorrect.")

        is_admin_account = self._is_reserved(existing.name)
        if is_admin_account and not self._is_reserved(name):
            raise Forbidden("Admin username cannot be changed.")

        now = self._clock()
        if name != existing.name:
            if self._is_reserved(name):
                raise ValidationError("This name is reserved.")
            if self._user_repo.find_by_name(name) is not None:
                raise Conflict("This name is already in use.")
            existing = self._user_repo.update_name(existing.user_id, name, now)

        if new_password:
            self._user_repo.update_password(
                existing.user_id, hash_password(new_password), now
            )

        self._session_repo.delete_all_by_user(existing.user_id)
        logger.info("profile updated", extra={"user_id": existing.user_id})
        return existing, self._open_session(existing.user_id, now)

    def ensure_admin(self) -> User | None:
        """설정된 관리자 계정을 만들거나 관리자 권한을 부여한다. 비밀번호 미설정 시 생략."""
        password = self._config.admin_password
        if not password:
            return None

        now = self._clock()
        existing = self._user_repo.find_by_name(self._config.admin_name)
        if existing is not None:
            if existing.is_admin:
                return existing
            return self._user_repo.set_admin(existing.user_id, True, now)

        admin = self._user_repo.insert(
            User(
                user_id=uuid4().hex,
                name=self._config.admin_name,
                password_hash=hash_password(password),
                coins=0,
                is_admin=True,
                created_at=now,
                updated_at=now,
            )
        )
        logger.info("admin account created", extra={"user_id": admin.user_id})
        return admin

    def _open_session(self, user_id: str, now: datetime) -> Session:
        session = Session(
            session_id=new_session_id(),
            user_id=user_id,
            expires_at=now + timedelta(hours=self._config.session_ttl_hours),
            created_at=now,
            updated_at=now,
        )
        return self._session_repo.create(session)

    def _is_reserved(self, name: str) -> bool:
        return name.lower() == self._config.admin_name.lower()

    @staticmethod
    def _validate_name(name: str) -> str:
        name = (name or "").strip()
        if len(name) < MIN_NAME_LENGTH:
            raise ValidationError(
                f"Name must be at least {MIN_NAME_LENGTH} characters."
            )
        return name

    @staticmethod
    def _validate_password(password: str, *, field: str = "Password") -> None:
        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"{field} must be at least {MIN_PASSWORD_LENGTH} characters."
            )


def get_session_repository(
    db: Database = Depends(get_database),
) -> SessionRepositoryInterface:
    return SessionRepository(db)


def get_accounts_service(
    user_repo: UserRepositoryInterface = Depends(get_user_repository),
    session_repo: SessionRepositoryInterface = Depends(get_session_repository),
    config: AppConfig = Depends(get_config),
) -> AccountsService:
    """FastAPI DI용 AccountsService 팩토리."""

    return AccountsService(
        user_repo=user_repo,
        session_repo=session_repo,
        config=config.auth,
    )
