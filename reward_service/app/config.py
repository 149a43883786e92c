from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

from .models.reward import RewardPolicy, RewardType


DEFAULT_CONFIG_FILE_NAME = "config.yaml"
REWARD_CONFIG_FILE = "REWARD_CONFIG_FILE"

REWARD_VIDEO_AMOUNT = "REWARD_VIDEO_AMOUNT"
REWARD_VIDEO_DAILY_LIMIT = "REWARD_VIDEO_DAILY_LIMIT"
REWARD_GIFT_AMOUNT = "REWARD_GIFT_AMOUNT"
REWARD_GIFT_COOLDOWN_HOURS = "REWARD_GIFT_COOLDOWN_HOURS"
REWARD_SUBSCRIBE_AMOUNT = "REWARD_SUBSCRIBE_AMOUNT"
REWARD_SUBSCRIBE_DAILY_LIMIT = "REWARD_SUBSCRIBE_DAILY_LIMIT"
VIDEO_SUBMISSION_COST = "VIDEO_SUBMISSION_COST"
SESSION_TTL_HOURS = "SESSION_TTL_HOURS"
SESSION_COOKIE_SECURE = "SESSION_COOKIE_SECURE"
ADMIN_NAME = "ADMIN_NAME"
ADMIN_PASSWORD = "ADMIN_PASSWORD"


@dataclass(slots=True)
class RewardsConfig:
    """보상 종류별 지급량/일일 한도 설정."""

    video: RewardPolicy
    gift: RewardPolicy
    subscribe: RewardPolicy

    def policy_for(self, reward_type: RewardType) -> RewardPolicy:
        if reward_type is RewardType.VIDEO:
            return self.video
        if reward_type is RewardType.GIFT:
            return self.gift
        return self.subscribe


@dataclass(slots=True)
class SubmissionConfig:
    cost: int


@dataclass(slots=True)
class AuthConfig:
    """세션 및 관리자 계정 설정."""

    session_ttl_hours: int
    cookie_secure: bool
    admin_name: str
    admin_password: str | None


@dataclass(slots=True)
class AppConfig:
    """reward-service 전체 설정."""

    rewards: RewardsConfig
    submission: SubmissionConfig
    auth: AuthConfig


def _find_config_path() -> Path | None:
    """REWARD_CONFIG_FILE 가 있으면 그 경로를, 없으면 현재 디렉토리부터 상위로 config.yaml 을 찾는다.

    파일이 없으면 None. 이 경우 환경변수와 기본값만 사용한다.
    """

    explicit = os.getenv(REWARD_CONFIG_FILE)
    if explicit:
        path = Path(explicit)
        if not path.is_file():
            raise RuntimeError(f"{REWARD_CONFIG_FILE} points to a missing file: {path}")
        return path

    current = Path.cwd()
    for directory in (current, *current.parents):
        candidate = directory / DEFAULT_CONFIG_FILE_NAME
        if candidate.is_file():
            return candidate
    return None


def load_file_settings(path: Path | None = None) -> dict[str, Any]:
    """config.yaml 의 rewards / submission 섹션을 읽는다."""

    path = path or _find_config_path()
    if path is None:
        return {}
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise RuntimeError(f"{path} must contain a mapping at the top level")
    return data


def _section(data: dict[str, Any], *keys: str) -> dict[str, Any]:
    node: Any = data
    for key in keys:
        node = node.get(key) if isinstance(node, dict) else None
    return node if isinstance(node, dict) else {}


def _read_int(env_name: str, default: Any, *, minimum: int = 0) -> int:
    """환경변수 > 설정 파일 값(default) 순으로 정수 설정을 읽는다."""

    raw = os.getenv(env_name)
    if raw is None or raw.strip() == "":
        raw = default
    try:
        value = int(raw)
    except (TypeError, ValueError) as exc:
        raise RuntimeError(
            f"{env_name} must be an integer if set, got: {raw!r}"
        ) from exc
    if value < minimum:
        raise RuntimeError(f"{env_name} must be >= {minimum}, got: {value}")
    return value


def _read_bool(env_name: str, default: bool) -> bool:
    raw = os.getenv(env_name)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in {"1", "true", "yes", "on"}:
        return True
    if value in {"0", "false", "no", "off"}:
        return False
    raise RuntimeError(f"{env_name} must be a boolean if set, got: {raw!r}")


def load_rewards_config(settings: dict[str, Any] | None = None) -> RewardsConfig:
    """보상 정책을 로드한다. 기본값은 30/650, 10/24h, 5/150."""

    settings = load_file_settings() if settings is None else settings
    video = _section(settings, "rewards", "video")
    gift = _section(settings, "rewards", "gift")
    subscribe = _section(settings, "rewards", "subscribe")

    return RewardsConfig(
        video=RewardPolicy(
            reward_type=RewardType.VIDEO,
            amount=_read_int(REWARD_VIDEO_AMOUNT, video.get("amount", 30), minimum=1),
            daily_limit=_read_int(
                REWARD_VIDEO_DAILY_LIMIT, video.get("daily_limit", 650), minimum=1
            ),
        ),
        gift=RewardPolicy(
            reward_type=RewardType.GIFT,
            amount=_read_int(REWARD_GIFT_AMOUNT, gift.get("amount", 10), minimum=1),
            cooldown_hours=_read_int(
                REWARD_GIFT_COOLDOWN_HOURS, gift.get("cooldown_hours", 24), minimum=1
            ),
        ),
        subscribe=RewardPolicy(
            reward_type=RewardType.SUBSCRIBE,
            amount=_read_int(
                REWARD_SUBSCRIBE_AMOUNT, subscribe.get("amount", 5), minimum=1
            ),
            daily_limit=_read_int(
                REWARD_SUBSCRIBE_DAILY_LIMIT,
                subscribe.get("daily_limit", 150),
                minimum=1,
            ),
        ),
    )


def load_submission_config(settings: dict[str, Any] | None = None) -> SubmissionConfig:
    settings = load_file_settings() if settings is None else settings
    submission = _section(settings, "submission")
    return SubmissionConfig(
        cost=_read_int(VIDEO_SUBMISSION_COST, submission.get("cost", 1250))
    )


def load_auth_config() -> AuthConfig:
    admin_name = (os.getenv(ADMIN_NAME) or "admin").strip()
    if not admin_name:
        raise RuntimeError(f"{ADMIN_NAME} must not be blank")

    return AuthConfig(
        session_ttl_hours=_read_int(SESSION_TTL_HOURS, 24 * 30, minimum=1),
        cookie_secure=_read_bool(SESSION_COOKIE_SECURE, False),
        admin_name=admin_name,
        admin_password=os.getenv(ADMIN_PASSWORD) or None,
    )


def load_config() -> AppConfig:
    """reward-service 설정을 로드하여 AppConfig로 반환한다.

    보상/제출 정책은 config.yaml(선택) 위에 환경변수를 덮어써서 결정한다.
    """

    settings = load_file_settings()
    return AppConfig(
        rewards=load_rewards_config(settings),
        submission=load_submission_config(settings),
        auth=load_auth_config(),
    )


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """프로세스 단위로 한 번만 로드되는 설정. FastAPI DI 에서 사용한다."""

    return load_config()
