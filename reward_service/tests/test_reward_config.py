from __future__ import annotations

import pytest

from reward_service.app.config import (
    load_auth_config,
    load_file_settings,
    load_rewards_config,
    load_submission_config,
)


_ENV_NAMES = (
    "REWARD_VIDEO_AMOUNT",
    "REWARD_VIDEO_DAILY_LIMIT",
    "REWARD_GIFT_AMOUNT",
    "REWARD_GIFT_COOLDOWN_HOURS",
    "REWARD_SUBSCRIBE_AMOUNT",
    "REWARD_SUBSCRIBE_DAILY_LIMIT",
    "VIDEO_SUBMISSION_COST",
    "SESSION_TTL_HOURS",
    "SESSION_COOKIE_SECURE",
    "ADMIN_NAME",
    "ADMIN_PASSWORD",
    "REWARD_CONFIG_FILE",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_NAMES:
        monkeypatch.delenv(name, raising=False)


def test_defaults_without_file_or_env() -> None:
    rewards = load_rewards_config({})

    assert (rewards.video.amount, rewards.video.daily_limit) == (30, 650)
    assert (rewards.gift.amount, rewards.gift.cooldown_hours) == (10, 24)
    assert (rewards.subscribe.amount, rewards.subscribe.daily_limit) == (5, 150)
    assert load_submission_config({}).cost == 1250


def test_yaml_file_then_env_override(tmp_path, monkeypatch) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(
        "rewards:\n"
        "  video:\n"
        "    amount: 20\n"
        "    daily_limit: 400\n"
        "submission:\n"
        "  cost: 900\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("REWARD_CONFIG_FILE", str(path))
    monkeypatch.setenv("REWARD_VIDEO_DAILY_LIMIT", "500")

    settings = load_file_settings()
    rewards = load_rewards_config(settings)

    assert rewards.video.amount == 20
    assert rewards.video.daily_limit == 500
    assert rewards.gift.amount == 10
    assert load_submission_config(settings).cost == 900


def test_missing_explicit_file_fails(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("REWARD_CONFIG_FILE", str(tmp_path / "nope.yaml"))

    with pytest.raises(RuntimeError):
        load_file_settings()


@pytest.mark.parametrize("raw", ["abc", "0"])
def test_invalid_amount_fails_fast(monkeypatch, raw) -> None:
    monkeypatch.setenv("REWARD_GIFT_AMOUNT", raw)

    with pytest.raises(RuntimeError):
        load_rewards_config({})


def test_auth_config_reads_env(monkeypatch) -> None:
    monkeypatch.setenv("SESSION_COOKIE_SECURE", "yes")
    monkeypatch.setenv("ADMIN_NAME", " root ")
    monkeypatch.setenv("ADMIN_PASSWORD", "pw")

    auth = load_auth_config()

    assert auth.cookie_secure is True
    assert auth.admin_name == "root"
    assert auth.admin_password == "pw"
    assert auth.session_ttl_hours == 720

    monkeypatch.setenv("SESSION_COOKIE_SECURE", "maybe")
    with pytest.raises(RuntimeError):
        load_auth_config()
