from __future__ import annotations

import secrets

from werkzeug.security import check_password_hash, generate_password_hash


SESSION_ID_BYTES = 32


def hash_password(password: str) -> str:
    """비밀번호를 werkzeug 포맷(`scrypt:...$salt$hash`)으로 해시한다."""
    return generate_password_hash(password)


def verify_password(password: str, encoded: str) -> bool:
    # 형식이 깨진 해시(예: 마이그레이션 전 레코드)는 불일치로 본다.
    try:
        return check_password_hash(encoded, password)
    except ValueError:
        return False


def new_session_id() -> str:
    return secrets.token_urlsafe(SESSION_ID_BYTES)
