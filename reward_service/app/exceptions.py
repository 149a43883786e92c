from __future__ import annotations


class RewardServiceError(Exception):
    """Base exception for all reward-service domain errors."""

    code = "error"
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class Unauthorized(RewardServiceError):
    """No session, invalid session, or bad credentials."""

    code = "unauthorized"
    status_code = 401


class Forbidden(Unauthorized):
    """Authenticated, but not an administrator on an admin-only operation."""

    code = "forbidden"
    status_code = 403


class ValidationError(RewardServiceError):
    """Malformed input (bad URL, missing entity id, short password...)."""

    code = "validation_error"
    status_code = 400


class AlreadyClaimed(RewardServiceError):
    """Per-entity or per-window dedupe rejected the claim."""

    code = "already_claimed"
    status_code = 400


class LimitReached(RewardServiceError):
    """Daily ceiling for the reward type is exhausted."""

    code = "limit_reached"
    status_code = 400


class InsufficientFunds(RewardServiceError):
    code = "insufficient_funds"
    status_code = 402


class NotFound(RewardServiceError):
    code = "not_found"
    status_code = 404


class Conflict(RewardServiceError):
    """Unique constraint violation such as a name already in use."""

    code = "conflict"
    status_code = 409


class InvalidTransition(Conflict):
    """Moderation transition out of a terminal state."""

    code = "invalid_transition"
