from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class Subscription(BaseModel):
    """채널 구독 보상을 한 번 받았다는 표시. (user_id, channel_id) 는 유니크하다."""

    id: str | None = None
    user_id: str
    channel_id: str
    created_at: datetime
