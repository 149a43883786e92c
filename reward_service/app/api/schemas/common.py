"""공통 스키마 정의."""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


T = TypeVar("T")


class CamelModel(BaseModel):
    """JSON 바디는 camelCase 키를 사용한다. 파이썬 필드명으로도 생성할 수 있다."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MessageResponse(CamelModel):
    message: str


class PaginatedResponse(CamelModel, Generic[T]):
    """페이지네이션 응답 공통 스키마."""

    items: list[T]
    total: int
    page: int
    page_size: int
