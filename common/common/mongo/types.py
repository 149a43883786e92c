from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import BaseModel, ConfigDict, Field
from pydantic.functional_validators import BeforeValidator
from typing_extensions import Annotated

from common.types.datetime import ensure_utc


def ensure_utc_datetime(value: Any) -> Any:
    """Mongo 에서 읽은 datetime 값을 UTC 기준으로 정규화한다.

    pymongo 는 기본적으로 tz-naive UTC datetime 을 반환하므로 tzinfo=UTC 를 부여한다.
    """

    if isinstance(value, datetime):
        return ensure_utc(value)
    return value


def to_object_id(value: Any) -> ObjectId:
    """여러 타입(str, ObjectId 등)을 MongoDB ObjectId 로 변환한다."""

    if isinstance(value, ObjectId):
        return value
    if value is None:
        raise TypeError("ObjectId cannot be None")
    return ObjectId(str(value))


def parse_object_id(value: str) -> ObjectId | None:
    """외부 입력 문자열을 ObjectId 로 변환한다. 형식이 잘못되면 None."""

    try:
        return to_object_id(value)
    except (InvalidId, TypeError):
        return None


def from_object_id(value: Optional[ObjectId]) -> Optional[str]:
    if value is None:
        return None
    return str(value)


PyObjectId = Annotated[ObjectId, BeforeValidator(to_object_id)]
MongoDateTime = Annotated[datetime, BeforeValidator(ensure_utc_datetime)]


class BaseDocument(BaseModel):
    """MongoDB 도큐먼트용 공통 베이스 모델.

    - ObjectId 같은 임의 타입을 허용
    - alias 기반 직렬화(by_alias)를 사용할 수 있도록 한다.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, populate_by_name=True)

    id: Optional[PyObjectId] = Field(default=None, alias="_id")
    created_at: MongoDateTime
    updated_at: MongoDateTime

    def to_mongo_record(self) -> dict[str, Any]:
        """MongoDB 저장에 사용할 표준 레코드(dict) 직렬화.

        - by_alias=True 로 id -> _id 등의 Mongo 필드 이름과 일치시킨다.
        - exclude_none=True 로 _id=None 같은 필드를 제거해 Mongo가 ObjectId 를 생성하도록 한다.
        """

        return self.model_dump(by_alias=True, exclude_none=True)


def build_document_data_from_domain(
    domain_model: BaseModel, *, exclude: set[str] | None = None
) -> dict[str, Any]:
    """도메인 Pydantic 모델을 Mongo 도큐먼트 dict 로 변환하는 공통 유틸.

    - 도메인 모델의 문자열 id 는 ObjectId 로 복원되어 `_id` 에 들어간다.
    - created_at / updated_at 은 도메인 모델에 모두 존재한다는 전제를 따른다.
    """

    data = domain_model.model_dump(by_alias=True, exclude=exclude)
    raw_id = data.pop("id", None)
    if raw_id is not None:
        data["_id"] = to_object_id(raw_id)
    return data
