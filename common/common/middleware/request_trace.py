import json
import logging
import time
import uuid
from dataclasses import dataclass
from urllib.parse import parse_qsl

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response


REQUEST_ID_HEADER = "X-Request-Id"
SPAN_ID_HEADER = "X-Span-Id"

# 로그에서 제외할 경로 (헬스 체크 등)
IGNORED_LOG_PATHS: frozenset[str] = frozenset({"/health", "/health/ready"})

# 평문으로 남기면 안 되는 바디 필드 (소문자 비교)
SENSITIVE_BODY_KEYS: frozenset[str] = frozenset(
    {"password", "currentpassword", "newpassword"}
)

BODY_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})
MAX_BODY_LOG_LENGTH = 1024
REDACTED = "***"


def redact_body(text: str) -> str:
    """JSON 바디의 민감 필드를 마스킹한다. JSON 객체가 아니면 그대로 반환한다."""

    try:
        payload = json.loads(text)
    except ValueError:
        return text
    if not isinstance(payload, dict):
        return text

    return json.dumps(
        {
            key: REDACTED if key.lower() in SENSITIVE_BODY_KEYS else value
            for key, value in payload.items()
        },
        ensure_ascii=False,
    )


@dataclass(slots=True)
class TraceContext:
    request_id: str
    span_id: str
    started: float
    body: str | None = None

    @classmethod
    def from_request(cls, request: Request) -> "TraceContext":
        return cls(
            request_id=request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex,
            span_id=request.headers.get(SPAN_ID_HEADER) or "0",
            started=time.monotonic(),
        )

    def elapsed(self) -> str:
        return f"{(time.monotonic() - self.started) * 1000:.3f}ms"


class RequestTraceMiddleware(BaseHTTPMiddleware):
    """요청 단위 추적 ID 부여 및 요청 로그 미들웨어.

    - X-Request-Id / X-Span-Id 를 이어받거나 새로 만들고 응답 헤더에 되돌려 준다.
    - 요청이 끝나면 한 줄 로그를 남긴다. 4xx 는 WARNING, 5xx 는 ERROR 레벨이다.
    - 세션 검증 후 request.state.user_id 가 채워져 있으면 로그에 함께 싣는다.
    - 비밀번호 필드는 마스킹되어 기록된다.
    """

    def __init__(self, app, logger: logging.Logger | None = None) -> None:  # type: ignore[override]
        super().__init__(app)
        self._logger = logger or logging.getLogger("request_trace")

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        trace = TraceContext.from_request(request)
        request.state.request_id = trace.request_id
        request.state.span_id = trace.span_id

        if request.method in BODY_METHODS:
            trace.body = await self._read_body(request)

        try:
            response = await call_next(request)
        except Exception:
            if self._should_log(request):
                self._logger.exception(
                    "request failed", extra=self._extra(request, trace)
                )
            raise

        response.headers.setdefault(REQUEST_ID_HEADER, trace.request_id)
        response.headers.setdefault(SPAN_ID_HEADER, trace.span_id)

        if self._should_log(request):
            self._logger.log(
                self._level_for(response.status_code),
                "completed request",
                extra=self._extra(request, trace, status=response.status_code),
            )
        return response

    @staticmethod
    async def _read_body(request: Request) -> str | None:
        try:
            raw = await request.body()
        except Exception:
            return None
        if not raw:
            return None
        text = redact_body(raw.decode("utf-8", errors="replace"))
        return text[:MAX_BODY_LOG_LENGTH]

    @staticmethod
    def _should_log(request: Request) -> bool:
        return request.url.path not in IGNORED_LOG_PATHS

    @staticmethod
    def _level_for(status: int) -> int:
        if status >= 500:
            return logging.ERROR
        if status >= 400:
            return logging.WARNING
        return logging.INFO

    @staticmethod
    def _extra(
        request: Request, trace: TraceContext, status: int | None = None
    ) -> dict[str, object]:
        extra: dict[str, object] = {
            "request_id": trace.request_id,
            "span_id": trace.span_id,
            "method": request.method,
            "path": request.url.path,
            "duration": trace.elapsed(),
        }
        query = dict(parse_qsl(request.url.query, keep_blank_values=True))
        if query:
            extra["query_params"] = query
        if trace.body:
            extra["body"] = trace.body
        user_id = getattr(request.state, "user_id", None)
        if user_id:
            extra["user_id"] = user_id
        if status is not None:
            extra["status"] = status
        return extra
