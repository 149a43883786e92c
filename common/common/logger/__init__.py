import json
import logging
import os
import sys


DEFAULT_LOGGER_NAME = "watch-earn"

# extra 로 넘어오면 JSON 로그에 그대로 실리는 필드
# 앞쪽은 요청 추적 미들웨어, 뒤쪽은 보상/검수 서비스가 채운다.
EXTRA_KEYS = (
    "request_id",
    "span_id",
    "method",
    "path",
    "query_params",
    "status",
    "body",
    "duration",
    "user_id",
    "reward_type",
    "entity_id",
    "video_id",
    "code",
)


def setup_logger(
    name: str = DEFAULT_LOGGER_NAME, level: str | None = None
) -> logging.Logger:
    """애플리케이션 전역 로거를 설정하고 반환한다.

    Args:
        name: 로거 이름 (기본값: watch-earn)
        level: 로그 레벨 (기본값: None -> 환경변수 LOG_LEVEL 또는 INFO 사용)

    Returns:
        설정된 logging.Logger 인스턴스
    """
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO")

    # 알 수 없는 레벨 문자열은 INFO 로 취급
    log_level = getattr(logging, level.upper(), logging.INFO)

    service_name = os.getenv("SERVICE_NAME", name)
    logger = logging.getLogger(service_name)
    logger.setLevel(log_level)

    # 이미 핸들러가 있다면 제거 (중복 출력 방지)
    if logger.handlers:
        logger.handlers.clear()

    # stdout 한 줄에 JSON 하나 (컨테이너 로그 수집기 기준)
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(JsonFormatter())

    logger.addHandler(handler)

    # 루트 로거에도 동일한 설정 적용 (라이브러리 로그 등도 제어하기 위함)
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        root_logger.addHandler(handler)
        root_logger.setLevel(log_level)

    return logger


class JsonFormatter(logging.Formatter):
    """구조화 로그 수집을 위한 간단한 JSON 포맷터.

    - datetime, level, logger, message 필드를 기본으로 포함한다.
    - 예외 정보가 있으면 exc_info 필드에 문자열로 추가한다.
    """

    def __init__(self) -> None:
        super().__init__(datefmt="%Y-%m-%dT%H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        log_record: dict[str, object] = {
            "datetime": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # EXTRA_KEYS 중 레코드에 실제로 붙어 온 값만 싣는다.
        for key in EXTRA_KEYS:
            if hasattr(record, key):
                log_record[key] = getattr(record, key)

        # service_name 은 레코드 값이 우선이고 없으면 SERVICE_NAME 환경변수
        service_name = getattr(record, "service_name", None) or os.getenv(
            "SERVICE_NAME"
        )
        if service_name:
            log_record["service_name"] = service_name

        if record.exc_info:
            log_record["exc_info"] = self.formatException(record.exc_info)

        # datetime 같은 extra 값은 문자열로 남긴다.
        return json.dumps(log_record, ensure_ascii=False, default=str)
