from __future__ import annotations

import json

from fastapi import FastAPI
from fastapi.testclient import TestClient

from common.middleware.request_trace import (
    REDACTED,
    REQUEST_ID_HEADER,
    RequestTraceMiddleware,
    redact_body,
)


def test_redact_body_masks_password_fields() -> None:
    text = json.dumps({"name": "alice", "password": "secret1", "newPassword": "x"})

    redacted = json.loads(redact_body(text))

    assert redacted == {"name": "alice", "password": REDACTED, "newPassword": REDACTED}


def test_redact_body_leaves_non_objects_alone() -> None:
    assert redact_body("not json") == "not json"
    assert redact_body("[1, 2]") == "[1, 2]"


def test_request_id_is_propagated() -> None:
    app = FastAPI()
    app.add_middleware(RequestTraceMiddleware)

    @app.get("/ping")
    def ping() -> dict[str, str]:
        return {"pong": "ok"}

    client = TestClient(app)

    echoed = client.get("/ping", headers={REQUEST_ID_HEADER: "req-123"})
    generated = client.get("/ping")

    assert echoed.headers[REQUEST_ID_HEADER] == "req-123"
    assert len(generated.headers[REQUEST_ID_HEADER]) == 32
