import json
from datetime import datetime, timezone

from yda_portal.api.envelope import error_envelope, locale_meta, success_envelope
from yda_portal.core.correlation import bind_request_context, clear_request_context
from yda_portal.domain.localized import Locale


def _body(response) -> dict:
    return json.loads(response.body.decode("utf-8"))


def test_success_envelope_shape() -> None:
    response = success_envelope({"value": 1})
    body = _body(response)
    assert body["ok"] is True
    assert body["data"] == {"value": 1}
    assert body["error"] is None
    assert isinstance(body.get("meta"), dict)


def test_success_envelope_encodes_datetimes() -> None:
    when = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
    body = _body(success_envelope({"at": when}))
    assert body["data"]["at"].startswith("2026-03-01T12:00:00")


def test_error_envelope_shape() -> None:
    response = error_envelope(code="bad_request", message="Invalid", status_code=400, details={"field": "x"})
    body = _body(response)
    assert response.status_code == 400
    assert body["ok"] is False
    assert body["data"] is None
    assert body["error"]["code"] == "bad_request"
    assert body["error"]["message"] == "Invalid"
    assert body["error"]["details"] == {"field": "x"}


def test_meta_carries_request_context() -> None:
    bind_request_context("req-1", "corr-1")
    try:
        body = _body(success_envelope([]))
    finally:
        clear_request_context()
    assert body["meta"]["request_id"] == "req-1"
    assert body["meta"]["correlation_id"] == "corr-1"


def test_locale_meta_direction() -> None:
    assert locale_meta(Locale.AR) == {"locale": "ar", "direction": "rtl", "alternate": "en"}
    assert locale_meta(Locale.EN, {"total": 2})["direction"] == "ltr"
    assert locale_meta(Locale.EN, {"total": 2})["total"] == 2
