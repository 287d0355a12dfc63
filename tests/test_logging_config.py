import json
import logging
import sys
from shared.core import StructuredFormatter, SecurityFilter, set_request_context
from shared.core.logging_config import request_id_var

def _record(msg, *args, exc_info=None, **attrs):
    record = logging.LogRecord("storefront.test", logging.INFO, __file__, 10, msg, args, exc_info)
    for key, value in attrs.items():
        setattr(record, key, value)
    return record

def test_formatter_emits_json_with_custom_fields():
    record = _record("Order %s placed", "abc", extra_fields={"items": 2})

    payload = json.loads(StructuredFormatter().format(record))

    assert payload["message"] == "Order abc placed"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "storefront.test"
    assert payload["custom"] == {"items": 2}
    assert payload["location"]["line"] == 10

def test_formatter_includes_request_context():
    token = request_id_var.set(None)
    try:
        set_request_context(request_id="req-42")
        payload = json.loads(StructuredFormatter().format(_record("hello")))
    finally:
        request_id_var.reset(token)

    assert payload["trace"]["request_id"] == "req-42"

def test_formatter_renders_exceptions():
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        record = _record("failed", exc_info=sys.exc_info())

    payload = json.loads(StructuredFormatter().format(record))

    assert payload["error"]["type"] == "RuntimeError"
    assert payload["error"]["message"] == "boom"

def test_security_filter_masks_credentials():
    record = _record("login attempt password=hunter2 token: abc.def user=asha")

    assert SecurityFilter().filter(record) is True
    assert record.getMessage() == "login attempt password=***REDACTED*** token: ***REDACTED*** user=asha"

def test_security_filter_leaves_plain_messages_alone():
    record = _record("Order %s placed", "abc")

    SecurityFilter().filter(record)

    assert record.getMessage() == "Order abc placed"
    assert record.args == ("abc",)

def test_request_id_is_echoed(client):
    resp = client.get("/", headers={"X-Request-ID": "trace-me"})
    assert resp.status_code == 200
    assert resp.headers["X-Request-ID"] == "trace-me"

def test_request_id_is_generated(client):
    resp = client.get("/")
    assert resp.json()["service"] == "storefront-api"
    assert resp.headers["X-Request-ID"]
