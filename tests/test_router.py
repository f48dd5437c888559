import pytest
from strudel_lint import config
from strudel_lint.router import route_request


@pytest.mark.asyncio
async def test_route_lint_action():
    request = {
        "request_id": "test-1",
        "action": "lint",
        "payload": {"code": 's("saw")\nx.lpf(5000)'}
    }
    response = await route_request(request)

    assert response["request_id"] == "test-1"
    assert response["type"] == "success"
    assert response["data"]["ok"] is False
    assert [d["severity"] for d in response["data"]["diagnostics"]] == ["error", "warning"]
    assert response["data"]["formatted"].startswith("[ERROR] Line 1: ")


@pytest.mark.asyncio
async def test_route_guard_action():
    request = {
        "request_id": "test-2",
        "action": "guard",
        "payload": {"code": 'eval("x")'}
    }
    response = await route_request(request)

    assert response["type"] == "success"
    assert response["data"]["allowed"] is False
    assert response["data"]["error"].startswith("Code validation failed:")


@pytest.mark.asyncio
async def test_route_validate_action():
    request = {
        "request_id": "test-3",
        "action": "validate",
        "payload": {"code": 'n("0 1").s("triangle")'}
    }
    response = await route_request(request)

    assert response["data"] == {"ok": True, "report": "No issues found."}


@pytest.mark.asyncio
async def test_route_publish_action():
    request = {
        "request_id": "test-4",
        "action": "publish",
        "payload": {"title": "Loop", "code": 's("bd hh")'}
    }
    response = await route_request(request)

    assert response["type"] == "success"
    assert response["data"]["accepted"] is True
    assert response["data"]["title"] == "Loop"


@pytest.mark.asyncio
async def test_route_unknown_action():
    request = {
        "request_id": "test-5",
        "action": "unknown_action",
        "payload": {}
    }
    response = await route_request(request)

    assert response["request_id"] == "test-5"
    assert response["type"] == "error"
    assert response["error"]["code"] == "UNKNOWN_ACTION"


@pytest.mark.asyncio
async def test_route_missing_code():
    request = {
        "request_id": "test-6",
        "action": "lint",
        "payload": {"code": 42}
    }
    response = await route_request(request)

    assert response["type"] == "error"
    assert response["error"]["code"] == "INVALID_PAYLOAD"


@pytest.mark.asyncio
async def test_route_source_too_large(monkeypatch):
    monkeypatch.setattr(config, "MAX_SOURCE_CHARS", 5)
    request = {
        "request_id": "test-7",
        "action": "lint",
        "payload": {"code": 's("bd sd")'}
    }
    response = await route_request(request)

    assert response["type"] == "error"
    assert response["error"]["code"] == "SOURCE_TOO_LARGE"


@pytest.mark.asyncio
async def test_route_invalid_payload():
    # Missing 'action' field or other validation errors
    request = {
        "request_id": "test-8",
        # action missing
        "payload": {}
    }
    response = await route_request(request)

    assert response["type"] == "error"
    assert response["error"]["code"] == "INTERNAL_ERROR"
