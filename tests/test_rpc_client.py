import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import json
import asyncio
import pytest
from aioresponses import aioresponses, CallbackResult

from infra.rpc_client import RpcClient, JsonRpcError, HttpError

DEVNET = "https://api.devnet.solana.com"

def rpc_result(result, id_=1):
    return {"jsonrpc": "2.0", "result": result, "id": id_}

def rpc_error(code, message, id_=1):
    return {"jsonrpc": "2.0", "error": {"code": code, "message": message}, "id": id_}

@pytest.mark.asyncio
async def test_request_envelope(rpc_client: RpcClient):
    seen = {}

    def _assert_body(url, **kwargs):
        body = json.loads(kwargs["data"])
        seen.update(body)
        assert kwargs["headers"]["Content-Type"] == "application/json"
        return CallbackResult(status=200, payload=rpc_result({"context": {"slot": 7}, "value": 42}, body["id"]))

    with aioresponses() as m:
        m.post(DEVNET, callback=_assert_body)
        result = await rpc_client.call("getBalance", ["9xQeWvG816bUx9EPjHmaT23yvVM2ZWbrrpZb9PusVFin"])

    assert result["value"] == 42
    assert seen["jsonrpc"] == "2.0"
    assert seen["method"] == "getBalance"
    assert seen["params"] == ["9xQeWvG816bUx9EPjHmaT23yvVM2ZWbrrpZb9PusVFin"]
    assert isinstance(seen["id"], int)

@pytest.mark.asyncio
async def test_request_ids_increase(rpc_client: RpcClient):
    ids = []

    def _collect(url, **kwargs):
        body = json.loads(kwargs["data"])
        ids.append(body["id"])
        return CallbackResult(status=200, payload=rpc_result("ok", body["id"]))

    with aioresponses() as m:
        m.post(DEVNET, callback=_collect, repeat=True)
        await rpc_client.call("getHealth")
        await rpc_client.call("getHealth")

    assert ids[1] > ids[0]

@pytest.mark.asyncio
async def test_retry_on_429_and_5xx(rpc_client: RpcClient, monkeypatch):
    """
    429 then 500, third attempt succeeds. Backoff sleep replaced by a no-op.
    """
    monkeypatch.setattr(rpc_client, "_sleep_backoff", lambda attempt: asyncio.sleep(0))

    calls = {"n": 0}
    def _flaky(url, **kwargs):
        calls["n"] += 1
        if calls["n"] == 1:
            return CallbackResult(status=429, body="Too many requests")
        if calls["n"] == 2:
            return CallbackResult(status=500, body="server error")
        return CallbackResult(status=200, payload=rpc_result({"context": {"slot": 1}, "value": 5}))

    with aioresponses() as m:
        m.post(DEVNET, callback=_flaky, repeat=True)
        result = await rpc_client.call("getBalance", ["x"])

    assert result["value"] == 5
    assert calls["n"] == 3

@pytest.mark.asyncio
async def test_retryable_node_error_is_retried(rpc_client: RpcClient, monkeypatch):
    monkeypatch.setattr(rpc_client, "_sleep_backoff", lambda attempt: asyncio.sleep(0))

    with aioresponses() as m:
        m.post(DEVNET, payload=rpc_error(-32005, "Node is behind by 42 slots"))
        m.post(DEVNET, payload=rpc_result("ok"))
        assert await rpc_client.call("getHealth") == "ok"

@pytest.mark.asyncio
async def test_rpc_error_no_retry(rpc_client: RpcClient):
    """
    Invalid params are a caller error: raised immediately as JsonRpcError.
    """
    calls = {"n": 0}
    def _bad(url, **kwargs):
        calls["n"] += 1
        return CallbackResult(status=200, payload=rpc_error(-32602, "Invalid param: WrongSize"))

    with aioresponses() as m:
        m.post(DEVNET, callback=_bad, repeat=True)
        with pytest.raises(JsonRpcError) as ei:
            await rpc_client.call("getBalance", ["short"])

    assert ei.value.code == -32602
    assert ei.value.method == "getBalance"
    assert calls["n"] == 1

@pytest.mark.asyncio
async def test_http_error_status_raises(rpc_client: RpcClient, monkeypatch):
    monkeypatch.setattr(rpc_client, "_sleep_backoff", lambda attempt: asyncio.sleep(0))

    with aioresponses() as m:
        m.post(DEVNET, status=503, body="svc unavailable", repeat=True)
        with pytest.raises(HttpError) as ei:
            await rpc_client.call("getHealth")
    assert ei.value.status == 503

@pytest.mark.asyncio
async def test_client_error_status_not_retried(rpc_client: RpcClient):
    with aioresponses() as m:
        m.post(DEVNET, status=403, body="forbidden")
        with pytest.raises(HttpError) as ei:
            await rpc_client.call("getHealth")
    assert ei.value.status == 403

@pytest.mark.asyncio
async def test_invalid_json_raises_http_error(rpc_client: RpcClient):
    with aioresponses() as m:
        m.post(DEVNET, status=200, body="<html>gateway</html>")
        with pytest.raises(HttpError):
            await rpc_client.call("getHealth")

@pytest.mark.asyncio
async def test_timeout_names_the_error(rpc_client: RpcClient, monkeypatch):
    """asyncio.TimeoutError has an empty str(); the HttpError must still say what happened."""
    monkeypatch.setattr(rpc_client, "_sleep_backoff", lambda attempt: asyncio.sleep(0))

    with aioresponses() as m:
        m.post(DEVNET, exception=asyncio.TimeoutError(), repeat=True)
        with pytest.raises(HttpError) as ei:
            await rpc_client.call("getBalance", ["9xQeWvG816bUx9EPjHmaT23yvVM2ZWbrrpZb9PusVFin"])

    assert ei.value.status == 599
    assert "TimeoutError" in str(ei.value)

def test_rpc_url_required():
    with pytest.raises(ValueError):
        RpcClient({"solana": {"rpc_url": ""}})
