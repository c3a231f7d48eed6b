from __future__ import annotations

import aiohttp
import asyncio
import itertools
import json
import random
from typing import Any, Dict, Mapping, Optional, Sequence
import logging
from utils.logger import logger

JSON_SEPARATORS = (",", ":")

# Solana node-side conditions that clear up on their own
RETRYABLE_RPC_CODES = {-32004, -32005, -32014}


class HttpError(Exception):
    def __init__(self, status: int, message: str, payload: Optional[dict] = None):
        super().__init__(f"HTTP {status}: {message}")
        self.status = status
        self.payload = payload or {}


class JsonRpcError(Exception):
    def __init__(self, code: int, msg: str, method: str = "", data: Any = None):
        self.code = code
        self.msg = msg
        self.method = method
        self.data = data
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        base = f"RPC code={self.code}, msg={self.msg}"
        if self.method:
            base = f"{self.method}: {base}"
        return base


def _json_dumps_compact(obj: Any) -> str:
    return json.dumps(obj, separators=JSON_SEPARATORS, ensure_ascii=False)


class RpcClient:
    """
    Async JSON-RPC 2.0 client for a Solana cluster endpoint.

    One POST per call; 429/5xx, network errors and transient node errors
    are retried with exponential backoff and jitter.
    """
    def __init__(self,
                 cfg: Mapping[str, Any],
                 logger: Optional[logging.Logger] = None,
                 *,
                 rpc_url: Optional[str] = None,
                 timeout_ms: Optional[int] = None,
                 session: Optional[aiohttp.ClientSession] = None,
                 ) -> None:
        self.cfg = cfg
        self.log = logger or logging.getLogger("RpcClient")
        self.session = session
        self._owned_session = session is None

        url = rpc_url or (cfg.get("solana", {}) or {}).get("rpc_url")
        if not url:
            raise ValueError("RpcClient requires rpc_url (or solana.rpc_url in cfg)")
        self.rpc_url = url.rstrip("/")

        # timeouts & retries
        timeouts_cfg = cfg.get("timeouts", {}) or {}
        retries_cfg = cfg.get("retries", {}) or {}
        self.timeout_ms = int(timeout_ms or timeouts_cfg.get("rpc_ms", 5000))
        self.max_attempts = int(retries_cfg.get("rpc_max_attempts", 3))
        self.backoff_ms = int(retries_cfg.get("backoff_ms", 200))

        self._ids = itertools.count(1)

        if self.session is None:
            timeout = aiohttp.ClientTimeout(total=self.timeout_ms / 1000)
            self.session = aiohttp.ClientSession(timeout=timeout, raise_for_status=False, trust_env=True)

        self.log.debug(f"RpcClient init rpc_url={self.rpc_url} timeout_ms={self.timeout_ms}")

    # ---- async context manager ----------------------------------------------------
    async def __aenter__(self) -> "RpcClient":
        if self._owned_session and (self.session is None or self.session.closed):
            timeout = aiohttp.ClientTimeout(total=self.timeout_ms / 1000.0)
            self.session = aiohttp.ClientSession(timeout=timeout, raise_for_status=False, trust_env=True)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owned_session and self.session is not None and not self.session.closed:
            await self.session.close()

    async def request(
            self,
            method: str,
            params: Optional[Sequence[Any]] = None,
            *,
            timeout_ms: Optional[int] = None,
            retry: bool = True,
        ) -> Dict[str, Any]:
        """
        Send one JSON-RPC call and return the whole response envelope.
        - method: RPC method name, e.g. "getBalance"
        - params: positional params list
        - timeout_ms: overrides the session timeout
        - retry: enable backoff retries for retryable failures
        Raises HttpError for transport/status problems and JsonRpcError
        when the node answers with an error object.
        """
        body = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": list(params or []),
        }
        body_str = _json_dumps_compact(body)
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        extra: Dict[str, Any] = {}
        if timeout_ms:
            extra["timeout"] = aiohttp.ClientTimeout(total=timeout_ms / 1000.0)

        attempt = 0
        while True:
            attempt += 1
            try:
                async with self.session.post(
                    self.rpc_url,
                    data=body_str,
                    headers=headers,
                    **extra,
                ) as resp:
                    text = await resp.text()
                    status = resp.status
                    if status >= 400:
                        if retry and (status >= 500 or status == 429) and attempt < self.max_attempts:
                            await self._sleep_backoff(attempt)
                            continue
                        raise HttpError(status, text[:256])

                    try:
                        payload = json.loads(text) if text else {}
                    except json.JSONDecodeError:
                        raise HttpError(status, f"invalid json: {text[:256]}")

                    err = payload.get("error") if isinstance(payload, dict) else None
                    if err:
                        code = int(err.get("code", 0) or 0)
                        if retry and attempt < self.max_attempts and code in RETRYABLE_RPC_CODES:
                            await self._sleep_backoff(attempt)
                            continue
                        raise JsonRpcError(code, err.get("message", ""), method, err.get("data"))
                    if not isinstance(payload, dict) or "result" not in payload:
                        raise HttpError(status, f"missing result for {method}", payload if isinstance(payload, dict) else None)
                    return payload
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                if retry and attempt < self.max_attempts:
                    logger.warning(f"Network error: {e!r} when calling {method}, retrying...")
                    await self._sleep_backoff(attempt)
                    continue
                raise HttpError(599, f"Network error: {e!r}") from e
            except (JsonRpcError, HttpError):
                raise
            except Exception as e:
                raise HttpError(599, f"Unexpected error: {e}") from e

    async def _sleep_backoff(self, attempt: int) -> None:
        base = self.backoff_ms * (2 ** (attempt - 1))
        jitter = random.randint(0, self.backoff_ms)
        await asyncio.sleep((base + jitter) / 1000.0)

    # ---- convenience wrappers -------------------------------------------------------
    async def call(self, method: str, params: Optional[Sequence[Any]] = None) -> Any:
        """Return only the `result` member of the response."""
        payload = await self.request(method, params)
        return payload["result"]
