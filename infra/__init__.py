from __future__ import annotations

import logging
from typing import Protocol, Any, Optional, Dict, Mapping, Sequence

from infra.rpc_client import RpcClient

# ========== 1) Port: services depend on this, not on the concrete RpcClient ==========
class RpcPort(Protocol):
    async def request(self, method: str, params: Optional[Sequence[Any]] = None, **kwargs) -> Dict[str, Any]: ...
    async def call(self, method: str, params: Optional[Sequence[Any]] = None) -> Any: ...


# ========== 2) Container: start / shutdown ==========
class RpcContainer:
    """
    Owns the RpcClient and its shutdown.
    - The composition root holds it.
    - Services receive container.rpc.
    """
    def __init__(self, rpc: RpcClient) -> None:
        self.rpc = rpc

    @classmethod
    async def start(cls,
                    cfg: Mapping[str, Any],
                    logger: Optional[logging.Logger] = None,
                    *,
                    rpc_url: Optional[str] = None,
                    ) -> "RpcContainer":
        return cls(RpcClient(cfg, logger=logger, rpc_url=rpc_url))

    async def stop(self) -> None:
        await self.rpc.close()
