import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import logging
import yaml
import pytest
import pytest_asyncio
from infra.rpc_client import RpcClient

DEVNET = "https://api.devnet.solana.com"


@pytest.fixture
def test_cfg():
    def load_cfg():
        with open(Path(__file__).resolve().parents[1] / "config.yaml", "r", encoding="utf-8") as f:
            return yaml.safe_load(f)
    return load_cfg()


@pytest_asyncio.fixture
async def rpc_client(test_cfg):
    """
    RpcClient bound to devnet inside an async context; session closed afterwards.
    """
    logger = logging.getLogger("RpcClientTest")
    async with RpcClient(test_cfg, logger=logger, rpc_url=DEVNET) as client:
        yield client
