# wallet/services/endpoints.py
from dataclasses import dataclass
from typing import Union

from wallet.enums import Cluster

CLUSTER_URLS = {
    Cluster.DEVNET: "https://api.devnet.solana.com",
    Cluster.TESTNET: "https://api.testnet.solana.com",
    Cluster.MAINNET_BETA: "https://api.mainnet-beta.solana.com",
}

def cluster_api_url(cluster: Union[Cluster, str]) -> str:
    """Public RPC url of a Solana cluster."""
    try:
        key = cluster if isinstance(cluster, Cluster) else Cluster(str(cluster).lower())
    except ValueError as e:
        raise ValueError(f"unknown cluster: {cluster}") from e
    return CLUSTER_URLS[key]


@dataclass
class Endpoints:
    rpc_url: str
    cluster: Cluster

    # RPC method names used by the ledger channel
    get_balance: str = "getBalance"
    get_token_accounts_by_owner: str = "getTokenAccountsByOwner"


def make_endpoints_from_cfg(cfg: dict) -> Endpoints:
    try:
        sol_cfg = cfg["solana"]
        cluster = Cluster(str(sol_cfg.get("cluster", "devnet")).lower())
    except KeyError as e:
        raise ValueError(f"Invalid cfg missing key: {e}") from e
    except ValueError as e:
        raise ValueError(f"Invalid cfg: {e}") from e

    rpc_url = (sol_cfg.get("rpc_url") or "").strip() or cluster_api_url(cluster)
    return Endpoints(rpc_url=rpc_url.rstrip("/"), cluster=cluster)
