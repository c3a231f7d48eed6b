# app/run_balances.py
import asyncio, argparse, os, sys
from typing import Optional

from infra import RpcContainer
from utils import logger, load_cfg
from wallet.app.balance_view import BalanceView
from wallet.config import make_settings_from_cfg
from wallet.errors import WalletError
from wallet.models import Failed
from wallet.services.balance_sync import BalanceSynchronizer
from wallet.services.endpoints import make_endpoints_from_cfg
from wallet.services.identity_provider import WalletConnection
from wallet.services.ledger_channel import RpcLedgerChannel

def env_default(name: str, default=None):
    return os.getenv(name, default)

def build_parser():
    p = argparse.ArgumentParser("sltc-balances")
    p.add_argument("--config-path", default=env_default("SLTC_CONFIG", None))
    p.add_argument("--wallet",      default=None, help="base58 address, defaults to wallet.auto_connect")
    p.add_argument("--rpc-url",     default=env_default("SOLANA_RPC_URL", None))
    return p

async def run(cfg: dict, *, wallet: Optional[str] = None, rpc_url: Optional[str] = None) -> int:
    settings = make_settings_from_cfg(cfg)
    endpoints = make_endpoints_from_cfg(cfg)

    container = await RpcContainer.start(cfg, logger, rpc_url=rpc_url or endpoints.rpc_url)
    channel = RpcLedgerChannel(container.rpc, endpoints, commitment=settings.commitment, logger=logger)
    sync = BalanceSynchronizer.from_settings(channel, settings, logger=logger)
    view = BalanceView.from_settings(settings)
    conn = WalletConnection(logger=logger)

    try:
        sync.attach(conn)
        identity = wallet or settings.auto_connect
        if identity:
            conn.connect(identity)
        await sync.drain()
        print(view.format_lines(sync.state))
        return 1 if isinstance(sync.state, Failed) else 0
    finally:
        await sync.aclose()
        await container.stop()

def main(argv=None) -> None:
    args = build_parser().parse_args(argv)
    try:
        cfg = load_cfg(args.config_path)
        code = asyncio.run(run(cfg, wallet=args.wallet, rpc_url=args.rpc_url))
    except (WalletError, ValueError, FileNotFoundError) as e:
        logger.error(f"{e}")
        code = 2
    sys.exit(code)

if __name__ == "__main__":
    main()
