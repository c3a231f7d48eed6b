#
# Switch between two wallets quickly on devnet and watch the synchronizer
# drop the first wallet's late answers.
import asyncio, argparse

from infra import RpcContainer
from utils import logger, load_cfg
from wallet.app.balance_view import BalanceView
from wallet.config import make_settings_from_cfg
from wallet.services.balance_sync import BalanceSynchronizer
from wallet.services.endpoints import make_endpoints_from_cfg
from wallet.services.identity_provider import WalletConnection
from wallet.services.ledger_channel import RpcLedgerChannel

async def switch_accounts(cfg: dict, first: str, second: str):
    settings = make_settings_from_cfg(cfg)
    endpoints = make_endpoints_from_cfg(cfg)
    container = await RpcContainer.start(cfg, logger, rpc_url=endpoints.rpc_url)

    channel = RpcLedgerChannel(container.rpc, endpoints, commitment=settings.commitment, logger=logger)
    sync = BalanceSynchronizer.from_settings(channel, settings, logger=logger)
    view = BalanceView.from_settings(settings)
    sync.subscribe(lambda st: logger.info(f"state -> {st.status.value} gen={sync.generation}"))

    conn = WalletConnection(logger=logger)
    sync.attach(conn)
    try:
        conn.connect(first)
        conn.connect(second)      # before the first wallet's queries return
        conn.announce()           # redundant notification, no new queries
        await sync.drain()
        print(view.format_lines(sync.state))
    finally:
        await sync.aclose()
        await container.stop()

if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("first")
    parser.add_argument("second")
    parser.add_argument("--config-path", default=None)
    args = parser.parse_args()
    asyncio.run(switch_accounts(load_cfg(args.config_path), args.first, args.second))
