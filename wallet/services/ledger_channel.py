# wallet/services/ledger_channel.py
from typing import Optional, Protocol, Any, Sequence

from pydantic import ValidationError

from infra.rpc_client import HttpError, JsonRpcError
from utils.logger import logger as default_logger
from wallet.enums import Commitment
from wallet.errors import ChannelError, RpcError
from wallet.models import AccountIdentity, AssetDescriptor, AssetBalance
from wallet.schemas import BalanceResult, TokenAccountsResult


class LedgerQueryChannel(Protocol):
    async def get_native_balance(self, identity: AccountIdentity) -> int: ...
    async def get_asset_holder_record(self, identity: AccountIdentity,
                                      asset: AssetDescriptor) -> Optional[AssetBalance]: ...


class RpcLedgerChannel:
    """
    Balance lookups over Solana JSON-RPC.

    Transport and node errors surface as ChannelError; an owner without a
    token account for the mint is a normal, successful None.
    """
    def __init__(self, rpc, endpoints=None, *,
                 commitment: Commitment = Commitment.CONFIRMED,
                 logger=None) -> None:
        self._rpc = rpc
        self._ep = endpoints
        self._commitment = commitment
        self.log = logger or default_logger

    def _method(self, name: str, default: str) -> str:
        return getattr(self._ep, name, None) or \
               (self._ep.get(name) if isinstance(self._ep, dict) else None) or \
               default

    async def _call(self, method: str, params: Sequence[Any]) -> Any:
        try:
            return await self._rpc.call(method, params)
        except JsonRpcError as e:
            raise RpcError(e.code, e.msg, method=method) from e
        except HttpError as e:
            raise ChannelError(str(e), method=method, status=e.status) from e

    async def get_native_balance(self, identity: AccountIdentity) -> int:
        """Lamports held by the account; unknown accounts report 0."""
        method = self._method("get_balance", "getBalance")
        result = await self._call(method, [identity.address, {"commitment": self._commitment.value}])
        try:
            return BalanceResult.model_validate(result).value
        except ValidationError as e:
            raise ChannelError(f"malformed {method} result", method=method) from e

    async def get_asset_holder_record(self, identity: AccountIdentity,
                                      asset: AssetDescriptor) -> Optional[AssetBalance]:
        """
        First token account the owner holds for the mint, or None when the
        owner has never held it.
        """
        method = self._method("get_token_accounts_by_owner", "getTokenAccountsByOwner")
        params = [
            identity.address,
            {"mint": asset.mint},
            {"encoding": "jsonParsed", "commitment": self._commitment.value},
        ]
        result = await self._call(method, params)
        try:
            parsed = TokenAccountsResult.model_validate(result)
            if not parsed.value:
                self.log.debug(f"no holder record owner={identity.short()} mint={asset.mint}")
                return None
            first = parsed.value[0]
            ta = first.account.data.parsed.info.tokenAmount
            return AssetBalance(
                amount=int(ta.amount),
                decimals=ta.decimals,
                ui_amount=ta.display_amount(),
                token_account=first.pubkey,
            )
        except (ValidationError, ValueError) as e:
            raise ChannelError(f"malformed {method} result", method=method) from e
