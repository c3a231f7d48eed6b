# wallet/services/balance_sync.py
import asyncio
from dataclasses import dataclass
from typing import Callable, Optional, Set

from utils.logger import logger as default_logger
from utils.time import utc_ms
from wallet.config import WalletSettings
from wallet.errors import ChannelError, StaleResult
from wallet.event_bus import EventBus, TOPIC_SYNC_STATE
from wallet.models import (
    AccountIdentity, AssetDescriptor, AssetBalance, NativeBalance, BalanceSnapshot,
    SyncState, NoAccount, Loading, Ready, Failed, NO_ACCOUNT, LAMPORTS_PER_SOL,
)
from wallet.services.ledger_channel import LedgerQueryChannel


@dataclass
class _Partials:
    """Sibling results of one generation, filled in as they arrive."""
    generation: int
    identity: AccountIdentity
    native: Optional[NativeBalance] = None
    asset: Optional[AssetBalance] = None
    asset_done: bool = False


class BalanceSynchronizer:
    """
    Keeps a balance snapshot in step with the selected account.

    Each identity transition starts a new generation that queries the
    native balance and the asset holder record concurrently. Results are
    published only when both siblings of the *current* generation have
    resolved; anything tagged with an older generation is dropped on
    arrival. In-flight queries are never cancelled.

    All entry points must be called from the event loop thread.
    """

    def __init__(self,
                 channel: LedgerQueryChannel,
                 asset: AssetDescriptor,
                 *,
                 native_divisor: int = LAMPORTS_PER_SOL,
                 event_bus: Optional[EventBus] = None,
                 logger=None) -> None:
        self._channel = channel
        self._asset = asset
        self._divisor = native_divisor
        self._bus = event_bus or EventBus()
        self.log = logger or default_logger

        self._generation = 0
        self._tracked: Optional[AccountIdentity] = None
        self._partials: Optional[_Partials] = None
        self._state: SyncState = NO_ACCOUNT
        self._tasks: Set[asyncio.Task] = set()
        self._detach: Optional[Callable[[], None]] = None

    @classmethod
    def from_settings(cls, channel: LedgerQueryChannel, settings: WalletSettings, **kwargs) -> "BalanceSynchronizer":
        return cls(channel, settings.asset, native_divisor=settings.native_divisor, **kwargs)

    # ---- read side ----------------------------------------------------------------
    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def identity(self) -> Optional[AccountIdentity]:
        return self._tracked

    @property
    def asset(self) -> AssetDescriptor:
        return self._asset

    def subscribe(self, handler: Callable[[SyncState], None]) -> Callable[[], None]:
        """Call handler with every new SyncState."""
        return self._bus.subscribe(TOPIC_SYNC_STATE, handler)

    def attach(self, provider) -> Callable[[], None]:
        """Follow an identity provider; syncs its current identity right away."""
        self._detach = provider.subscribe(self.on_identity_changed)
        if provider.current is not None:
            self.on_identity_changed(provider.current)
        return self._detach

    # ---- write side ---------------------------------------------------------------
    def on_identity_changed(self, identity: Optional[AccountIdentity]) -> None:
        if identity is None:
            if self._tracked is None and isinstance(self._state, NoAccount):
                return
            # invalidates whatever is still in flight
            self._generation += 1
            self._tracked = None
            self._partials = None
            self._set_state(NO_ACCOUNT)
            return

        if identity == self._tracked and not isinstance(self._state, Failed):
            self.log.debug(f"identity unchanged ({identity.short()}), skip re-sync")
            return

        self._start_generation(identity)

    def retry(self) -> bool:
        """Re-query the tracked identity under a fresh generation. No backoff."""
        if self._tracked is None:
            return False
        self._start_generation(self._tracked)
        return True

    def on_native_resolved(self, generation: int, lamports: int) -> None:
        try:
            p = self._live_partials(generation)
        except StaleResult as e:
            self.log.debug(f"discard native balance gen={e.generation} current={e.current}")
            return
        p.native = NativeBalance(lamports, self._divisor)
        self._maybe_publish(p)

    def on_asset_resolved(self, generation: int, record: Optional[AssetBalance]) -> None:
        try:
            p = self._live_partials(generation)
        except StaleResult as e:
            self.log.debug(f"discard asset record gen={e.generation} current={e.current}")
            return
        # None means no holder record; still counts as resolved
        p.asset = record
        p.asset_done = True
        self._maybe_publish(p)

    def on_query_failed(self, generation: int, identity: AccountIdentity, error: ChannelError) -> None:
        try:
            self._live_partials(generation)
        except StaleResult as e:
            self.log.debug(f"discard failure gen={e.generation} current={e.current}: {error}")
            return
        self._partials = None
        self.log.warning(f"Balance sync failed for {identity.short()} gen={generation}: {error}")
        self._set_state(Failed(identity=identity, reason=str(error), generation=generation, error=error))

    # ---- lifecycle ----------------------------------------------------------------
    async def drain(self) -> None:
        """Wait until every in-flight generation (stale ones included) has finished."""
        while True:
            pending = [t for t in self._tasks if not t.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    async def aclose(self) -> None:
        if self._detach is not None:
            self._detach()
            self._detach = None
        await self.drain()

    # ---- internals ----------------------------------------------------------------
    def _start_generation(self, identity: AccountIdentity) -> None:
        # raises before any state changes when called off the loop
        loop = asyncio.get_running_loop()
        self._generation += 1
        g = self._generation
        self._tracked = identity
        self._partials = _Partials(generation=g, identity=identity)
        self._set_state(Loading(identity=identity, generation=g))

        task = loop.create_task(self._sync(g, identity), name=f"balance-sync-{g}")
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)

    async def _sync(self, generation: int, identity: AccountIdentity) -> None:
        try:
            await asyncio.gather(
                self._fetch_native(generation, identity),
                self._fetch_asset(generation, identity),
            )
        except ChannelError as e:
            self.on_query_failed(generation, identity, e)

    async def _fetch_native(self, generation: int, identity: AccountIdentity) -> None:
        lamports = await self._channel.get_native_balance(identity)
        self.on_native_resolved(generation, lamports)

    async def _fetch_asset(self, generation: int, identity: AccountIdentity) -> None:
        record = await self._channel.get_asset_holder_record(identity, self._asset)
        self.on_asset_resolved(generation, record)

    def _live_partials(self, generation: int) -> _Partials:
        p = self._partials
        if generation != self._generation or p is None or p.generation != generation:
            raise StaleResult(generation, self._generation)
        return p

    def _maybe_publish(self, p: _Partials) -> None:
        if p.native is None or not p.asset_done:
            return
        self._partials = None
        snapshot = BalanceSnapshot(
            identity=p.identity,
            native=p.native,
            asset=p.asset,
            generation=p.generation,
            ts=utc_ms(),
        )
        self.log.info(
            f"Balances ready {p.identity.short()} gen={p.generation} "
            f"native={snapshot.native.amount} asset={'none' if p.asset is None else p.asset.ui_amount}"
        )
        self._set_state(Ready(snapshot=snapshot))

    def _set_state(self, state: SyncState) -> None:
        self._state = state
        self._bus.publish(TOPIC_SYNC_STATE, state)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self.log.error(f"{task.get_name()} crashed: {exc!r}")
