# wallet/services/identity_provider.py
from typing import Callable, Optional, Protocol, Union

from utils.logger import logger as default_logger
from wallet.event_bus import EventBus, TOPIC_IDENTITY
from wallet.models import AccountIdentity

IdentityCallback = Callable[[Optional[AccountIdentity]], None]


class IdentityProvider(Protocol):
    @property
    def current(self) -> Optional[AccountIdentity]: ...

    def subscribe(self, callback: IdentityCallback) -> Callable[[], None]: ...


class WalletConnection:
    """
    In-process identity provider standing in for a wallet adapter.

    Every call to connect()/disconnect()/announce() notifies subscribers,
    even when the identity did not change; consumers deduplicate.
    """
    def __init__(self, event_bus: Optional[EventBus] = None, logger=None) -> None:
        self._bus = event_bus or EventBus()
        self._current: Optional[AccountIdentity] = None
        self.log = logger or default_logger

    @property
    def current(self) -> Optional[AccountIdentity]:
        return self._current

    @property
    def connected(self) -> bool:
        return self._current is not None

    def subscribe(self, callback: IdentityCallback) -> Callable[[], None]:
        return self._bus.subscribe(TOPIC_IDENTITY, callback)

    def connect(self, identity: Union[AccountIdentity, str]) -> AccountIdentity:
        ident = AccountIdentity.parse(identity)
        self._current = ident
        self.log.info(f"Wallet connected: {ident.short()}")
        self._bus.publish(TOPIC_IDENTITY, ident)
        return ident

    def disconnect(self) -> None:
        if self._current is not None:
            self.log.info(f"Wallet disconnected: {self._current.short()}")
        self._current = None
        self._bus.publish(TOPIC_IDENTITY, None)

    def announce(self) -> None:
        """Re-fire the current identity (adapters do this on reconnect/focus)."""
        self._bus.publish(TOPIC_IDENTITY, self._current)
