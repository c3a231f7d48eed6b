# wallet/models.py
import re
from dataclasses import dataclass, field
from typing import Optional, Union, ClassVar

from wallet.enums import SyncStatus
from wallet.errors import InvalidIdentityError

LAMPORTS_PER_SOL = 1_000_000_000

_BASE58_RE = re.compile(r"[1-9A-HJ-NP-Za-km-z]{32,44}")


@dataclass(frozen=True)
class AccountIdentity:
    address: str            # base58 public key

    @classmethod
    def parse(cls, raw: Union[str, "AccountIdentity", None]) -> "AccountIdentity":
        """Validate a base58 address coming from config, CLI or a wallet adapter."""
        if isinstance(raw, AccountIdentity):
            return raw
        s = str(raw or "").strip()
        if not _BASE58_RE.fullmatch(s):
            raise InvalidIdentityError("not a base58 public key", address=s)
        return cls(address=s)

    def short(self, n: int = 4) -> str:
        if len(self.address) <= 2 * n:
            return self.address
        return f"{self.address[:n]}…{self.address[-n:]}"

    def __str__(self) -> str:
        return self.address


@dataclass(frozen=True)
class AssetDescriptor:
    mint: str               # SPL token mint address
    symbol: str = ""
    name: str = ""


@dataclass(frozen=True)
class NativeBalance:
    lamports: int                       # smallest unit
    divisor: int = LAMPORTS_PER_SOL

    def __post_init__(self):
        if self.lamports < 0:
            raise ValueError(f"negative native balance: {self.lamports}")
        if self.divisor <= 0:
            raise ValueError(f"divisor must be positive: {self.divisor}")

    @property
    def amount(self) -> float:
        return self.lamports / self.divisor


@dataclass(frozen=True)
class AssetBalance:
    amount: int                         # raw token amount, smallest unit
    decimals: int
    ui_amount: float                    # already decimal-adjusted
    token_account: Optional[str] = None # holder record address


def asset_display_amount(asset: Optional[AssetBalance]) -> float:
    """A missing holder record renders the same as a zero balance."""
    return asset.ui_amount if asset is not None else 0.0


@dataclass(frozen=True)
class BalanceSnapshot:
    identity: AccountIdentity
    native: NativeBalance
    asset: Optional[AssetBalance]       # None: no holder record
    generation: int
    ts: int = 0                         # publish time (ms)


# ---- SyncState: NoAccount | Loading | Ready | Failed ----

@dataclass(frozen=True)
class NoAccount:
    status: ClassVar[SyncStatus] = SyncStatus.NO_ACCOUNT
    identity: ClassVar[None] = None


@dataclass(frozen=True)
class Loading:
    status: ClassVar[SyncStatus] = SyncStatus.LOADING
    identity: AccountIdentity
    generation: int


@dataclass(frozen=True)
class Ready:
    status: ClassVar[SyncStatus] = SyncStatus.READY
    snapshot: BalanceSnapshot

    @property
    def identity(self) -> AccountIdentity:
        return self.snapshot.identity

    @property
    def generation(self) -> int:
        return self.snapshot.generation


@dataclass(frozen=True)
class Failed:
    status: ClassVar[SyncStatus] = SyncStatus.FAILED
    identity: AccountIdentity
    reason: str
    generation: int
    error: Optional[Exception] = field(default=None, compare=False, repr=False)


SyncState = Union[NoAccount, Loading, Ready, Failed]

NO_ACCOUNT = NoAccount()
