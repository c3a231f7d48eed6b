# wallet/app/balance_view.py
from typing import Any, Dict, List, Optional

from wallet.config import WalletSettings
from wallet.models import (
    AssetBalance, AssetDescriptor, SyncState, NoAccount, Ready, Failed, asset_display_amount,
)

PENDING = "…"

Card = Dict[str, Any]


def _fmt_token(asset: Optional[AssetBalance]) -> str:
    value = asset_display_amount(asset)
    places = asset.decimals if asset is not None else 0
    s = f"{value:.{places}f}"
    if "." in s:
        s = s.rstrip("0").rstrip(".")
    return s


class BalanceView:
    """
    Turns a SyncState into display cards (title + lines).
    Presentation only; reads state, never mutates it.
    """

    def __init__(self, asset: AssetDescriptor, *, native_symbol: str = "SOL", native_places: int = 4) -> None:
        self.asset = asset
        self.native_symbol = native_symbol
        self.native_places = native_places

    @classmethod
    def from_settings(cls, settings: WalletSettings) -> "BalanceView":
        return cls(settings.asset, native_symbol=settings.native_symbol)

    @property
    def asset_title(self) -> str:
        return self.asset.symbol or "Token"

    def render(self, state: SyncState) -> List[Card]:
        if isinstance(state, NoAccount):
            return [{"title": "Balances", "lines": ["Connect a wallet to view balances."]}]

        native_line = f"{PENDING} {self.native_symbol}"
        token_line = PENDING
        if isinstance(state, Ready):
            snap = state.snapshot
            native_line = f"{snap.native.amount:.{self.native_places}f} {self.native_symbol}"
            token_line = _fmt_token(snap.asset)

        cards: List[Card] = [
            {"title": "Wallet", "lines": [state.identity.address]},
            {"title": self.native_symbol, "lines": [native_line]},
            {"title": self.asset_title, "lines": [token_line, f"Mint: {self.asset.mint}"]},
        ]
        if isinstance(state, Failed):
            cards.append({
                "title": "Error",
                "lines": [f"Could not load balances: {state.reason}", "Retry to refresh."],
                "retry": True,
            })
        return cards

    def format_lines(self, state: SyncState) -> str:
        out: List[str] = []
        for card in self.render(state):
            out.append(f"[{card['title']}]")
            out.extend(f"  {line}" for line in card["lines"])
        return "\n".join(out)
