# wallet/config.py
from dataclasses import dataclass
from typing import Optional

from wallet.enums import Commitment
from wallet.models import AccountIdentity, AssetDescriptor, LAMPORTS_PER_SOL

@dataclass
class WalletSettings:
    """Balance viewer runtime configuration."""
    asset: AssetDescriptor
    commitment: Commitment = Commitment.CONFIRMED

    native_symbol: str = "SOL"
    native_divisor: int = LAMPORTS_PER_SOL
    auto_connect: Optional[AccountIdentity] = None    # wallet to select at startup


def make_settings_from_cfg(cfg: dict) -> WalletSettings:
    try:
        asset_cfg = cfg["asset"]
        asset = AssetDescriptor(
            mint=str(asset_cfg["mint"]).strip(),
            symbol=str(asset_cfg.get("symbol", "") or ""),
            name=str(asset_cfg.get("name", "") or ""),
        )
    except KeyError as e:
        raise ValueError(f"Invalid cfg missing key: {e}") from e
    # mint addresses share the account address format
    AccountIdentity.parse(asset.mint)

    sol_cfg = cfg.get("solana", {}) or {}
    wallet_cfg = cfg.get("wallet", {}) or {}

    divisor = int(wallet_cfg.get("native_divisor", LAMPORTS_PER_SOL))
    if divisor <= 0:
        raise ValueError(f"native_divisor must be positive: {divisor}")

    auto = (wallet_cfg.get("auto_connect") or "").strip()

    return WalletSettings(
        asset=asset,
        commitment=Commitment(str(sol_cfg.get("commitment", "confirmed")).lower()),
        native_symbol=str(wallet_cfg.get("native_symbol", "SOL")),
        native_divisor=divisor,
        auto_connect=AccountIdentity.parse(auto) if auto else None,
    )
