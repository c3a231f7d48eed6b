"""
Wallet balance subsystem.

Provides:
- Settings & cluster endpoints for Solana (devnet/testnet/mainnet-beta)
- Domain enums & models (identity, asset, balances, sync state)
- Services: identity provider, ledger query channel, balance synchronizer
- Presentation view over the current sync state
"""
