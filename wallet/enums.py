# wallet/enums.py
from enum import Enum

class Cluster(Enum):
    DEVNET = "devnet"
    TESTNET = "testnet"
    MAINNET_BETA = "mainnet-beta"

class Commitment(Enum):
    PROCESSED = "processed"
    CONFIRMED = "confirmed"
    FINALIZED = "finalized"

class SyncStatus(Enum):
    NO_ACCOUNT = "no_account"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"
