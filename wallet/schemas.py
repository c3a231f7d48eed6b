# wallet/schemas.py
# Shapes of the Solana JSON-RPC results the ledger channel reads.
from typing import Optional, List
from pydantic import BaseModel, Field


class RpcContext(BaseModel):
    slot: int = 0


class BalanceResult(BaseModel):
    context: RpcContext = RpcContext()
    value: int = Field(ge=0)


class TokenAmount(BaseModel):
    amount: str
    decimals: int = Field(ge=0)
    uiAmount: Optional[float] = None
    uiAmountString: Optional[str] = None

    def display_amount(self) -> float:
        # uiAmount is deprecated and may be null; fall back to the string form, then the raw amount
        if self.uiAmount is not None:
            return float(self.uiAmount)
        if self.uiAmountString:
            return float(self.uiAmountString)
        return int(self.amount) / (10 ** self.decimals)


class ParsedTokenInfo(BaseModel):
    mint: str
    owner: str
    tokenAmount: TokenAmount


class ParsedTokenData(BaseModel):
    type: str = "account"
    info: ParsedTokenInfo


class TokenAccountData(BaseModel):
    program: str = "spl-token"
    parsed: ParsedTokenData


class TokenAccount(BaseModel):
    data: TokenAccountData


class KeyedTokenAccount(BaseModel):
    pubkey: str
    account: TokenAccount


class TokenAccountsResult(BaseModel):
    context: RpcContext = RpcContext()
    value: List[KeyedTokenAccount] = []
