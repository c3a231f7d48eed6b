# wallet/errors.py
class WalletError(Exception):
    """Base wallet error."""
    def __init__(self, msg: str = "", **ctx):
        super().__init__(msg)
        self.msg = msg
        self.ctx = ctx

    def __str__(self):
        base = self.msg or self.__class__.__name__
        if self.ctx:
            details = ", ".join(f"{k}={v}" for k, v in self.ctx.items())
            return f"{base} [{details}]"
        return base

class InvalidIdentityError(WalletError):
    """Account address is not a well-formed base58 public key."""

class ChannelError(WalletError):
    """Ledger could not be reached or answered with a protocol error."""

    @property
    def reason(self) -> str:
        return str(self)

class RpcError(ChannelError):
    """JSON-RPC error object returned by the node."""
    def __init__(self, code: int, msg: str, **ctx):
        super().__init__(msg, **ctx)
        self.code = code

    def __str__(self):
        return f"RPC[{self.code}]: {super().__str__()}"

class StaleResult(WalletError):
    """Result belongs to a superseded generation; discarded, never surfaced."""
    def __init__(self, generation: int, current: int):
        super().__init__("stale result", generation=generation, current=current)
        self.generation = generation
        self.current = current
