from typing import Optional


class InvalidInputError(ValueError):
    """Malformed query or a chain we have no scanner for. Raised before any RPC."""
    pass

class UpstreamUnavailableError(RuntimeError):
    """Chain RPC failed (network error, error payload, malformed response)."""
    def __init__(self, message: str, *, chain: Optional[int] = None, stage: Optional[str] = None):
        super().__init__(message)
        self.chain = chain
        self.stage = stage

    def __str__(self) -> str:
        base = super().__str__()
        ctx = []
        if self.chain is not None:
            ctx.append(f"chain={self.chain}")
        if self.stage:
            ctx.append(f"stage={self.stage}")
        return f"{base} ({', '.join(ctx)})" if ctx else base

class CacheUnavailableError(RuntimeError):
    """The durable redemption store could not be reached."""
    pass

class RedemptionConflictError(RuntimeError):
    """A different redeem hash is already stored for the same source tx."""
    pass
