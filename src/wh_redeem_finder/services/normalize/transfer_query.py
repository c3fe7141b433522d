from datetime import datetime, timezone
from typing import Any, Dict
from eth_utils import is_address
from ...domain.chains import EVM, family_of, normalize_network
from ...domain.models import TransferQuery
from ...errors import InvalidInputError

REQUIRED = ("network", "chain", "address", "tokenAddress", "timestamp", "amount", "txHash", "sequence")

def parse_timestamp(value: Any) -> int:
    """
    ISO-8601 ("2024-03-01T12:00:00Z") או epoch בשניות/מילישניות -> epoch seconds.
    """
    s = str(value).strip()
    if s.isdigit():
        n = int(s)
        return n // 1000 if n > 10 ** 12 else n
    try:
        dt = datetime.fromisoformat(s.replace("Z", "+00:00"))
    except ValueError as e:
        raise InvalidInputError(f"timestamp: cannot parse {value!r}") from e
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp())

def _non_negative_int(name: str, value: Any) -> int:
    try:
        n = int(str(value).strip())
    except ValueError as e:
        raise InvalidInputError(f"{name}: expected an integer, got {value!r}") from e
    if n < 0:
        raise InvalidInputError(f"{name}: must be non-negative, got {n}")
    return n

def to_transfer_query(params: Dict[str, Any]) -> TransferQuery:
    """
    ממיר פרמטרים גולמיים (מחרוזות מה-query string) ל-TransferQuery.
    """
    missing = [k for k in REQUIRED if params.get(k) in (None, "")]
    if missing:
        raise InvalidInputError(f"missing parameters: {', '.join(missing)}")

    chain = _non_negative_int("chain", params["chain"])
    address = str(params["address"]).strip()
    token = str(params["tokenAddress"]).strip()
    if family_of(chain) == EVM:
        for name, v in (("address", address), ("tokenAddress", token)):
            if not is_address(v):
                raise InvalidInputError(f"{name}: {v!r} is not an EVM address")

    return TransferQuery(
        network=normalize_network(params["network"]),
        chain=chain,
        address=address,
        token_address=token,
        timestamp=parse_timestamp(params["timestamp"]),
        amount=_non_negative_int("amount", params["amount"]),
        tx_hash=str(params["txHash"]).strip(),
        sequence=_non_negative_int("sequence", params["sequence"]),
    )
