import threading
from typing import Dict, Optional
from ...ports.redemption_store import RedemptionStore
from ...errors import RedemptionConflictError

class MemoryRedemptionStore(RedemptionStore):
    def __init__(self):
        self._db: Dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, tx_hash: str) -> Optional[str]:
        return self._db.get(tx_hash)

    def put(self, tx_hash: str, redeem_tx_hash: str) -> None:
        with self._lock:
            existing = self._db.get(tx_hash)
            if existing is None:
                self._db[tx_hash] = redeem_tx_hash
            elif existing != redeem_tx_hash:
                raise RedemptionConflictError(
                    f"tx {tx_hash} already redeemed by {existing}, refusing {redeem_tx_hash}")
