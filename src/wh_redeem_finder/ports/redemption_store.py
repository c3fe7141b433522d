from abc import ABC, abstractmethod
from typing import Optional

class RedemptionStore(ABC):
    """
    מאגר key-value עמיד: tx_hash מקורי -> redeem tx hash.
    write-once: put של אותו ערך פעמיים הוא no-op, ערך שונה => RedemptionConflictError.
    כשל גישה => CacheUnavailableError.
    """
    @abstractmethod
    def get(self, tx_hash: str) -> Optional[str]: ...
    @abstractmethod
    def put(self, tx_hash: str, redeem_tx_hash: str) -> None: ...
