# src/wh_redeem_finder/services/cache/result_cache.py
import logging
from typing import Optional
from ...ports.redemption_store import RedemptionStore
from ...domain.models import RedemptionRecord
from ...errors import CacheUnavailableError, RedemptionConflictError

class ResultCache:
    """
    cache-aside מעל RedemptionStore.
    ה-cache לא קורא לסורק: ב-miss ה-locator מחשב בעצמו ומבקש record במפורש.
    כשל ב-store לא מפיל את הבקשה: lookup מחזיר None, record מחזיר False.
    """
    def __init__(self, store: RedemptionStore):
        self.store = store

    def lookup(self, tx_hash: str) -> Optional[str]:
        try:
            return self.store.get(tx_hash)
        except CacheUnavailableError as e:
            logging.warning("cache lookup failed tx=%s err=%s, scanning live", tx_hash, e)
            return None

    def record(self, rec: RedemptionRecord) -> bool:
        tx_hash = rec.tx_hash
        try:
            self.store.put(tx_hash, rec.redeem_tx_hash)
        except RedemptionConflictError as e:
            logging.error("cache conflict tx=%s: %s", tx_hash, e)
            return False
        except CacheUnavailableError as e:
            logging.warning("cache write failed tx=%s err=%s", tx_hash, e)
            return False
        return True
