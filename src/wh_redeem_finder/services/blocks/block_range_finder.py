# src/wh_redeem_finder/services/blocks/block_range_finder.py
import logging
from typing import Dict, List, Tuple
from ...adapters.evm_rpc_client import EvmRpcClient
from ...domain.block_range import BlockRange
from ...errors import UpstreamUnavailableError

class BlockRangeFinder:
    """
    timestamp -> רשימה סופית וממוינת של BlockRange לסריקה.
    - חיפוש בינארי על זמני בלוקים למציאת הבלוק הקרוב ביותר (לא מניחים זמן בלוק קבוע)
    - חלון ראשון צר סביבו, ואז הרחבות גאומטריות (קודם קדימה, אחר כך אחורה), בלי חפיפה
    - כל טווח בתוך [0, head]
    """
    def __init__(
        self,
        client: EvmRpcClient,
        *,
        initial_width: int = 100,
        growth_factor: int = 4,
        max_attempts: int = 4,
    ):
        if initial_width < 0 or growth_factor < 1 or max_attempts < 1:
            raise ValueError("invalid block range schedule")
        self.client = client
        self.initial_width = initial_width
        self.growth_factor = growth_factor
        self.max_attempts = max_attempts

    def closest_block(self, target_ts: int) -> Tuple[int, int]:
        """Returns (closest block, head). Ties go to the earlier block."""
        head = self.client.block_number()
        seen: Dict[int, int] = {}

        def ts(n: int) -> int:
            if n not in seen:
                seen[n] = self.client.block_timestamp(n)
            return seen[n]

        if target_ts >= ts(head):
            return head, head

        # הבלוק הראשון עם timestamp >= target
        lo, hi = 0, head
        while lo < hi:
            mid = (lo + hi) // 2
            if ts(mid) < target_ts:
                lo = mid + 1
            else:
                hi = mid

        if lo > 0 and target_ts - ts(lo - 1) <= ts(lo) - target_ts:
            lo -= 1
        logging.debug("closest block=%d head=%d lookups=%d", lo, head, len(seen))
        return lo, head

    def find_ranges(self, target_ts: int) -> List[BlockRange]:
        try:
            center, head = self.closest_block(target_ts)
        except UpstreamUnavailableError as e:
            raise UpstreamUnavailableError(f"timestamp to block search failed: {e}", stage="block_range") from e

        def clamp(a: int, b: int) -> List[BlockRange]:
            a, b = max(a, 0), min(b, head)
            return [BlockRange(a, b)] if a <= b else []

        width = self.initial_width
        lo, hi = max(center - width, 0), min(center + width, head)
        ranges = [BlockRange(lo, hi)]
        for _ in range(1, self.max_attempts):
            width *= self.growth_factor
            new_lo, new_hi = max(center - width, 0), min(center + width, head)
            ranges += clamp(hi + 1, new_hi)
            ranges += clamp(new_lo, lo - 1)
            lo, hi = new_lo, new_hi

        logging.info("block ranges center=%d head=%d ranges=%s", center, head,
                     [(r.from_block, r.to_block) for r in ranges])
        return ranges
