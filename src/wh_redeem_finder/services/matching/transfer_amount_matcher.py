# src/wh_redeem_finder/services/matching/transfer_amount_matcher.py
from decimal import Decimal
from ...ports.match_strategy import MatchStrategy
from ...domain.models import TransferQuery, CandidateEvent

def normalize_units(raw: int, decimals: int) -> Decimal:
    return Decimal(raw).scaleb(-decimals)

class TransferAmountMatchStrategy(MatchStrategy):
    """
    EVM, dual tolerance:
    - לוג Redeemed עם ה-sequence הוא התאמה מדויקת, תמיד מתקבל
    - לוג Transfer מתקבל אם |raw - amount| < raw_tolerance,
      או אם ההפרש אחרי נרמול (decimals של הטוקן מול 8 של ה-bridge) < normalized_tolerance
    """
    def __init__(self, raw_tolerance: int = 200_000,
                 normalized_tolerance: Decimal = Decimal(1), bridge_decimals: int = 8):
        self.raw_tolerance = raw_tolerance
        self.normalized_tolerance = Decimal(normalized_tolerance)
        self.bridge_decimals = bridge_decimals

    def matches(self, query: TransferQuery, candidate: CandidateEvent) -> bool:
        if candidate.kind == "redeemed":
            return True
        if candidate.kind != "transfer" or candidate.amount is None:
            return False
        if abs(candidate.amount - query.amount) < self.raw_tolerance:
            return True
        decimals = candidate.decimals or self.bridge_decimals
        diff = abs(normalize_units(candidate.amount, decimals)
                   - normalize_units(query.amount, self.bridge_decimals))
        return diff < self.normalized_tolerance
