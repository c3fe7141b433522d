from ...ports.match_strategy import MatchStrategy
from ...domain.models import TransferQuery, CandidateEvent

class MintToMatchStrategy(MatchStrategy):
    """
    Solana: inner instruction מסוג mintTo של spl-token, על ה-mint המבוקש,
    בסכום שסוטה מסכום ההעברה בפחות מ-tolerance (base units).
    """
    def __init__(self, tolerance: int = 10_000, program: str = "spl-token"):
        self.tolerance, self.program = tolerance, program

    def matches(self, query: TransferQuery, candidate: CandidateEvent) -> bool:
        if candidate.kind != "mintTo" or candidate.program != self.program:
            return False
        if (candidate.token or "").lower() != query.token_address.lower():
            return False
        if candidate.amount is None or abs(candidate.amount - query.amount) >= self.tolerance:
            return False
        # רק טרנזקציה עם חתימה יחידה נותנת hash חד-משמעי
        return candidate.signature_count == 1
