from abc import ABC, abstractmethod
from ..domain.models import TransferQuery, CandidateEvent

class MatchStrategy(ABC):
    """מחליט האם candidate שנסרק הוא ה-redeem של ההעברה."""
    @abstractmethod
    def matches(self, query: TransferQuery, candidate: CandidateEvent) -> bool: ...
