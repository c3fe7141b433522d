# src/wh_redeem_finder/ports/chain_scanner.py
from abc import ABC, abstractmethod
from typing import Iterator
from ..domain.models import TransferQuery, CandidateEvent
from .match_strategy import MatchStrategy

class ChainScanner(ABC):
    """
    מימוש אחד לכל משפחת רשתות.
    find_candidates מחזיר iterator עצל לפי סדר עדיפות: הצרכן עוצר בהתאמה הראשונה
    ואז לא נשלחות קריאות RPC נוספות.
    """
    matcher: MatchStrategy

    @abstractmethod
    def find_candidates(self, query: TransferQuery) -> Iterator[CandidateEvent]: ...
