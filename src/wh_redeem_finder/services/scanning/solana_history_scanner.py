# src/wh_redeem_finder/services/scanning/solana_history_scanner.py
import logging
from typing import Any, Dict, Iterator, List, Optional
from ...adapters.solana_rpc_client import SolanaRpcClient
from ...domain.models import TransferQuery, CandidateEvent
from ...errors import UpstreamUnavailableError
from ...ports.chain_scanner import ChainScanner
from ...ports.match_strategy import MatchStrategy
from ..matching.mint_to_matcher import MintToMatchStrategy

def cap_signatures(signatures: List[str], cap: int) -> List[str]:
    """
    מעל cap חתימות: ה-cap/2 החדשות ביותר + ה-cap/2 הישנות ביותר (הקרובות לזמן ההעברה).
    הרשימה מגיעה newest-first.
    """
    if len(signatures) <= cap:
        return list(signatures)
    half = cap // 2
    return signatures[:half] + signatures[-half:]

def _parse_amount(v: Any) -> Optional[int]:
    try:
        return int(v)
    except (TypeError, ValueError):
        return None

class SolanaHistoryScanner(ChainScanner):
    def __init__(
        self,
        client: SolanaRpcClient,
        *,
        matcher: Optional[MatchStrategy] = None,
        cap: int = 100,
        slack_sec: int = 1000,
    ):
        self.client = client
        self.matcher = matcher or MintToMatchStrategy()
        self.cap = cap
        self.slack_sec = slack_sec

    def signatures_in_window(self, query: TransferQuery) -> List[str]:
        history = self.client.get_signatures_for_address(query.address)
        since = query.timestamp - self.slack_sec
        try:
            sigs = [str(h["signature"]) for h in history
                    if h.get("blockTime") is not None and int(h["blockTime"]) >= since]
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise UpstreamUnavailableError(f"malformed signature history: {e.__class__.__name__}: {e}") from e
        logging.info("address=%s history=%d on_time=%d", query.address, len(history), len(sigs))
        return cap_signatures(sigs, self.cap)

    def _instructions(self, tx: Dict[str, Any]) -> Iterator[Dict[str, Any]]:
        meta = tx.get("meta") or {}
        for inner in meta.get("innerInstructions") or []:
            for ins in inner.get("instructions") or []:
                yield ins

    def _tx_candidates(self, sig: str, tx: Dict[str, Any]) -> List[CandidateEvent]:
        # חתימות חסרות => 0, כך שה-matcher (חתימה אחת בדיוק) לא יתאים
        signatures = (tx.get("transaction") or {}).get("signatures") or []
        out: List[CandidateEvent] = []
        for ins in self._instructions(tx):
            parsed = ins.get("parsed")
            if not isinstance(parsed, dict):
                continue  # instruction לא מפוענח (program לא מוכר)
            info = parsed.get("info") or {}
            out.append(CandidateEvent(
                tx_hash=sig,
                kind=str(parsed.get("type", "")),
                block_time=tx.get("blockTime"),
                token=info.get("mint"),
                amount=_parse_amount(info.get("amount")),
                program=ins.get("program"),
                signature_count=len(signatures),
            ))
        return out

    def find_candidates(self, query: TransferQuery) -> Iterator[CandidateEvent]:
        for sig in self.signatures_in_window(query):
            tx = self.client.get_transaction(sig)
            if not tx:
                continue
            try:
                candidates = self._tx_candidates(sig, tx)
            except (TypeError, AttributeError) as e:
                raise UpstreamUnavailableError(f"malformed transaction {sig}: {e.__class__.__name__}: {e}") from e
            logging.debug("sig=%s blockTime=%s instructions=%d", sig, tx.get("blockTime"), len(candidates))
            yield from candidates
