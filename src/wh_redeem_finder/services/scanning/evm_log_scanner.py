# src/wh_redeem_finder/services/scanning/evm_log_scanner.py
import logging
from typing import Any, Dict, Iterator, List, Optional
from eth_abi import decode as abi_decode
from web3 import Web3
from ...adapters.evm_rpc_client import EvmRpcClient
from ...domain.models import TransferQuery, CandidateEvent
from ...errors import InvalidInputError, UpstreamUnavailableError
from ...ports.chain_scanner import ChainScanner
from ...ports.match_strategy import MatchStrategy
from ..blocks.block_range_finder import BlockRangeFinder
from ..matching.transfer_amount_matcher import TransferAmountMatchStrategy

REDEEMED_EVENT = "Redeemed(uint16,bytes32,uint64)"
TRANSFER_EVENT = "Transfer(address,address,uint256)"

REDEEMED_TOPIC = Web3.to_hex(Web3.keccak(text=REDEEMED_EVENT))
TRANSFER_TOPIC = Web3.to_hex(Web3.keccak(text=TRANSFER_EVENT))

def sequence_topic(sequence: int) -> str:
    return "0x" + hex(int(sequence))[2:].zfill(64)

def address_topic(address: str) -> str:
    return "0x" + Web3.to_checksum_address(address)[2:].lower().zfill(64)

def decode_amount(data: str) -> int:
    try:
        raw = Web3.to_bytes(hexstr=data or "0x")
    except (TypeError, ValueError) as e:
        raise UpstreamUnavailableError(f"malformed log data: {data!r}") from e
    return abi_decode(["uint256"], raw.rjust(32, b"\0"))[0]

def _hex_int(v: Any) -> Optional[int]:
    if v is None:
        return None
    return int(v, 16) if isinstance(v, str) else int(v)

def _to_candidate(log: Dict[str, Any], kind: str, **extra) -> CandidateEvent:
    # לוג חסר שדות / hex לא חוקי => תשובה פגומה מה-RPC
    try:
        return CandidateEvent(
            tx_hash=log["transactionHash"],
            kind=kind,
            program=log.get("address"),
            block_number=_hex_int(log.get("blockNumber")),
            log_index=_hex_int(log.get("logIndex")),
            **extra,
        )
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise UpstreamUnavailableError(f"malformed {kind} log: {e.__class__.__name__}: {e}") from e

def _sort_key(log: Dict[str, Any]):
    try:
        return _hex_int(log.get("blockNumber")) or 0, _hex_int(log.get("logIndex")) or 0
    except (TypeError, ValueError, AttributeError) as e:
        raise UpstreamUnavailableError(f"malformed transfer log position: {e}") from e

class EvmLogScanner(ChainScanner):
    """
    לכל BlockRange לפי הסדר:
    1) Redeemed עם ה-sequence ב-topic3 -> התאמה מדויקת, מחזירים מייד (בלי RPC נוסף)
    2) Transfer של הטוקן אל הנמען -> נאסף ל-pool גיבוי
    רק אחרי שכל הטווחים נגמרו בלי Redeemed עוברים על ה-pool (ממוין לפי בלוק/אינדקס).
    """
    def __init__(
        self,
        client: EvmRpcClient,
        finder: BlockRangeFinder,
        *,
        token_bridge: Optional[str] = None,
        matcher: Optional[MatchStrategy] = None,
        default_decimals: int = 8,
    ):
        self.client = client
        self.finder = finder
        self.token_bridge = token_bridge
        self.matcher = matcher or TransferAmountMatchStrategy()
        self.default_decimals = default_decimals

    def _redeemed_filter(self, query: TransferQuery, from_block: int, to_block: int) -> Dict[str, Any]:
        flt: Dict[str, Any] = {
            "fromBlock": from_block,
            "toBlock": to_block,
            "topics": [REDEEMED_TOPIC, None, None, sequence_topic(query.sequence)],
        }
        if self.token_bridge:
            flt["address"] = self.token_bridge
        return flt

    def _transfer_filter(self, query: TransferQuery, from_block: int, to_block: int) -> Dict[str, Any]:
        return {
            "fromBlock": from_block,
            "toBlock": to_block,
            "address": query.token_address,
            "topics": [TRANSFER_TOPIC, None, address_topic(query.address)],
        }

    def token_decimals(self, token: str) -> int:
        # אם אי אפשר לקרוא decimals (או 0) -> 8 כמו ה-bridge
        try:
            decimals = self.client.token_decimals(token)
        except UpstreamUnavailableError as e:
            logging.warning("decimals() failed token=%s err=%s, using %d", token, e, self.default_decimals)
            return self.default_decimals
        if not 0 < decimals <= 255:
            return self.default_decimals
        return decimals

    def find_candidates(self, query: TransferQuery) -> Iterator[CandidateEvent]:
        if not Web3.is_address(query.address):
            raise InvalidInputError(f"recipient {query.address!r} is not an EVM address")

        ranges = self.finder.find_ranges(query.timestamp)
        pool: List[Dict[str, Any]] = []

        for r in ranges:
            found = self.client.get_logs(self._redeemed_filter(query, r.from_block, r.to_block))
            if found:
                candidate = _to_candidate(found[0], "redeemed")
                logging.info("redeemed log seq=%d range=[%d,%d] tx=%s",
                             query.sequence, r.from_block, r.to_block, candidate.tx_hash)
                yield candidate
                # Redeemed הוא תשובה סופית, לא ממשיכים לטווחים הבאים
                return

            transfers = self.client.get_logs(self._transfer_filter(query, r.from_block, r.to_block))
            logging.info("range=[%d,%d] transfers=%d", r.from_block, r.to_block, len(transfers))
            pool.extend(transfers)

        if not pool:
            return

        pool.sort(key=_sort_key)
        decimals = self.token_decimals(query.token_address)
        for log in pool:
            yield _to_candidate(
                log, "transfer",
                token=log.get("address"),
                amount=decode_amount(log.get("data")),
                decimals=decimals,
            )
