# src/wh_redeem_finder/orchestrators/locate_redeem_usecase.py
import logging
from typing import Mapping
from ..domain.models import TransferQuery, LookupResult, RedemptionRecord
from ..errors import InvalidInputError, UpstreamUnavailableError
from ..ports.chain_scanner import ChainScanner
from ..services.cache.result_cache import ResultCache

# שלבים: cache_check -> dispatch -> scanning -> found|exhausted -> cache_write -> respond
CACHE_CHECK = "cache_check"
DISPATCH = "dispatch"
SCANNING = "scanning"
CACHE_WRITE = "cache_write"

def run(query: TransferQuery, cache: ResultCache, scanners: Mapping[int, ChainScanner]) -> LookupResult:
    """
    Cache-aside lookup of the redeem tx for one source transfer.
    Raises InvalidInputError for unsupported chains and UpstreamUnavailableError
    (with chain and stage) when the chain RPC breaks. Not-found is never cached.
    """
    cached = cache.lookup(query.tx_hash)
    if cached:
        logging.info("stage=%s tx=%s hit redeem=%s", CACHE_CHECK, query.tx_hash, cached)
        return LookupResult(query.tx_hash, cached, from_cache=True, cached=True)

    scanner = scanners.get(query.chain)
    if scanner is None:
        raise InvalidInputError(f"chain {query.chain} is not supported on {query.network}")
    logging.info("stage=%s tx=%s chain=%d scanner=%s", DISPATCH, query.tx_hash, query.chain,
                 scanner.__class__.__name__)

    redeem_tx_hash = None
    scanned = 0
    try:
        for candidate in scanner.find_candidates(query):
            scanned += 1
            if scanner.matcher.matches(query, candidate):
                redeem_tx_hash = candidate.tx_hash
                logging.info("stage=%s tx=%s matched kind=%s redeem=%s after=%d",
                             SCANNING, query.tx_hash, candidate.kind, redeem_tx_hash, scanned)
                break
    except UpstreamUnavailableError as e:
        stage = e.stage or SCANNING
        raise UpstreamUnavailableError(str(e.args[0]), chain=query.chain, stage=stage) from e

    if redeem_tx_hash is None:
        logging.info("stage=exhausted tx=%s candidates=%d, redeem not found", query.tx_hash, scanned)
        return LookupResult(query.tx_hash)

    written = cache.record(RedemptionRecord(query.tx_hash, redeem_tx_hash))
    logging.info("stage=%s tx=%s cached=%s", CACHE_WRITE, query.tx_hash, written)
    return LookupResult(query.tx_hash, redeem_tx_hash, from_cache=False, cached=written)
