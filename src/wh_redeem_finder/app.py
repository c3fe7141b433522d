import json, logging
from typing import Dict, Iterable, List, Optional, Tuple, Union
from .config import Config, load_config
from .domain.chains import SOLANA, chain_info
from .adapters.evm_rpc_client import EvmRpcClient
from .adapters.solana_rpc_client import SolanaRpcClient
from .adapters.store.dynamodb_store import DynamoRedemptionStore
from .adapters.store.memory_store import MemoryRedemptionStore
from .errors import InvalidInputError, UpstreamUnavailableError
from .ports.chain_scanner import ChainScanner
from .ports.redemption_store import RedemptionStore
from .services.blocks.block_range_finder import BlockRangeFinder
from .services.cache.result_cache import ResultCache
from .services.matching.mint_to_matcher import MintToMatchStrategy
from .services.matching.transfer_amount_matcher import TransferAmountMatchStrategy
from .services.normalize.transfer_query import to_transfer_query
from .services.scanning.evm_log_scanner import EvmLogScanner
from .services.scanning.solana_history_scanner import SolanaHistoryScanner
from .orchestrators.locate_redeem_usecase import run

RpcClient = Union[EvmRpcClient, SolanaRpcClient]

_STORE: Optional[RedemptionStore] = None

def _build_store(cfg: Config) -> RedemptionStore:
    # נשמר ברמת המודול כדי ש-invocations חמים ישתמשו באותו store
    global _STORE
    if _STORE is None:
        if cfg.redemption_table:
            _STORE = DynamoRedemptionStore(cfg.redemption_table, region_name=cfg.aws_region)
        else:
            logging.warning("REDEMPTION_TABLE not set, using in-memory store")
            _STORE = MemoryRedemptionStore()
    return _STORE

def build_scanners(cfg: Config, network: str,
                   chains: Iterable[int]) -> Tuple[Dict[int, ChainScanner], List[RpcClient]]:
    """Scanner per supported chain, plus the RPC clients so the caller can close them."""
    scanners: Dict[int, ChainScanner] = {}
    clients: List[RpcClient] = []
    for chain in chains:
        info = chain_info(network, chain, cfg.rpc_overrides(), cfg.evm_token_bridges)
        if info is None:
            continue
        if info.family == SOLANA:
            sol = SolanaRpcClient(info.rpc_url, timeout=cfg.rpc_timeout_sec)
            clients.append(sol)
            scanners[chain] = SolanaHistoryScanner(
                sol,
                matcher=MintToMatchStrategy(cfg.mint_tolerance),
                cap=cfg.history_cap,
                slack_sec=cfg.history_slack_sec,
            )
        else:
            evm = EvmRpcClient(info.rpc_url, timeout=cfg.rpc_timeout_sec)
            clients.append(evm)
            finder = BlockRangeFinder(
                evm,
                initial_width=cfg.range_initial_width,
                growth_factor=cfg.range_growth_factor,
                max_attempts=cfg.range_max_attempts,
            )
            scanners[chain] = EvmLogScanner(
                evm, finder,
                token_bridge=info.token_bridge,
                matcher=TransferAmountMatchStrategy(
                    cfg.transfer_raw_tolerance, cfg.transfer_normalized_tolerance, cfg.bridge_decimals),
                default_decimals=cfg.bridge_decimals,
            )
    return scanners, clients

def _response(status: int, body) -> dict:
    return {"statusCode": status, "body": json.dumps(body, ensure_ascii=False)}

def lambda_handler(event, _context=None):
    """
    event (כמו ה-query string של getRedeemTxn):
      {
        "network": "Mainnet",
        "chain": "2",
        "address": "0x...",
        "tokenAddress": "0x...",
        "timestamp": "2024-03-01T12:00:00Z",
        "amount": "1000000",
        "txHash": "0x...",
        "sequence": "42"
      }
    """
    logging.info("getRedeemTxn params=%s", json.dumps(event, default=str))
    cfg = load_config()
    try:
        query = to_transfer_query(event)
    except InvalidInputError as e:
        return _response(400, {"error": str(e)})

    scanners, clients = build_scanners(cfg, query.network, [query.chain])
    cache = ResultCache(_build_store(cfg))
    try:
        res = run(query, cache, scanners)
    except InvalidInputError as e:
        return _response(400, {"error": str(e)})
    except UpstreamUnavailableError as e:
        logging.error("lookup failed tx=%s: %s", query.tx_hash, e)
        return _response(502, {"error": str(e), "chain": e.chain, "stage": e.stage})
    finally:
        for c in clients:
            c.close()

    if not res.found:
        return _response(404, {"error": "redeem txn not found"})
    return _response(200, {"redeemTxHash": res.redeem_tx_hash, "cached": res.cached})

if __name__ == "__main__":
    # הרצה לוקאלית: הדבק JSON ל-stdin
    import sys
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    payload = json.loads(sys.stdin.read())
    out = lambda_handler(payload, None)
    print(json.dumps({"statusCode": out["statusCode"], **json.loads(out["body"])}, ensure_ascii=False))
