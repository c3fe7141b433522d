# scripts/locate_redeem_demo.py
import argparse, json, logging

from wh_redeem_finder.adapters.store.memory_store import MemoryRedemptionStore
from wh_redeem_finder.app import build_scanners
from wh_redeem_finder.config import load_config
from wh_redeem_finder.orchestrators.locate_redeem_usecase import run
from wh_redeem_finder.services.cache.result_cache import ResultCache
from wh_redeem_finder.services.normalize.transfer_query import to_transfer_query

def main():
    p = argparse.ArgumentParser(description="Live lookup of the redeem tx for one bridge transfer")
    p.add_argument("--network", default="Mainnet", help="Mainnet | Testnet")
    p.add_argument("--chain", required=True, help="Bridge chain id the transfer is redeemed on (1=Solana)")
    p.add_argument("--address", required=True, help="Recipient address")
    p.add_argument("--token-address", required=True, help="Token/mint address on the redeem chain")
    p.add_argument("--timestamp", required=True, help="Source transfer time (ISO-8601 or epoch)")
    p.add_argument("--amount", required=True, help="Amount in bridge base units")
    p.add_argument("--tx-hash", required=True, help="Source transaction hash")
    p.add_argument("--sequence", required=True, help="Bridge sequence number")
    p.add_argument("-v", "--verbose", action="store_true")
    args = p.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(asctime)s %(levelname)s %(message)s")

    query = to_transfer_query({
        "network": args.network, "chain": args.chain, "address": args.address,
        "tokenAddress": args.token_address, "timestamp": args.timestamp,
        "amount": args.amount, "txHash": args.tx_hash, "sequence": args.sequence,
    })
    print(f"[i] Looking up redeem for tx={query.tx_hash} on chain={query.chain} ({query.network})")

    cfg = load_config()
    scanners, clients = build_scanners(cfg, query.network, [query.chain])
    try:
        res = run(query, ResultCache(MemoryRedemptionStore()), scanners)
    finally:
        for c in clients:
            c.close()

    print(json.dumps({
        "txHash": res.tx_hash,
        "found": res.found,
        "redeemTxHash": res.redeem_tx_hash,
    }, ensure_ascii=False, indent=2))

if __name__ == "__main__":
    main()
