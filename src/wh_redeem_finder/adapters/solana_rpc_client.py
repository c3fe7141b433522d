# src/wh_redeem_finder/adapters/solana_rpc_client.py
from typing import Any, Dict, List, Optional
from .json_rpc_client import JsonRpcClient

class SolanaRpcClient(JsonRpcClient):
    def get_signatures_for_address(self, address: str) -> List[Dict[str, Any]]:
        # newest first (סדר ברירת המחדל של ה-RPC)
        return self.call("getSignaturesForAddress", [address]) or []

    def get_transaction(self, signature: str) -> Optional[Dict[str, Any]]:
        return self.call("getTransaction", [
            signature,
            {"encoding": "jsonParsed", "maxSupportedTransactionVersion": 0},
        ])
