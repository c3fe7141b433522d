# src/wh_redeem_finder/adapters/evm_rpc_client.py
from typing import Any, Dict, List, Optional
import requests
from web3 import Web3, HTTPProvider
from web3.exceptions import Web3Exception
from web3.providers import BaseProvider
from ..errors import UpstreamUnavailableError

ERC20_DECIMALS_ABI = [
    {"inputs": [], "name": "decimals", "outputs": [{"internalType": "uint8", "name": "", "type": "uint8"}],
     "stateMutability": "view", "type": "function"},
]

# web3 v6 מעלה ValueError על rpc error, v7 מעלה Web3RPCError (Web3Exception)
UPSTREAM_ERRORS = (Web3Exception, requests.RequestException, ValueError)

def _hex(v: Any) -> str:
    return v if isinstance(v, str) else Web3.to_hex(v)

def plain_log(lg: Any) -> Dict[str, Any]:
    """AttributeDict/HexBytes של web3 -> dict עם מחרוזות hex ומספרים."""
    try:
        return {
            "transactionHash": _hex(lg["transactionHash"]),
            "blockNumber": int(lg["blockNumber"]),
            "logIndex": int(lg["logIndex"]),
            "address": lg["address"],
            "topics": [_hex(t) for t in lg["topics"]],
            "data": _hex(lg["data"]),
        }
    except (KeyError, TypeError, ValueError) as e:
        raise UpstreamUnavailableError(f"malformed log: {e.__class__.__name__}: {e}") from e

class EvmRpcClient:
    """Thin web3 wrapper: the eth_* calls the block range finder and the log scanner need."""
    def __init__(self, base_url: str, timeout: float = 15.0, provider: Optional[BaseProvider] = None):
        self._session = requests.Session()
        self.w3 = Web3(provider or HTTPProvider(base_url, request_kwargs={"timeout": timeout},
                                                session=self._session))

    def _rpc(self, what: str, fn, *args):
        try:
            return fn(*args)
        except UPSTREAM_ERRORS as e:
            raise UpstreamUnavailableError(f"{what}: {e.__class__.__name__}: {e}") from e

    def block_number(self) -> int:
        return int(self._rpc("eth_blockNumber", lambda: self.w3.eth.block_number))

    def block_timestamp(self, number: int) -> int:
        block = self._rpc("eth_getBlockByNumber", self.w3.eth.get_block, number)
        try:
            return int(block["timestamp"])
        except (KeyError, TypeError, ValueError) as e:
            raise UpstreamUnavailableError(f"block {number}: malformed timestamp") from e

    def get_logs(self, flt: Dict[str, Any]) -> List[Dict[str, Any]]:
        params = dict(flt)
        if params.get("address"):
            params["address"] = Web3.to_checksum_address(params["address"])
        logs = self._rpc("eth_getLogs", self.w3.eth.get_logs, params)
        return [plain_log(lg) for lg in logs or []]

    def token_decimals(self, token: str) -> int:
        contract = self.w3.eth.contract(address=Web3.to_checksum_address(token), abi=ERC20_DECIMALS_ABI)
        return int(self._rpc("decimals()", contract.functions.decimals().call))

    def close(self) -> None:
        self._session.close()

    def __enter__(self): return self
    def __exit__(self, exc_type, exc, tb): self.close()
