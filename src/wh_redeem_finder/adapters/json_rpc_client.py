# src/wh_redeem_finder/adapters/json_rpc_client.py
from typing import Any, Dict, List, Optional
import itertools
import httpx
from ..errors import UpstreamUnavailableError

class JsonRpcClient:
    """לקוח JSON-RPC מינימלי (POST JSON) מעל httpx. בלי retries: כשל עולה למעלה."""
    def __init__(self, base_url: str, timeout: float = 15.0,
                 transport: Optional[httpx.BaseTransport] = None):
        self._base = base_url
        self._client = httpx.Client(timeout=timeout, transport=transport)
        self._ids = itertools.count(1)

    def call(self, method: str, params: List[Any]) -> Any:
        payload: Dict[str, Any] = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params,
        }
        try:
            r = self._client.post(self._base, json=payload)
        except httpx.HTTPError as e:
            raise UpstreamUnavailableError(f"{method}: {e.__class__.__name__}: {e}") from e

        if r.status_code != 200:
            raise UpstreamUnavailableError(f"{method}: HTTP {r.status_code}: {r.text[:200]}")
        try:
            body = r.json()
        except ValueError as e:
            raise UpstreamUnavailableError(f"{method}: malformed response: {r.text[:200]}") from e
        if not isinstance(body, dict):
            raise UpstreamUnavailableError(f"{method}: unexpected response type {type(body).__name__}")
        if body.get("error") is not None:
            raise UpstreamUnavailableError(f"{method}: rpc error {body['error']}")
        if "result" not in body:
            raise UpstreamUnavailableError(f"{method}: response without result")
        return body["result"]

    def close(self) -> None:
        self._client.close()

    def __enter__(self): return self
    def __exit__(self, exc_type, exc, tb): self.close()
