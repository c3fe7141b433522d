# src/wh_redeem_finder/config.py
import os
from decimal import Decimal
from typing import Dict, Optional
from pydantic import BaseModel, Field
from .domain.chains import SOLANA_CHAIN_ID

def _env(name: str, default: str) -> str:
    return os.getenv(name, default)

def parse_chain_map(raw: Optional[str]) -> Dict[int, str]:
    """ "2=https://a,23=https://b" -> {2: "https://a", 23: "https://b"} """
    out: Dict[int, str] = {}
    for part in (raw or "").split(","):
        part = part.strip()
        if not part:
            continue
        chain, sep, value = part.partition("=")
        if not sep or not chain.strip().isdigit() or not value.strip():
            raise ValueError(f"bad chain mapping entry: {part!r}")
        out[int(chain)] = value.strip()
    return out

class Config(BaseModel):
    network: str = Field(default_factory=lambda: _env("NETWORK", "Mainnet"))

    # RPC
    solana_rpc_url: Optional[str] = Field(default_factory=lambda: os.getenv("SOLANA_RPC_URL"))
    evm_rpc_urls: Dict[int, str] = Field(default_factory=lambda: parse_chain_map(os.getenv("EVM_RPC_URLS")))
    evm_token_bridges: Dict[int, str] = Field(default_factory=lambda: parse_chain_map(os.getenv("EVM_TOKEN_BRIDGES")))
    rpc_timeout_sec: float = Field(default_factory=lambda: float(_env("RPC_TIMEOUT_SEC", "15")))

    # טולרנסים להתאמה
    mint_tolerance: int = Field(default_factory=lambda: int(_env("MINT_TOLERANCE", "10000")))
    transfer_raw_tolerance: int = Field(default_factory=lambda: int(_env("TRANSFER_RAW_TOLERANCE", "200000")))
    transfer_normalized_tolerance: Decimal = Field(
        default_factory=lambda: Decimal(_env("TRANSFER_NORMALIZED_TOLERANCE", "1")))
    bridge_decimals: int = Field(default_factory=lambda: int(_env("BRIDGE_DECIMALS", "8")))

    # Solana account history
    history_cap: int = Field(default_factory=lambda: int(_env("HISTORY_CAP", "100")))
    history_slack_sec: int = Field(default_factory=lambda: int(_env("HISTORY_SLACK_SEC", "1000")))

    # EVM block ranges
    range_initial_width: int = Field(default_factory=lambda: int(_env("RANGE_INITIAL_WIDTH", "100")))
    range_growth_factor: int = Field(default_factory=lambda: int(_env("RANGE_GROWTH_FACTOR", "4")))
    range_max_attempts: int = Field(default_factory=lambda: int(_env("RANGE_MAX_ATTEMPTS", "4")))

    # store
    redemption_table: Optional[str] = Field(default_factory=lambda: os.getenv("REDEMPTION_TABLE"))
    aws_region: Optional[str] = Field(default_factory=lambda: os.getenv("AWS_REGION"))

    def rpc_overrides(self) -> Dict[int, str]:
        out = dict(self.evm_rpc_urls)
        if self.solana_rpc_url:
            out[SOLANA_CHAIN_ID] = self.solana_rpc_url
        return out

def load_config() -> Config:
    return Config()
