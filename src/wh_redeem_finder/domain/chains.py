# src/wh_redeem_finder/domain/chains.py
from dataclasses import dataclass
from typing import Dict, Optional

MAINNET = "Mainnet"
TESTNET = "Testnet"

SOLANA = "solana"
EVM = "evm"

SOLANA_CHAIN_ID = 1

@dataclass(frozen=True)
class ChainInfo:
    chain_id: int
    name: str
    family: str                         # SOLANA | EVM
    rpc_url: Optional[str] = None
    token_bridge: Optional[str] = None  # כתובת ה-token bridge (EVM בלבד)

# bridge chain ids -> שם
CHAIN_NAMES: Dict[int, str] = {
    1: "Solana",
    2: "Ethereum",
    4: "Bsc",
    5: "Polygon",
    6: "Avalanche",
    10: "Fantom",
    14: "Celo",
    16: "Moonbeam",
    23: "Arbitrum",
    24: "Optimism",
    30: "Base",
}

_DEFAULT_RPC: Dict[str, Dict[int, str]] = {
    MAINNET: {
        1: "https://api.mainnet-beta.solana.com",
        2: "https://ethereum-rpc.publicnode.com",
        4: "https://bsc-dataseed.binance.org",
        5: "https://polygon-rpc.com",
        6: "https://api.avax.network/ext/bc/C/rpc",
        10: "https://rpc.ftm.tools",
        14: "https://forno.celo.org",
        16: "https://rpc.api.moonbeam.network",
        23: "https://arb1.arbitrum.io/rpc",
        24: "https://mainnet.optimism.io",
        30: "https://mainnet.base.org",
    },
    TESTNET: {
        1: "https://api.devnet.solana.com",
        2: "https://ethereum-holesky-rpc.publicnode.com",
        4: "https://data-seed-prebsc-1-s1.binance.org:8545",
        6: "https://api.avax-test.network/ext/bc/C/rpc",
        14: "https://alfajores-forno.celo-testnet.org",
    },
}

_DEFAULT_TOKEN_BRIDGE: Dict[str, Dict[int, str]] = {
    MAINNET: {
        2: "0x3ee18B2214AFF97000D974cf647E7C347E8fa585",
        4: "0xB6F6D86a8f9879A9c87f643768d9efc38c1Da6E7",
        5: "0x5a58505a96D1dbf8dF91cB21B54419FC36e93fdE",
        6: "0x0e082F06FF657D94310cB8cE8B0D9a04541d8052",
        10: "0x7C9Fc5741288cDFdD83CeB07f3ea7e22618D79D2",
        14: "0x796Dff6D74F3E27060B71255Fe517BFb23C93eed",
        16: "0xB1731c586ca89a23809861c6103F0b96B3F57D92",
        23: "0x0b2402144Bb366A632D14B83F244D2e0e21bD39c",
        24: "0x1D68124e65faFC907325e3EDbF8c4d84499DAa8b",
        30: "0x8d2de8d2f73F1F4cAB472AC9A881C9b123C79627",
    },
    TESTNET: {},
}

def normalize_network(network: str) -> str:
    return MAINNET if str(network).strip().lower() == "mainnet" else TESTNET

def family_of(chain_id: int) -> str:
    return SOLANA if chain_id == SOLANA_CHAIN_ID else EVM

def chain_info(network: str, chain_id: int,
               rpc_overrides: Optional[Dict[int, str]] = None,
               bridge_overrides: Optional[Dict[int, str]] = None) -> Optional[ChainInfo]:
    """
    מחזיר ChainInfo לרשת אם יש לנו RPC עבורה (ברירת מחדל או override), אחרת None.
    """
    net = normalize_network(network)
    rpc = (rpc_overrides or {}).get(chain_id) or _DEFAULT_RPC[net].get(chain_id)
    if not rpc:
        return None
    bridge = (bridge_overrides or {}).get(chain_id) or _DEFAULT_TOKEN_BRIDGE[net].get(chain_id)
    return ChainInfo(
        chain_id=chain_id,
        name=CHAIN_NAMES.get(chain_id, f"chain-{chain_id}"),
        family=family_of(chain_id),
        rpc_url=rpc,
        token_bridge=bridge if family_of(chain_id) == EVM else None,
    )
