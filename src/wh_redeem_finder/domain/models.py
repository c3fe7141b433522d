from dataclasses import dataclass
from typing import Optional

@dataclass(frozen=True)
class TransferQuery:
    network: str              # "Mainnet" | "Testnet"
    chain: int                # bridge chain id שעליו מחפשים את ה-redeem
    address: str              # נמען ההעברה
    token_address: str
    timestamp: int            # epoch seconds (מקורב, מהרשת המקורית)
    amount: int               # base units של הרשת המקורית
    tx_hash: str              # מפתח ה-cache
    sequence: int

@dataclass(frozen=True)
class CandidateEvent:
    """טרנזקציה/לוג שנצפו ברשת היעד במהלך הסריקה. לא נשמר."""
    tx_hash: str
    kind: str                          # "redeemed" | "transfer" | סוג instruction (למשל "mintTo")
    block_time: Optional[int] = None
    token: Optional[str] = None        # mint / token contract
    amount: Optional[int] = None       # raw base units
    program: Optional[str] = None      # program / contract שפלט את האירוע
    signature_count: int = 1
    decimals: Optional[int] = None     # decimals של הטוקן ביעד, אם ידוע
    block_number: Optional[int] = None
    log_index: Optional[int] = None

@dataclass(frozen=True)
class RedemptionRecord:
    tx_hash: str
    redeem_tx_hash: str

@dataclass(frozen=True)
class LookupResult:
    tx_hash: str
    redeem_tx_hash: Optional[str] = None
    from_cache: bool = False   # נענה מה-cache בלי סריקה
    cached: bool = False       # הרשומה שמורה (נמצאה שם או נכתבה עכשיו)

    @property
    def found(self) -> bool:
        return self.redeem_tx_hash is not None
