# src/wh_redeem_finder/domain/block_range.py
from dataclasses import dataclass

@dataclass(frozen=True)
class BlockRange:
    from_block: int
    to_block: int   # inclusive

    def __post_init__(self):
        if self.from_block < 0 or self.from_block > self.to_block:
            raise ValueError(f"invalid block range [{self.from_block}, {self.to_block}]")
