# tests/unit/test_block_range_finder.py
import math
import pytest
from fakes import FakeEvmClient
from wh_redeem_finder.errors import UpstreamUnavailableError
from wh_redeem_finder.services.blocks.block_range_finder import BlockRangeFinder

GENESIS = 1_600_000_000

def test_closest_block_uniform_chain():
    client = FakeEvmClient(head=100_000, ts_of=lambda n: GENESIS + 12 * n)
    finder = BlockRangeFinder(client)
    block, head = finder.closest_block(GENESIS + 12 * 54_321 + 5)
    assert head == 100_000
    assert block == 54_321       # 5s אחרי 54321, 7s לפני 54322
    block, _ = finder.closest_block(GENESIS + 12 * 54_321 + 7)
    assert block == 54_322

def test_closest_block_variable_block_time():
    # חצי ראשון 2s לבלוק, אחר כך 20s לבלוק
    def ts(n):
        return GENESIS + (2 * n if n <= 5_000 else 10_000 + 20 * (n - 5_000))
    client = FakeEvmClient(head=10_000, ts_of=ts)
    block, _ = BlockRangeFinder(client).closest_block(GENESIS + 10_000 + 20 * 1_234)
    assert block == 6_234

def test_tie_goes_to_earlier_block():
    client = FakeEvmClient(head=1_000, ts_of=lambda n: 10 * n)
    block, _ = BlockRangeFinder(client).closest_block(55)
    assert block == 5

def test_target_after_head_and_before_genesis():
    client = FakeEvmClient(head=1_000, ts_of=lambda n: GENESIS + n)
    finder = BlockRangeFinder(client)
    assert finder.closest_block(GENESIS + 10 ** 6) == (1_000, 1_000)
    assert finder.closest_block(0) == (0, 1_000)

def test_timestamp_lookups_are_logarithmic():
    head = 2 ** 20
    client = FakeEvmClient(head=head, ts_of=lambda n: 3 * n)
    BlockRangeFinder(client).closest_block(3 * 777_777)
    lookups = client.calls.count("eth_getBlockByNumber")
    assert lookups <= math.ceil(math.log2(head)) + 4

def test_ranges_widen_without_overlap():
    client = FakeEvmClient(head=100_000, ts_of=lambda n: n)
    finder = BlockRangeFinder(client, initial_width=100, growth_factor=4, max_attempts=3)
    ranges = [(r.from_block, r.to_block) for r in finder.find_ranges(50_000)]
    assert ranges == [
        (49_900, 50_100),
        (50_101, 50_400), (49_600, 49_899),
        (50_401, 51_600), (48_400, 49_599),
    ]

def test_ranges_never_pass_head_or_genesis():
    head = 5_000
    client = FakeEvmClient(head=head, ts_of=lambda n: n)
    finder = BlockRangeFinder(client, initial_width=100, growth_factor=10, max_attempts=5)
    for target in (0, 50, head - 30, head, head + 10_000):
        ranges = finder.find_ranges(target)
        assert 1 <= len(ranges) <= 1 + 2 * (finder.max_attempts - 1)
        for r in ranges:
            assert 0 <= r.from_block <= r.to_block <= head
        covered = sorted((r.from_block, r.to_block) for r in ranges)
        for (_, prev_hi), (lo, _) in zip(covered, covered[1:]):
            assert lo > prev_hi

def test_rpc_failure_is_tagged_with_stage():
    client = FakeEvmClient(head=10, fail_on="eth_blockNumber")
    with pytest.raises(UpstreamUnavailableError) as ei:
        BlockRangeFinder(client).find_ranges(5)
    assert ei.value.stage == "block_range"

def test_invalid_schedule_rejected():
    with pytest.raises(ValueError):
        BlockRangeFinder(FakeEvmClient(head=10), max_attempts=0)
