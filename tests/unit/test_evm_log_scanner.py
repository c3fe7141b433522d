# tests/unit/test_evm_log_scanner.py
import pytest
from fakes import FakeEvmClient, redeemed_log, transfer_log, RECIPIENT, TOKEN, BRIDGE
from wh_redeem_finder.domain.models import TransferQuery
from wh_redeem_finder.errors import InvalidInputError, UpstreamUnavailableError
from wh_redeem_finder.services.blocks.block_range_finder import BlockRangeFinder
from wh_redeem_finder.services.scanning.evm_log_scanner import (
    EvmLogScanner, address_topic, decode_amount, sequence_topic,
)

T = 5_000   # ts של בלוק n הוא n

def _query(amount=1_000_000, sequence=42, address=RECIPIENT):
    return TransferQuery(network="Mainnet", chain=17, address=address, token_address=TOKEN,
                         timestamp=T, amount=amount, tx_hash="0xsource", sequence=sequence)

def _scanner(client, **kw):
    return EvmLogScanner(client, BlockRangeFinder(client, initial_width=100, growth_factor=4, max_attempts=3),
                         token_bridge=BRIDGE, **kw)

def test_topic_encoding():
    assert sequence_topic(42) == "0x" + "0" * 62 + "2a"
    assert address_topic("0x" + "ab" * 20) == "0x" + "0" * 24 + "ab" * 20
    assert decode_amount("0x" + format(123, "x")) == 123
    assert decode_amount("0x") == 0

def test_redeemed_log_short_circuits_over_better_transfer():
    # Transfer עם סכום מדויק בטווח הראשון, Redeemed רק בטווח השני
    client = FakeEvmClient(head=10_000, logs=[
        transfer_log("0xtransfer", 5_000, 1_000_000),
        redeemed_log("0xredeem", 5_300, 42),
    ], decimals=6)
    scanner = _scanner(client)
    q = _query()
    found = None
    for c in scanner.find_candidates(q):
        if scanner.matcher.matches(q, c):
            found = c
            break
    assert found.tx_hash == "0xredeem"
    assert found.kind == "redeemed"
    assert "eth_call" not in client.calls   # ה-pool לא נבדק בכלל

def test_redeemed_filter_uses_bridge_and_sequence():
    client = FakeEvmClient(head=10_000, logs=[
        redeemed_log("0xother_seq", 5_010, 41),
        redeemed_log("0xother_contract", 5_020, 42, address="0x" + "99" * 20),
    ])
    cands = list(_scanner(client).find_candidates(_query()))
    assert cands == []
    first = client.log_filters[0]
    assert first["address"] == BRIDGE
    assert first["topics"][3] == sequence_topic(42)

def test_no_bridge_configured_filters_on_topics_only():
    client = FakeEvmClient(head=10_000, logs=[redeemed_log("0xr", 5_000, 42, address="0x" + "99" * 20)])
    scanner = EvmLogScanner(client, BlockRangeFinder(client))
    cands = list(scanner.find_candidates(_query()))
    assert [c.tx_hash for c in cands] == ["0xr"]
    assert "address" not in client.log_filters[0]

def test_transfer_pool_sorted_and_carries_decimals():
    client = FakeEvmClient(head=10_000, logs=[
        transfer_log("0xlate", 5_350, 7),
        transfer_log("0xearly_b", 4_950, 5, log_index=3),
        transfer_log("0xearly_a", 4_950, 6, log_index=1),
        transfer_log("0xnot_mine", 5_000, 1_000_000, to="0x" + "55" * 20),
    ], decimals=6)
    cands = list(_scanner(client).find_candidates(_query()))
    assert [c.tx_hash for c in cands] == ["0xearly_a", "0xearly_b", "0xlate"]
    assert all(c.kind == "transfer" and c.decimals == 6 for c in cands)
    assert [c.amount for c in cands] == [6, 5, 7]
    assert client.calls.count("eth_call") == 1

def test_fallback_matches_normalized_amount():
    # 1.5 token ב-bridge (8 decimals) מול 1.5 USDC (6 decimals) פחות עמלה קטנה
    client = FakeEvmClient(head=10_000, logs=[
        transfer_log("0xunrelated", 4_990, 90_000_000),
        transfer_log("0xredeem", 5_010, 1_499_000),
    ], decimals=6)
    scanner = _scanner(client)
    q = _query(amount=150_000_000)
    hits = [c.tx_hash for c in scanner.find_candidates(q) if scanner.matcher.matches(q, c)]
    assert hits == ["0xredeem"]

def test_unreadable_decimals_default_to_8():
    client = FakeEvmClient(head=10_000, logs=[transfer_log("0xt", 5_000, 1)], decimals=None)
    cands = list(_scanner(client).find_candidates(_query()))
    assert cands[0].decimals == 8

def test_zero_decimals_default_to_8():
    client = FakeEvmClient(head=10_000, logs=[transfer_log("0xt", 5_000, 1)], decimals=0)
    assert list(_scanner(client).find_candidates(_query()))[0].decimals == 8

def test_never_queries_beyond_head():
    client = FakeEvmClient(head=5_050)
    assert list(_scanner(client).find_candidates(_query())) == []
    assert client.log_filters
    for flt in client.log_filters:
        assert flt["fromBlock"] <= flt["toBlock"] <= 5_050

def test_invalid_recipient_rejected_before_rpc():
    client = FakeEvmClient(head=10_000)
    with pytest.raises(InvalidInputError):
        list(_scanner(client).find_candidates(_query(address="not-an-address")))
    assert client.calls == []

def test_redeemed_log_without_tx_hash_is_upstream_error():
    log = redeemed_log("0xr", 5_000, 42)
    del log["transactionHash"]
    client = FakeEvmClient(head=10_000, logs=[log])
    with pytest.raises(UpstreamUnavailableError, match="malformed redeemed log"):
        list(_scanner(client).find_candidates(_query()))

def test_transfer_log_with_non_hex_position_is_upstream_error():
    log = transfer_log("0xt", 5_000, 1)
    client = FakeEvmClient(head=10_000, logs=[log])
    log["logIndex"] = "0xzz"
    with pytest.raises(UpstreamUnavailableError, match="malformed"):
        list(_scanner(client).find_candidates(_query()))

def test_transfer_log_without_tx_hash_is_upstream_error():
    log = transfer_log("0xt", 5_000, 1)
    del log["transactionHash"]
    client = FakeEvmClient(head=10_000, logs=[log], decimals=6)
    with pytest.raises(UpstreamUnavailableError, match="malformed transfer log"):
        list(_scanner(client).find_candidates(_query()))
