import pytest
from solders.pubkey import Pubkey

from titan_swap_client.pubkeys import parse_bytes, parse_pubkey

SOL_MINT = "So11111111111111111111111111111111111111112"


def test_parse_pubkey_forms():
    key = Pubkey.from_string(SOL_MINT)
    assert parse_pubkey(SOL_MINT) == key
    assert parse_pubkey(key) is key
    assert parse_pubkey(bytes(key)) == key
    assert parse_pubkey(list(bytes(key))) == key


@pytest.mark.parametrize("value", ["not-base58-0OIl", "1111", [1, 2, 3], [None] * 32, 42])
def test_parse_pubkey_rejects_bad_input_with_value_error(value):
    with pytest.raises(ValueError):
        parse_pubkey(value)


def test_parse_bytes_forms():
    assert parse_bytes("AQID") == bytes([1, 2, 3])
    assert parse_bytes([1, 2, 3]) == bytes([1, 2, 3])
    assert parse_bytes(b"\x01") == b"\x01"
    with pytest.raises(ValueError):
        parse_bytes("not base64!")
