import pytest

from tokenwatch.utils import format_timestamp, hex_to_decimal, is_valid_address, normalize_address, to_eth, to_gwei


def test_hex_to_decimal():
    assert hex_to_decimal("0x1a") == 26
    assert hex_to_decimal("ff") == 255
    assert hex_to_decimal("0x") == 0
    assert hex_to_decimal("") == 0


def test_hex_to_decimal_rejects_garbage():
    with pytest.raises(ValueError):
        hex_to_decimal("0xzz")


def test_to_eth_and_gwei():
    assert to_eth(hex(10 ** 18)) == 1.0
    assert to_eth("0xde0b6b3a7640000") == 1.0
    assert to_gwei(hex(25 * 10 ** 9)) == 25.0


def test_address_helpers():
    assert is_valid_address("0x" + "aB" * 20)
    assert not is_valid_address("0x" + "a" * 39)
    assert not is_valid_address("0x" + "g" * 40)
    assert not is_valid_address(None)
    assert normalize_address("  0xABC ") == "0xabc"


def test_format_timestamp():
    assert format_timestamp(0) == "1970-01-01 00:00:00 UTC"
    assert format_timestamp(0, "America/New_York") == "1969-12-31 19:00:00 EST"
