import pytest

from utils.solana_utils import (
    SOL_MINT,
    from_base_units,
    is_address_shaped,
    is_valid_address,
    lamports_to_sol,
    parse_positive_amount,
    sol_to_lamports,
    to_base_units,
)


def test_address_shape():
    assert is_address_shaped(SOL_MINT) is True
    assert is_address_shaped("1" * 32) is True
    assert is_address_shaped("1" * 31) is False
    assert is_address_shaped("1" * 45) is False
    assert is_address_shaped("0" * 40) is False
    assert is_address_shaped("") is False


def test_shaped_but_not_a_public_key():
    assert is_address_shaped("z" * 44) is True
    assert is_valid_address("z" * 44) is False
    assert is_valid_address(SOL_MINT) is True


@pytest.mark.parametrize("text,expected", [
    ("1", 1.0),
    ("0.5", 0.5),
    ("0,25", 0.25),
    (" 3 ", 3.0),
    ("1000000", 1_000_000.0),
])
def test_parse_positive_amount(text, expected):
    assert parse_positive_amount(text) == expected


@pytest.mark.parametrize("text", ["abc", "", "0", "-1", "nan", "inf", "1e", "1e400", "1e-400", None])
def test_parse_rejects(text):
    assert parse_positive_amount(text) is None


def test_base_units_truncate():
    assert to_base_units(0.1234567891, 9) == 123_456_789
    assert to_base_units(1.999999, 6) == 1_999_999
    assert to_base_units(0.0000001, 6) == 0
    assert from_base_units(1_500_000, 6) == 1.5


def test_sol_conversions():
    assert sol_to_lamports(1.5) == 1_500_000_000
    assert sol_to_lamports(0.1) == 100_000_000
    assert lamports_to_sol(2_500_000) == 0.0025
