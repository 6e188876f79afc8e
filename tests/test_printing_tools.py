"""
Unit Tests for token unit conversion
"""

import pytest

from utils.printing_tools import from_erc20_units, to_erc20_units


class TestToErc20Units:
    """Test human amount -> token units"""

    def test_whole_amount(self):
        assert to_erc20_units("1", 18) == 10**18

    def test_fractional_amount(self):
        assert to_erc20_units("1.5", 6) == 1_500_000

    def test_zero(self):
        assert to_erc20_units("0", 18) == 0

    def test_large_amount_keeps_precision(self):
        amount = "123456789012345678901234.123456789012345678"
        assert to_erc20_units(amount, 18) == 123456789012345678901234123456789012345678

    def test_zero_decimals(self):
        assert to_erc20_units("42", 0) == 42

    def test_too_many_decimals(self):
        with pytest.raises(ValueError):
            to_erc20_units("0.0000001", 6)

    def test_negative_amount(self):
        with pytest.raises(ValueError):
            to_erc20_units("-1", 18)

    @pytest.mark.parametrize("amount", ["abc", "", "1.2.3", "nan", "inf"])
    def test_malformed_amount(self, amount):
        with pytest.raises(ValueError):
            to_erc20_units(amount, 18)


class TestFromErc20Units:
    """Test token units -> human amount"""

    def test_whole(self):
        assert from_erc20_units(10**18, 18) == "1"

    def test_fraction(self):
        assert from_erc20_units(1_500_000, 6) == "1.5"

    def test_zero(self):
        assert from_erc20_units(0, 18) == "0"

    def test_small(self):
        assert from_erc20_units(1, 18) == "0.000000000000000001"

    def test_no_decimals(self):
        assert from_erc20_units(1200, 0) == "1200"
