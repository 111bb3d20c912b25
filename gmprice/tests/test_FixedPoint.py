"""Unit tests for FixedPoint."""

import pytest

from gmprice.src.FixedPoint import to_usd

ONE_USD = 10**30


class TestToUsd:
    """Test 30-decimal to USD conversion."""

    def test_whole_and_half(self) -> None:
        """Simple values should convert exactly."""
        assert to_usd(ONE_USD) == 1.0
        assert to_usd(1_500000_000000_000000_000000_000000) == 1.5
        assert to_usd(2 * ONE_USD) == 2.0

    def test_zero(self) -> None:
        """Zero should convert to zero."""
        assert to_usd(0) == 0.0

    def test_truncates_to_four_decimals(self) -> None:
        """Digits beyond the 4th decimal are dropped, not rounded."""
        assert to_usd(1234567890123456789012345678901234) == 1234.5678
        assert to_usd(19999 * 10**26 + 99 * 10**24) == 1.9999

    def test_matches_integer_division(self) -> None:
        """Result equals floor(v / 10^26) / 10^4 for non-negative values."""
        for value in [1, 10**26 - 1, 10**26, 3 * 10**29 + 7, 987654321 * 10**27]:
            assert to_usd(value) == (value // 10**26) / 10**4

    def test_below_precision(self) -> None:
        """Values below 0.0001 USD should truncate to zero."""
        assert to_usd(10**26 - 1) == 0.0

    def test_negative_truncates_toward_zero(self) -> None:
        """Negative values truncate on the magnitude, keeping the sign."""
        assert to_usd(-1_555590_000000_000000_000000_000000) == -1.5555
        assert to_usd(-ONE_USD) == -1.0
        assert to_usd(-(10**26 - 1)) == 0.0

    def test_large_values_keep_precision(self) -> None:
        """Large pool values should not lose the integer part."""
        pool_value = 123_456_789 * ONE_USD + 25 * 10**26
        assert to_usd(pool_value) == 123456789.0025

    def test_rejects_non_integers(self) -> None:
        """Floats and bools should be rejected."""
        with pytest.raises(TypeError):
            to_usd(1.5)  # type: ignore[arg-type]
        with pytest.raises(TypeError):
            to_usd(True)
