"""FixedPoint: Conversion of 30-decimal USD integers to display values.

Contract values (market token price, pool value) are signed integers scaled
by 10^30. They are converted to a float truncated to 4 decimal places:

    1. Split the magnitude into whole part and remainder (divmod by 10^30)
    2. Scale the remainder to 4 digits with integer division (truncation)
    3. Reapply the sign, so negatives truncate toward zero
    4. Divide the 4-digit fixed value by 10^4 (the only float step)

.. code-block:: python

    >>> to_usd(1_500000_000000_000000_000000_000000)
    1.5
    >>> to_usd(-1_555590_000000_000000_000000_000000)
    -1.5555
"""

USD_DECIMALS = 30
DISPLAY_DECIMALS = 4

_USD_SCALE = 10**USD_DECIMALS
_DISPLAY_SCALE = 10**DISPLAY_DECIMALS


def to_usd(value: int) -> float:
    """Convert a 30-decimal scaled integer to a USD float.

    :param value: Signed integer scaled by 10^30.
    :returns: ``value / 10^30`` truncated toward zero to 4 decimal places.
    :raises TypeError: If value is not an integer.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"Expected int, got {type(value).__name__}")

    sign = -1 if value < 0 else 1
    whole, remainder = divmod(abs(value), _USD_SCALE)
    fraction = remainder * _DISPLAY_SCALE // _USD_SCALE

    # Integer / integer division in Python is correctly rounded
    return sign * (whole * _DISPLAY_SCALE + fraction) / _DISPLAY_SCALE
