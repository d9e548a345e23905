"""Conversion between display amounts and smallest token units."""

from decimal import Decimal, InvalidOperation


def _coefficient(value: Decimal) -> int:
    return int("".join(str(d) for d in value.as_tuple().digits))


def to_base_units(amount: Decimal | int | str, decimals: int) -> int:
    """Convert a display amount to an integer count of smallest units.

    Scaling is done on the integer coefficient, so the result is exact for
    any number of significant digits.

    Args:
        amount: Amount in display units (e.g. ``1`` for one whole token)
        decimals: Token decimal precision

    Returns:
        ``amount * 10**decimals`` as an exact integer

    Raises:
        TypeError: If the amount is a float or bool
        ValueError: If the amount is negative, not a number, or carries more
            fractional digits than the token supports
    """
    if isinstance(amount, (float, bool)):
        raise TypeError("Amounts must be Decimal, int or str, not float")
    if decimals < 0:
        raise ValueError(f"Decimals must be non-negative, got {decimals}")

    try:
        value = Decimal(str(amount).strip())
    except InvalidOperation as e:
        raise ValueError(f"Invalid amount: {amount!r}") from e

    if not value.is_finite():
        raise ValueError(f"Invalid amount: {amount!r}")
    if value < 0:
        raise ValueError(f"Amount must be non-negative, got {amount}")

    coefficient = _coefficient(value)
    exponent = value.as_tuple().exponent + decimals
    if exponent >= 0:
        return coefficient * 10**exponent

    # Trailing zeros past the token precision are allowed ("1.5000000" at 6)
    divisor = 10**-exponent
    if coefficient % divisor:
        raise ValueError(f"Amount {amount} has more than {decimals} decimal places")
    return coefficient // divisor


def from_base_units(value: int, decimals: int) -> Decimal:
    """Convert smallest units back to a display amount, without rounding."""
    if decimals < 0:
        raise ValueError(f"Decimals must be non-negative, got {decimals}")
    sign, digits, exponent = Decimal(value).as_tuple()
    return Decimal((sign, digits, exponent - decimals))
