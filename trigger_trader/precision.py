"""
Precision handling for bitbank order amounts

bitbank accepts amounts as decimal strings. Orders are always sent with
exactly 6 fractional digits, whatever precision the input carried.
"""
from decimal import Decimal, ROUND_DOWN, ROUND_HALF_EVEN

AMOUNT_DECIMALS = 6


def format_amount(amount, rounding: str = ROUND_HALF_EVEN) -> str:
    """
    Format an order amount with exactly 6 fractional digits.

    Args:
        amount: Decimal, int, float or numeric string
        rounding: decimal rounding mode (nearest by default)

    Returns:
        Fixed-point string, trailing zeros kept

    Examples:
        >>> format_amount(Decimal("70000") / Decimal("4900000"))
        '0.014286'
        >>> format_amount(1)
        '1.000000'
    """
    decimal_amount = amount if isinstance(amount, Decimal) else Decimal(str(amount))

    quantize_str = "0." + "0" * AMOUNT_DECIMALS
    rounded = decimal_amount.quantize(Decimal(quantize_str), rounding=rounding)

    # format() instead of str() so tiny values never switch to exponent notation
    return format(rounded, "f")


def format_held_amount(amount) -> str:
    """Format an amount the account already holds, never rounding above it."""
    return format_amount(amount, rounding=ROUND_DOWN)
