"""
USDC amount helpers. Amounts are integers scaled by 10^6 everywhere except
in display strings.
"""
from decimal import ROUND_DOWN, Decimal, InvalidOperation

USDC_DECIMALS = 6
USDC_UNIT = 10 ** USDC_DECIMALS


def format_usdc(amount: int) -> str:
    """
    Render a scaled amount as a decimal string without trailing zeros.

    Args:
        amount: Amount scaled by 10^6

    Returns:
        Decimal string, e.g. 29990000 -> "29.99"
    """
    value = Decimal(amount) / USDC_UNIT
    text = format(value.quantize(Decimal(1) / USDC_UNIT), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text or "0"


def parse_usdc(value: str) -> int:
    """
    Parse a decimal string into a scaled amount, truncating extra decimals.

    Raises:
        ValueError: If the string is not a non-negative decimal number
    """
    try:
        parsed = Decimal(value.strip())
    except InvalidOperation:
        raise ValueError(f"Invalid USDC amount: {value!r}")
    if not parsed.is_finite() or parsed < 0:
        raise ValueError(f"Invalid USDC amount: {value!r}")
    return int((parsed * USDC_UNIT).to_integral_value(rounding=ROUND_DOWN))
