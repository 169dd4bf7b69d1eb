"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "123.45"
    - "R$ 123,45" (comma as decimal separator)
    - "-123.45"
    - "-$123.45"
    - "1,234.56"
    - "1.234,56"
    - "(123.45)" (negative in parentheses)

    When both separators appear, the rightmost one is the decimal point. A
    single comma on its own is read as the decimal separator.

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    # Remove whitespace
    amount_str = amount_str.strip()

    # Handle parentheses notation (negative)
    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    # Remove currency symbols and inner spaces
    amount_str = re.sub(r"R\$|[$€£¥\s]", "", amount_str)

    if "," in amount_str and "." in amount_str:
        if amount_str.rfind(",") > amount_str.rfind("."):
            amount_str = amount_str.replace(".", "").replace(",", ".")
        else:
            amount_str = amount_str.replace(",", "")
    elif amount_str.count(",") == 1:
        amount_str = amount_str.replace(",", ".")
    elif amount_str.count(",") > 1:
        amount_str = amount_str.replace(",", "")
    elif amount_str.count(".") > 1:
        amount_str = amount_str.replace(".", "")

    try:
        amount = Decimal(amount_str)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}': {e}")

    if not amount.is_finite():
        raise ValueError(f"Amount '{amount_str}' is not a finite number")
    if is_negative:
        amount = -amount
    return amount
