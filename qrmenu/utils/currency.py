# qrmenu/utils/currency.py
from typing import Optional
import logging

logger = logging.getLogger(__name__)

DEFAULT_CURRENCY_SYMBOL = "₺"


def format_price(raw: Optional[str], symbol: str = DEFAULT_CURRENCY_SYMBOL) -> str:
    """
    Normalize a submitted price so it always carries the currency prefix

    Args:
        raw: Price as typed in the admin form, e.g. "120", "₺120" or " 120,50 "
        symbol: Currency symbol to prefix

    Returns:
        The price with exactly one leading symbol, or "" for an empty input
    """
    if raw is None:
        return ""

    price = raw.strip()
    if not price:
        return ""

    if price.startswith(symbol):
        return price

    return f"{symbol}{price}"

