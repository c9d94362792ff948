"""
Display conversion of store-currency amounts.

Presentation only: converted amounts are never written back into totals.
Exchange rates are quoted against the store currency (1 store unit = rate
target units).
"""
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Mapping, Optional

from settings import STORE_CURRENCY

logger = logging.getLogger(__name__)

CURRENCY_SYMBOLS: Dict[str, str] = {
    "INR": "₹",
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "AUD": "A$",
    "CAD": "C$",
    "CHF": "CHF",
    "CNY": "¥",
    "AED": "د.إ",
    "SAR": "﷼",
    "SGD": "S$",
    "MYR": "RM",
    "THB": "฿",
    "IDR": "Rp",
    "PHP": "₱",
    "KRW": "₩",
    "NZD": "NZ$",
    "HKD": "HK$",
    "SEK": "kr",
    "NOK": "kr",
    "DKK": "kr",
    "PLN": "zł",
    "CZK": "Kč",
    "HUF": "Ft",
    "RON": "lei",
    "BGN": "лв",
    "HRK": "kn",
    "RUB": "₽",
    "TRY": "₺",
    "ZAR": "R",
    "BRL": "R$",
    "MXN": "$",
    "ARS": "$",
    "CLP": "$",
    "COP": "$",
    "PEN": "S/",
    "ILS": "₪",
    "EGP": "£",
    "NGN": "₦",
    "KES": "KSh",
    "GHS": "₵",
    "PKR": "₨",
    "BDT": "৳",
    "LKR": "Rs",
    "NPR": "Rs",
    "MMK": "K",
    "VND": "₫",
}

CURRENCY_NAMES: Dict[str, str] = {
    "INR": "Indian Rupee",
    "USD": "US Dollar",
    "EUR": "Euro",
    "GBP": "British Pound",
    "JPY": "Japanese Yen",
    "AUD": "Australian Dollar",
    "CAD": "Canadian Dollar",
    "CHF": "Swiss Franc",
    "CNY": "Chinese Yuan",
    "AED": "UAE Dirham",
    "SAR": "Saudi Riyal",
    "SGD": "Singapore Dollar",
    "MYR": "Malaysian Ringgit",
    "THB": "Thai Baht",
    "IDR": "Indonesian Rupiah",
    "PHP": "Philippine Peso",
    "KRW": "South Korean Won",
    "NZD": "New Zealand Dollar",
    "HKD": "Hong Kong Dollar",
    "SEK": "Swedish Krona",
    "NOK": "Norwegian Krone",
    "DKK": "Danish Krone",
    "PLN": "Polish Zloty",
    "CZK": "Czech Koruna",
    "HUF": "Hungarian Forint",
    "RON": "Romanian Leu",
    "BGN": "Bulgarian Lev",
    "HRK": "Croatian Kuna",
    "RUB": "Russian Ruble",
    "TRY": "Turkish Lira",
    "ZAR": "South African Rand",
    "BRL": "Brazilian Real",
    "MXN": "Mexican Peso",
    "ARS": "Argentine Peso",
    "CLP": "Chilean Peso",
    "COP": "Colombian Peso",
    "PEN": "Peruvian Sol",
    "ILS": "Israeli Shekel",
    "EGP": "Egyptian Pound",
    "NGN": "Nigerian Naira",
    "KES": "Kenyan Shilling",
    "GHS": "Ghanaian Cedi",
    "PKR": "Pakistani Rupee",
    "BDT": "Bangladeshi Taka",
    "LKR": "Sri Lankan Rupee",
    "NPR": "Nepalese Rupee",
    "MMK": "Myanmar Kyat",
    "VND": "Vietnamese Dong",
}

SYMBOL_AFTER = ("EUR", "GBP", "INR")

TWO_PLACES = Decimal("0.01")


def get_currency_symbol(currency: str) -> str:
    return CURRENCY_SYMBOLS.get(currency.upper(), currency.upper())


def get_currency_name(currency: str) -> str:
    return CURRENCY_NAMES.get(currency.upper(), currency.upper())


def _rate(rates: Mapping[str, Decimal], currency: str) -> Optional[Decimal]:
    rate = rates.get(currency)
    if rate is None:
        return None
    rate = Decimal(str(rate))
    return rate if rate > 0 else None


def convert_price(amount, from_currency: str, to_currency: str, rates: Mapping[str, Decimal]) -> Decimal:
    """Convert between two currencies through the store currency.

    A missing rate leaves the amount unconverted.
    """
    amount = Decimal(str(amount))
    from_currency, to_currency = from_currency.upper(), to_currency.upper()
    if from_currency == to_currency:
        return amount

    from_rate = Decimal(1) if from_currency == STORE_CURRENCY else _rate(rates, from_currency)
    to_rate = Decimal(1) if to_currency == STORE_CURRENCY else _rate(rates, to_currency)
    if from_rate is None or to_rate is None:
        logger.warning("No exchange rate for %s -> %s, showing unconverted amount", from_currency, to_currency)
        return amount
    return amount / from_rate * to_rate


def multiplier_for(currency: str, multipliers: Optional[Mapping[str, Decimal]]) -> Decimal:
    """Per-currency price uplift; the store currency is never scaled."""
    currency = currency.upper()
    if currency == STORE_CURRENCY or not multipliers:
        return Decimal(1)
    value = multipliers.get(currency)
    if value is None or Decimal(str(value)) <= 0:
        return Decimal(1)
    return Decimal(str(value))


def convert(
    amount,
    to_currency: str,
    rates: Mapping[str, Decimal],
    multipliers: Optional[Mapping[str, Decimal]] = None,
    from_currency: str = STORE_CURRENCY,
) -> Decimal:
    amount = Decimal(str(amount))
    if not rates:
        logger.warning("Exchange rates not loaded, showing unconverted amount")
        return amount
    if from_currency.upper() == STORE_CURRENCY:
        amount = amount * multiplier_for(to_currency, multipliers)
    return convert_price(amount, from_currency, to_currency, rates)


def format_price(amount, currency: str) -> str:
    currency = currency.upper()
    value = Decimal(str(amount)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    symbol = get_currency_symbol(currency)
    if currency in SYMBOL_AFTER:
        return f"{value:,.2f} {symbol}"
    return f"{symbol}{value:,.2f}"


def format_amount(
    amount,
    to_currency: str,
    rates: Mapping[str, Decimal],
    multipliers: Optional[Mapping[str, Decimal]] = None,
    from_currency: str = STORE_CURRENCY,
) -> str:
    return format_price(convert(amount, to_currency, rates, multipliers, from_currency), to_currency)
