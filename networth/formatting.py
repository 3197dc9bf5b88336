"""
Currency display formatting and the currency catalogue.

format_currency renders an amount the way the currency's home locale
writes it (grouping, decimal mark, symbol position). Currencies without
an entry get a generic international format: "MYR 1,234.56".
"""

import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, localcontext

from networth.models.currency import normalize_code


NBSP = "\u00a0"


CURRENCY_NAMES = {
    "USD": "US Dollar",
    "EUR": "Euro",
    "GBP": "British Pound",
    "SGD": "Singapore Dollar",
    "JPY": "Japanese Yen",
    "CAD": "Canadian Dollar",
    "AUD": "Australian Dollar",
    "CHF": "Swiss Franc",
    "CNY": "Chinese Yuan",
    "INR": "Indian Rupee",
    "KRW": "South Korean Won",
    "THB": "Thai Baht",
    "MYR": "Malaysian Ringgit",
    "IDR": "Indonesian Rupiah",
    "PHP": "Philippine Peso",
    "VND": "Vietnamese Dong",
    "HKD": "Hong Kong Dollar",
    "TWD": "Taiwan Dollar",
    "NZD": "New Zealand Dollar",
    "SEK": "Swedish Krona",
    "NOK": "Norwegian Krone",
    "DKK": "Danish Krone",
    "PLN": "Polish Złoty",
    "CZK": "Czech Koruna",
    "HUF": "Hungarian Forint",
    "RON": "Romanian Leu",
    "BGN": "Bulgarian Lev",
    "HRK": "Croatian Kuna",
    "RUB": "Russian Ruble",
    "TRY": "Turkish Lira",
    "BRL": "Brazilian Real",
    "MXN": "Mexican Peso",
    "ARS": "Argentine Peso",
    "CLP": "Chilean Peso",
    "COP": "Colombian Peso",
    "PEN": "Peruvian Sol",
    "UYU": "Uruguayan Peso",
    "ZAR": "South African Rand",
    "EGP": "Egyptian Pound",
    "NGN": "Nigerian Naira",
    "KES": "Kenyan Shilling",
    "GHS": "Ghanaian Cedi",
    "MAD": "Moroccan Dirham",
    "TND": "Tunisian Dinar",
    "AED": "UAE Dirham",
    "SAR": "Saudi Riyal",
    "QAR": "Qatari Riyal",
    "KWD": "Kuwaiti Dinar",
    "BHD": "Bahraini Dinar",
    "OMR": "Omani Rial",
    "JOD": "Jordanian Dinar",
    "LBP": "Lebanese Pound",
    "ILS": "Israeli Shekel",
    "LYD": "Libyan Dinar",
    "DZD": "Algerian Dinar",
    "XOF": "West African CFA Franc",
    "XAF": "Central African CFA Franc",
    "UGX": "Ugandan Shilling",
    "TZS": "Tanzanian Shilling",
    "ZMW": "Zambian Kwacha",
    "BWP": "Botswana Pula",
    "NAD": "Namibian Dollar",
    "SZL": "Swazi Lilangeni",
    "LSL": "Lesotho Loti",
    "MUR": "Mauritian Rupee",
    "SCR": "Seychellois Rupee",
    "MVR": "Maldivian Rufiyaa",
    "BDT": "Bangladeshi Taka",
    "NPR": "Nepalese Rupee",
    "PKR": "Pakistani Rupee",
    "LKR": "Sri Lankan Rupee",
    "MMK": "Myanmar Kyat",
    "KHR": "Cambodian Riel",
    "LAK": "Lao Kip",
    "MNT": "Mongolian Tögrög",
    "KZT": "Kazakhstani Tenge",
    "UZS": "Uzbekistani Som",
    "TJS": "Tajikistani Somoni",
    "KGS": "Kyrgyzstani Som",
    "TMT": "Turkmenistan Manat",
    "AZN": "Azerbaijani Manat",
    "GEL": "Georgian Lari",
    "AMD": "Armenian Dram",
    "BYN": "Belarusian Ruble",
    "MDL": "Moldovan Leu",
    "UAH": "Ukrainian Hryvnia",
}


@dataclass(frozen=True)
class CurrencyFormat:
    """How one locale writes amounts of one currency."""
    symbol: str
    decimals: int = 2
    decimal_mark: str = "."
    group_mark: str = ","
    symbol_after: bool = False
    separator: str = ""
    lakh_grouping: bool = False


# Locale conventions: USD en-US, EUR de-DE, GBP en-GB, JPY ja-JP, CNY zh-CN,
# INR en-IN, KRW ko-KR, SGD en-SG, CAD en-CA, AUD en-AU, TWD zh-TW
CURRENCY_FORMATS = {
    "USD": CurrencyFormat(symbol="$"),
    "EUR": CurrencyFormat(
        symbol="€", decimal_mark=",", group_mark=".", symbol_after=True, separator=NBSP
    ),
    "GBP": CurrencyFormat(symbol="£"),
    "JPY": CurrencyFormat(symbol="￥", decimals=0),
    "CNY": CurrencyFormat(symbol="¥"),
    "INR": CurrencyFormat(symbol="₹", lakh_grouping=True),
    "KRW": CurrencyFormat(symbol="₩", decimals=0),
    "SGD": CurrencyFormat(symbol="$"),
    "CAD": CurrencyFormat(symbol="$"),
    "AUD": CurrencyFormat(symbol="$"),
    "TWD": CurrencyFormat(symbol="$"),
}


def _generic_format(code: str) -> CurrencyFormat:
    return CurrencyFormat(symbol=code, separator=NBSP)


def _group(digits: str, mark: str, lakh: bool) -> str:
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    size = 2 if lakh else 3
    groups = []
    while head:
        groups.insert(0, head[-size:])
        head = head[:-size]
    return mark.join(groups + [tail])


def _number(amount: float, fmt: CurrencyFormat) -> str:
    if math.isnan(amount):
        return "NaN"
    if math.isinf(amount):
        return "∞"

    exponent = Decimal(1).scaleb(-fmt.decimals)
    value = abs(Decimal(repr(amount)))
    # Quantizing needs room for every integer digit plus the decimals
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() + fmt.decimals + 2)
        rounded = value.quantize(exponent, rounding=ROUND_HALF_UP)
    integer, _, fraction = f"{rounded:f}".partition(".")

    text = _group(integer, fmt.group_mark, fmt.lakh_grouping)
    if fmt.decimals:
        text += fmt.decimal_mark + fraction
    return text


def format_currency(amount: float, currency: str) -> str:
    """
    Render an amount in a currency's local style.

    Unknown codes never fail; they use the generic "CODE 1,234.56" form.
    """
    code = normalize_code(currency)
    fmt = CURRENCY_FORMATS.get(code) or _generic_format(code)

    number = _number(amount, fmt)
    sign = "-" if amount < 0 else ""
    if fmt.symbol_after:
        return f"{sign}{number}{fmt.separator}{fmt.symbol}"
    return f"{sign}{fmt.symbol}{fmt.separator}{number}"


def currency_name(code: str) -> str:
    """English name of a currency; the code itself when unknown."""
    code = normalize_code(code)
    return CURRENCY_NAMES.get(code, code)


def get_available_currencies() -> list[dict[str, str]]:
    """All named currencies as {code, name}, sorted by name."""
    currencies = [{"code": code, "name": name} for code, name in CURRENCY_NAMES.items()]
    return sorted(currencies, key=lambda currency: currency["name"])
