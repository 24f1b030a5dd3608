"""Deterministic parsers for OCR text: amounts, dates, merchants, items, currency."""

import re
from datetime import date, datetime

from lifepa.documents.types import LineItem

_AMOUNT_PATTERNS = (
    re.compile(r"(?:total[\s\w]*(?:amount|due|payable))[\s:£$€]*(\d+[.,]\d{2})", re.IGNORECASE),
    re.compile(r"(?:amount[\s\w]*(?:due|payable|owing))[\s:£$€]*(\d+[.,]\d{2})", re.IGNORECASE),
    re.compile(r"[£$€]\s*(\d+[.,]\d{2})"),
    re.compile(r"(?:total|amount|sum|balance|due)[\s:$£€]*(\d+[.,]\d{2})", re.IGNORECASE),
    re.compile(r"(\d+[.,]\d{2})\s*(?:usd|dollars?|gbp|pounds?|eur|euros?)", re.IGNORECASE),
)

_DATE_PATTERNS = (
    re.compile(r"\d{4}[/-]\d{1,2}[/-]\d{1,2}"),
    re.compile(r"\d{1,2}[/-]\d{1,2}[/-]\d{2,4}"),
    re.compile(r"\d{1,2}(?:st|nd|rd|th)?[\s-]+[A-Za-z]{3,9}[\s,-]+\d{2,4}"),
    re.compile(r"[A-Za-z]{3,9}\s+\d{1,2}(?:st|nd|rd|th)?,?\s+\d{2,4}"),
)

_DATE_FORMATS = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%d/%m/%Y",
    "%d-%m-%Y",
    "%d/%m/%y",
    "%d-%m-%y",
    "%m/%d/%Y",
    "%d %B %Y",
    "%d %b %Y",
    "%d-%b-%Y",
    "%d-%B-%Y",
    "%d %b %y",
    "%B %d %Y",
    "%b %d %Y",
    "%B %d, %Y",
    "%b %d, %Y",
)

_ORDINAL_RE = re.compile(r"(\d{1,2})(?:st|nd|rd|th)\b", re.IGNORECASE)
_ITEM_RE = re.compile(r"^(.+?)\s+(?:x?(\d+))?\s*(\d+[.,]\d{2})$", re.IGNORECASE)
_MERCHANT_SKIP_RE = re.compile(
    r"vat|registration|number|^\d{3,}|plc|ltd|limited|head office|street|avenue|road",
    re.IGNORECASE,
)
_MERCHANT_SKIP_WORDS = (
    "receipt",
    "invoice",
    "bill",
    "date",
    "time",
    "total",
    "subtotal",
    "tax",
    "looking after",
)

CATEGORY_KEYWORDS: dict[str, tuple[str, ...]] = {
    "Groceries": ("grocery", "supermarket", "market", "food", "produce", "tesco", "sainsbury"),
    "Dining": ("restaurant", "cafe", "coffee", "pizza", "burger", "bar", "diner", "bistro"),
    "Transport": ("fuel", "petrol", "uber", "taxi", "parking", "transit", "bus", "train"),
    "Shopping": ("shop", "store", "retail", "mall", "amazon", "clothing", "electronics"),
    "Healthcare": ("pharmacy", "medical", "doctor", "clinic", "hospital", "health", "dental"),
    "Entertainment": ("cinema", "movie", "theater", "theatre", "ticket", "concert", "game"),
    "Utilities": ("electric", "water", "gas", "internet", "phone", "utility", "bill"),
}

_CURRENCY_PATTERNS = (
    ("GBP", re.compile(r"£|\bgbp\b|\bpounds?\b", re.IGNORECASE)),
    ("EUR", re.compile(r"€|\beur\b|\beuros?\b", re.IGNORECASE)),
    ("USD", re.compile(r"\$|\busd\b|\bdollars?\b", re.IGNORECASE)),
    ("CAD", re.compile(r"\bcad\b|\bcanadian\b", re.IGNORECASE)),
)


def parse_amount(value: object) -> float | None:
    """Coerce ``value`` to a float, accepting comma decimals and currency symbols."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return float(value)
    if not isinstance(value, str):
        return None
    cleaned = re.sub(r"[^\d,.\-]", "", value)
    if "," in cleaned and "." not in cleaned:
        cleaned = cleaned.replace(",", ".")
    else:
        cleaned = cleaned.replace(",", "")
    try:
        return float(cleaned)
    except ValueError:
        return None


def parse_date_string(value: object) -> date | None:
    """Parse a date in any of the supported layouts; None when nothing fits."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    text = _ORDINAL_RE.sub(r"\1", value.strip())
    text = re.sub(r"\s+", " ", text)
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def extract_total_amount(text: str) -> float | None:
    highest = 0.0
    for pattern in _AMOUNT_PATTERNS:
        for match in pattern.finditer(text or ""):
            amount = parse_amount(match.group(1))
            if amount is not None and amount > highest:
                highest = amount
    return highest if highest > 0 else None


def extract_date(text: str) -> date | None:
    for pattern in _DATE_PATTERNS:
        for match in pattern.finditer(text or ""):
            parsed = parse_date_string(match.group(0))
            if parsed is not None:
                return parsed
    return None


def extract_merchant_name(text: str) -> str:
    lines = [line.strip() for line in (text or "").splitlines() if line.strip()]
    if not lines:
        return "Unknown Merchant"
    for line in lines[:10]:
        if len(line) < 3 or line.isdigit():
            continue
        if _MERCHANT_SKIP_RE.search(line):
            continue
        lower = line.lower()
        if any(word in lower for word in _MERCHANT_SKIP_WORDS):
            continue
        if 3 < len(line) < 50:
            cleaned = re.sub(r"[^\w\s&'-]", "", re.sub(r"\s+", " ", line)).strip()
            return cleaned[:50]
    return re.sub(r"\s+", " ", lines[0])[:50]


def extract_items(text: str) -> list[LineItem]:
    items: list[LineItem] = []
    for line in (text or "").splitlines():
        match = _ITEM_RE.match(line.strip())
        if not match:
            continue
        name = match.group(1).strip()
        price = parse_amount(match.group(3))
        if name and price is not None:
            quantity = int(match.group(2)) if match.group(2) else 1
            items.append(LineItem(name=name, quantity=quantity, price=price))
    return items


def detect_category(merchant_name: str, items: list[LineItem] | None = None) -> str:
    search = " ".join([merchant_name or "", *(item.name for item in items or [])]).lower()
    for category, keywords in CATEGORY_KEYWORDS.items():
        if any(keyword in search for keyword in keywords):
            return category
    return "Other"


def extract_currency(text: str, default: str = "USD") -> str:
    for code, pattern in _CURRENCY_PATTERNS:
        if pattern.search(text or ""):
            return code
    return default
