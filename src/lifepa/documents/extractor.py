"""Structured extraction of classified documents, with a regex fallback."""

import logging
import re
from datetime import datetime
from typing import Any

from lifepa.config import get_settings
from lifepa.documents.classifier import CompletionClient, classify_document
from lifepa.documents.json_extract import extract_json_object
from lifepa.documents.prompts import EXTRACTION_SYSTEM, extraction_prompt
from lifepa.documents.text_parsing import (
    detect_category,
    extract_currency,
    extract_date,
    extract_items,
    extract_merchant_name,
    extract_total_amount,
    parse_amount,
    parse_date_string,
)
from lifepa.documents.types import DocumentType, ExtractedDocument, LineItem
from lifepa.errors import FieldError, ValidationError
from lifepa.models import ChatMessage
from lifepa.stores import PersistenceStore

logger = logging.getLogger(__name__)

_SENDER_RE = re.compile(r"^([A-Za-z][A-Za-z &'-]*[A-Za-z])")
_AMOUNT_RE = re.compile(
    r"(?:payment|total|amount|due|balance)[\s:£$€]*(\d+[.,]\d{2})", re.IGNORECASE
)
_DATE_VALUE = r"(\d{1,2}[-/\s][A-Za-z]+[-/\s]\d{2,4}|\d{1,2}[-/]\d{1,2}[-/]\d{2,4})"
_LABELLED_DATE_RE = re.compile(r"(?:date|issued|statement)[\s:]*" + _DATE_VALUE, re.IGNORECASE)
_DUE_DATE_RE = re.compile(r"(?:due|pay by|payment due)[\s:]*" + _DATE_VALUE, re.IGNORECASE)
_REF_RE = re.compile(
    r"(?:account|reference|invoice)[\s:]*(?:no\.?|number)?[\s:]*(\d+)", re.IGNORECASE
)

_CURRENCY_SYMBOLS = {"£": "GBP", "€": "EUR", "$": "USD"}


def _text(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _items(value: object) -> list[LineItem]:
    if not isinstance(value, list):
        return []
    items: list[LineItem] = []
    for raw in value:
        if isinstance(raw, dict) and _text(raw.get("name")):
            quantity = parse_amount(raw.get("quantity"))
            items.append(
                LineItem(
                    name=str(raw["name"]).strip(),
                    quantity=int(quantity) if quantity else 1,
                    price=parse_amount(raw.get("price")) or 0.0,
                )
            )
        elif isinstance(raw, str) and raw.strip():
            items.append(LineItem(name=raw.strip()))
    return items


def normalize_extraction(parsed: dict[str, Any], document_type: DocumentType) -> ExtractedDocument:
    """Map the model's camelCase JSON onto an ExtractedDocument."""
    settings = get_settings()
    issue_date = parse_date_string(parsed.get("issueDate"))
    doc = ExtractedDocument(
        document_type=document_type,
        sender=_text(parsed.get("sender")) or _text(parsed.get("merchantName")) or "Unknown",
        date=parse_date_string(parsed.get("date")) or issue_date,
        issue_date=issue_date,
        due_date=parse_date_string(parsed.get("dueDate")),
        description=_text(parsed.get("description")) or "",
        reference_number=_text(parsed.get("referenceNumber")),
        category=_text(parsed.get("category")),
        items=_items(parsed.get("items")),
    )
    raw_amount = parsed.get("amountDue")
    if _text(raw_amount) is None:
        raw_amount = parsed.get("totalAmount")
    if raw_amount is not None or "amountDue" in parsed or "totalAmount" in parsed:
        doc.total_amount = parse_amount(raw_amount) or 0.0
        doc.currency = _text(parsed.get("currency")) or settings.default_currency

    if document_type == DocumentType.MOT_DOCUMENT:
        doc.expiry_date = parse_date_string(parsed.get("expiryDate"))
        doc.vehicle_reg = _text(parsed.get("vehicleReg"))
        doc.mileage = _text(parsed.get("mileage"))
        doc.test_result = _text(parsed.get("testResult"))
    if document_type == DocumentType.CONTACT:
        doc.name = _text(parsed.get("name"))
        doc.company = _text(parsed.get("company"))
        doc.email = _text(parsed.get("email"))
        doc.phone = _text(parsed.get("phone"))
        doc.address = _text(parsed.get("address"))
    return doc


def fallback_extraction(text: str, document_type: DocumentType) -> ExtractedDocument:
    settings = get_settings()
    first_line = next((line.strip() for line in text.splitlines() if line.strip()), "")
    sender_match = _SENDER_RE.match(first_line)
    sender = sender_match.group(1).strip() if sender_match else extract_merchant_name(text)

    amount_match = _AMOUNT_RE.search(text)
    total = parse_amount(amount_match.group(1)) if amount_match else None
    if total is None:
        total = extract_total_amount(text)

    symbol = re.search(r"[£$€]", text)
    if symbol:
        currency = _CURRENCY_SYMBOLS[symbol.group(0)]
    else:
        currency = extract_currency(text, default=settings.default_currency)

    date_match = _LABELLED_DATE_RE.search(text)
    doc_date = parse_date_string(date_match.group(1)) if date_match else None
    if doc_date is None:
        doc_date = extract_date(text)
    due_match = _DUE_DATE_RE.search(text)
    ref_match = _REF_RE.search(text)
    items = extract_items(text)

    if document_type == DocumentType.UTILITY_BILL:
        category = "Utilities"
    else:
        category = detect_category(sender, items)

    return ExtractedDocument(
        document_type=document_type,
        sender=sender or "Unknown",
        date=doc_date,
        due_date=parse_date_string(due_match.group(1)) if due_match else None,
        description=text[:100],
        total_amount=total if total is not None else 0.0,
        currency=currency,
        category=category,
        reference_number=ref_match.group(1) if ref_match else None,
        items=items,
        used_fallback=True,
    )


async def extract_document_data(
    text: str,
    document_type: DocumentType,
    client: CompletionClient,
    *,
    now: datetime | None = None,
) -> ExtractedDocument:
    if not text or not text.strip():
        raise ValidationError(errors=[FieldError("text", "No text provided for extraction")])
    today = (now or datetime.now()).strftime("%Y-%m-%d")
    messages = [
        ChatMessage.system(EXTRACTION_SYSTEM),
        ChatMessage.user(extraction_prompt(text, document_type, today)),
    ]
    try:
        response = await client.get_completion(messages)
        parsed = extract_json_object(response)
        return normalize_extraction(parsed, document_type)
    except Exception as exc:
        logger.warning("AI extraction failed for %s, using regex fallback: %s", document_type, exc)
        return fallback_extraction(text, document_type)


async def parse_document(
    text: str, client: CompletionClient, *, now: datetime | None = None
) -> ExtractedDocument:
    """Classify then extract ``text``, stamping the source text and parse time."""
    document_type = await classify_document(text, client)
    logger.info("document classified as %s", document_type.value)
    doc = await extract_document_data(text, document_type, client, now=now)
    doc.document_type = document_type
    doc.extracted_text = text
    doc.parsed_at = now or datetime.now()
    return doc


def save_document(store: PersistenceStore, user_id: str, document: ExtractedDocument) -> str:
    record = document.model_dump(mode="json")
    record["user_id"] = user_id
    return store.insert("documents", record)
