"""Document classification: AI first, keyword fallback second."""

import logging
from typing import Protocol

from lifepa.config import get_settings
from lifepa.documents.prompts import CLASSIFICATION_SYSTEM, classification_prompt
from lifepa.documents.types import DocumentType
from lifepa.models import ChatMessage

logger = logging.getLogger(__name__)


class CompletionClient(Protocol):
    async def get_completion(
        self,
        messages: list[ChatMessage],
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str: ...


# Checked in order; the first matching substring wins.
_RESPONSE_MATCHES: tuple[tuple[tuple[str, ...], DocumentType], ...] = (
    (("invoice",), DocumentType.INVOICE),
    (("utility", "bill"), DocumentType.UTILITY_BILL),
    (("receipt",), DocumentType.RECEIPT),
    (("contact",), DocumentType.CONTACT),
    (("mot",), DocumentType.MOT_DOCUMENT),
    (("insurance",), DocumentType.INSURANCE),
    (("bank",), DocumentType.BANK_STATEMENT),
    (("tax",), DocumentType.TAX_DOCUMENT),
    (("other",), DocumentType.OTHER),
)

_FALLBACK_KEYWORDS: tuple[tuple[tuple[str, ...], DocumentType], ...] = (
    (("invoice", "inv no"), DocumentType.INVOICE),
    (("water", "gas", "electric", "council tax"), DocumentType.UTILITY_BILL),
    (("mot", "vehicle"), DocumentType.MOT_DOCUMENT),
    (("total", "receipt"), DocumentType.RECEIPT),
    (("insurance", "policy"), DocumentType.INSURANCE),
)


def parse_classification_response(response: str) -> DocumentType | None:
    normalized = (response or "").strip().lower()
    if not normalized:
        return None
    for needles, document_type in _RESPONSE_MATCHES:
        if any(needle in normalized for needle in needles):
            return document_type
    return None


def fallback_classification(text: str) -> DocumentType:
    lower = (text or "").lower()
    for needles, document_type in _FALLBACK_KEYWORDS:
        if any(needle in lower for needle in needles):
            return document_type
    return DocumentType.OTHER


async def classify_document(text: str, client: CompletionClient) -> DocumentType:
    """Classify ``text``. Always returns a DocumentType and never raises."""
    if not text or not text.strip():
        return DocumentType.OTHER

    prefix_chars = get_settings().classify_prefix_chars
    messages = [
        ChatMessage.system(CLASSIFICATION_SYSTEM),
        ChatMessage.user(classification_prompt(text, prefix_chars)),
    ]
    try:
        response = await client.get_completion(messages)
    except Exception as exc:
        logger.warning("classification via AI failed, using keywords: %s", exc)
        return fallback_classification(text)

    document_type = parse_classification_response(response)
    if document_type is None:
        logger.info("unrecognised classification %r, using keywords", response[:80])
        return fallback_classification(text)
    return document_type
