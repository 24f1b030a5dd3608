import pytest

from lifepa.documents.classifier import (
    classify_document,
    fallback_classification,
    parse_classification_response,
)
from lifepa.documents.types import DocumentType
from lifepa.errors import TransientNetworkError


@pytest.mark.parametrize(
    ("response", "expected"),
    [
        ("Invoice", DocumentType.INVOICE),
        ("Utility Bill", DocumentType.UTILITY_BILL),
        ("This looks like a receipt.", DocumentType.RECEIPT),
        ("MOT Document", DocumentType.MOT_DOCUMENT),
        ("Insurance Document", DocumentType.INSURANCE),
        ("Bank Statement", DocumentType.BANK_STATEMENT),
        ("Tax Document", DocumentType.TAX_DOCUMENT),
        ("Other", DocumentType.OTHER),
        ("banana", None),
        ("", None),
    ],
)
def test_parse_classification_response(response: str, expected: DocumentType | None) -> None:
    assert parse_classification_response(response) == expected


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("INV NO 4471", DocumentType.INVOICE),
        ("British Gas quarterly statement", DocumentType.UTILITY_BILL),
        ("Vehicle test certificate", DocumentType.MOT_DOCUMENT),
        ("Total 4.50 thank you", DocumentType.RECEIPT),
        ("Your policy schedule", DocumentType.INSURANCE),
        ("Dear friend", DocumentType.OTHER),
    ],
)
def test_fallback_classification(text: str, expected: DocumentType) -> None:
    assert fallback_classification(text) == expected


@pytest.mark.asyncio
async def test_council_tax_falls_back_when_ai_fails(completion_client_factory) -> None:
    client = completion_client_factory([TransientNetworkError("offline")])
    text = "Westminster Council\nCouncil Tax 2025/26\nAmount due £150.00"
    assert await classify_document(text, client) == DocumentType.UTILITY_BILL


@pytest.mark.asyncio
async def test_unrecognised_answer_falls_back(completion_client_factory) -> None:
    client = completion_client_factory(["I am not sure"])
    assert await classify_document("Vehicle MOT pass", client) == DocumentType.MOT_DOCUMENT


@pytest.mark.asyncio
async def test_ai_answer_used_and_prompt_truncated(
    completion_client_factory, monkeypatch: pytest.MonkeyPatch
) -> None:
    from lifepa.config import get_settings

    monkeypatch.setenv("CLASSIFY_PREFIX_CHARS", "20")
    get_settings.cache_clear()
    client = completion_client_factory(["Bank Statement"])
    text = "A" * 20 + "TAILMARKER"
    assert await classify_document(text, client) == DocumentType.BANK_STATEMENT
    prompt = client.calls[0][1].content
    assert "A" * 20 in prompt
    assert "TAILMARKER" not in prompt


@pytest.mark.asyncio
async def test_empty_text_is_other_without_calling_ai(completion_client_factory) -> None:
    client = completion_client_factory([])
    assert await classify_document("   ", client) == DocumentType.OTHER
    assert client.calls == []
