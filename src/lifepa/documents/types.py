"""Document data contracts."""

import datetime as dt
from enum import StrEnum

from pydantic import BaseModel, Field


class DocumentType(StrEnum):
    INVOICE = "Invoice"
    UTILITY_BILL = "Utility Bill"
    RECEIPT = "Receipt"
    CONTACT = "Contact"
    MOT_DOCUMENT = "MOT Document"
    INSURANCE = "Insurance Document"
    BANK_STATEMENT = "Bank Statement"
    TAX_DOCUMENT = "Tax Document"
    OTHER = "Other"


class LineItem(BaseModel):
    name: str
    quantity: int = 1
    price: float = 0.0


class ExtractedDocument(BaseModel):
    """Structured result of document extraction.

    Dates that could not be found are ``None``, never today's date.
    """

    document_type: DocumentType
    sender: str = "Unknown"
    date: dt.date | None = None
    due_date: dt.date | None = None
    issue_date: dt.date | None = None
    total_amount: float | None = None
    currency: str | None = None
    reference_number: str | None = None
    description: str = ""
    category: str | None = None
    items: list[LineItem] = Field(default_factory=list)

    # MOT
    expiry_date: dt.date | None = None
    vehicle_reg: str | None = None
    mileage: str | None = None
    test_result: str | None = None

    # Contact
    name: str | None = None
    company: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None

    extracted_text: str | None = None
    parsed_at: dt.datetime | None = None
    used_fallback: bool = False
