"""Prompt text for document classification and extraction."""

from lifepa.documents.types import DocumentType

CLASSIFICATION_SYSTEM = (
    "You are a document classification assistant. Analyze documents and classify them "
    "into categories. Return only the document type, nothing else."
)

EXTRACTION_SYSTEM = (
    "You are a document data extraction assistant. Extract structured data from "
    "documents and return it as valid JSON. Be accurate and precise."
)

_CATEGORIES = """\
- Invoice: Business invoices, bills from companies
- Utility Bill: Water, gas, electricity, internet bills
- Receipt: Store receipts, purchase receipts
- Contact: Business cards, contact information
- MOT Document: MOT certificates, vehicle inspection documents
- Insurance Document: Insurance policies, insurance statements
- Bank Statement: Bank account statements
- Tax Document: Tax forms, tax statements
- Other: Anything that doesn't fit above categories"""

_BILL_FIELDS = """\
1. sender: The FULL company/organization name (e.g. "Thames Water", "British Gas")
2. issueDate: The document issue/statement date in YYYY-MM-DD format
3. dueDate: The payment due date in YYYY-MM-DD format
4. amountDue: The total amount due or monthly payment amount (number only)
5. currency: Currency code (GBP for £, USD for $, EUR for €)
6. referenceNumber: Account number, invoice number, or reference number
7. description: Brief description (e.g. "Water bill", "Gas bill")

IMPORTANT:
- The issueDate is the document date, NOT today's date
- Account numbers often start with zeros; include all digits"""

_RECEIPT_FIELDS = """\
1. sender: Merchant/store name
2. date: Receipt date in YYYY-MM-DD format
3. totalAmount: Total amount paid (number only)
4. currency: Currency code (GBP, USD, EUR)
5. category: Groceries, Dining, Transport, Shopping, Healthcare, Entertainment, Utilities, Other
6. items: Array of {name, quantity, price} for items purchased (if readable)"""

_MOT_FIELDS = """\
1. sender: Testing center name
2. issueDate: Test date in YYYY-MM-DD format
3. expiryDate: MOT expiry date in YYYY-MM-DD format
4. vehicleReg: Vehicle registration number
5. mileage: Vehicle mileage at test
6. testResult: Pass/Fail"""

_CONTACT_FIELDS = """\
1. name: Contact name
2. company: Company name
3. email: Email address
4. phone: Phone number
5. address: Full address"""

_DEFAULT_FIELDS = """\
1. sender: Source/sender name
2. date: Document date in YYYY-MM-DD format
3. description: Brief description of document
4. amountDue: Any amount mentioned (if applicable)
5. currency: Currency code (if applicable)"""

FIELD_LISTS: dict[DocumentType, str] = {
    DocumentType.INVOICE: _BILL_FIELDS,
    DocumentType.UTILITY_BILL: _BILL_FIELDS,
    DocumentType.RECEIPT: _RECEIPT_FIELDS,
    DocumentType.MOT_DOCUMENT: _MOT_FIELDS,
    DocumentType.CONTACT: _CONTACT_FIELDS,
}


def fields_for(document_type: DocumentType) -> str:
    return FIELD_LISTS.get(document_type, _DEFAULT_FIELDS)


def classification_prompt(text: str, prefix_chars: int) -> str:
    return (
        "Analyze the following document text and classify it into ONE of these "
        f"categories:\n\nCategories:\n{_CATEGORIES}\n\n"
        f'Document text:\n"""\n{text[:prefix_chars]}\n"""\n\n'
        "Return ONLY the category name, nothing else. Choose the most appropriate category."
    )


def extraction_prompt(text: str, document_type: DocumentType, today: str) -> str:
    return (
        f"You are analyzing a {document_type.value} document. Extract information and "
        "return it as a JSON object.\n\n"
        f'DOCUMENT TEXT:\n"""\n{text}\n"""\n\n'
        f"Please extract the following fields:\n{fields_for(document_type)}\n\n"
        "EXTRACTION RULES:\n"
        "1. Extract the EXACT text from the document; do not make assumptions\n"
        f"2. For dates, find the ACTUAL date in the document; do not use today's date ({today})\n"
        "3. Extract the COMPLETE company name as it appears\n"
        "4. Include ALL digits of account numbers, including leading zeros\n"
        "5. Use null for fields that cannot be found in the text\n"
        "6. Be precise with numbers; this is financial data\n\n"
        "Return ONLY a valid JSON object with these exact field names. "
        "No explanation, no markdown, just the JSON object."
    )
