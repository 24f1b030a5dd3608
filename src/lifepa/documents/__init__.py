"""Document classification and extraction."""

from lifepa.documents.classifier import classify_document
from lifepa.documents.extractor import extract_document_data, parse_document, save_document
from lifepa.documents.json_extract import extract_json_object
from lifepa.documents.types import DocumentType, ExtractedDocument, LineItem

__all__ = [
    "DocumentType",
    "ExtractedDocument",
    "LineItem",
    "classify_document",
    "extract_document_data",
    "extract_json_object",
    "parse_document",
    "save_document",
]
