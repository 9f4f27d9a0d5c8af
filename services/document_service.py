# ---------------------------
# File: services/document_service.py
# ---------------------------
# Compliance document synthesis. The fallback always produces the
# commercial-invoice template, whatever document type was requested.

from datetime import date
from typing import Any, Dict, Optional, Union

from app.models import ComplianceDocument, DocumentType, RemoteDocumentResponse
from utils.errors import InvalidInput
from utils.llm_utils import render_prompt

VALIDITY_PERIOD = "90 days from issue date"

DOCUMENT_REQUIREMENTS = [
    "Original signature required",
    "Company letterhead recommended",
    "Accurate product description mandatory",
    "Correct HS code classification essential",
]

ADDITIONAL_NOTES = [
    "Ensure all information is accurate for customs clearance",
    "Keep copies for your records",
    "Contact customs broker if assistance needed",
]

INVOICE_TEMPLATE = """COMMERCIAL INVOICE

Invoice No: INV-2024-001
Date: {issue_date}

Exporter:
Your Company Name
123 Business Street
City, State, Country

Importer:
Customer Name
Customer Address
{destination}

Product Details:
{product_name}
Quantity: 1
Unit Price: ${order_value}
Total Value: ${order_value}

HS Code: {hs_code}
Country of Origin: United States

This invoice is generated for customs clearance purposes."""

DOCUMENT_PROMPT = """Generate a {document_label} for international trade:

Product: {product_name}
Destination: {destination}
Value: ${order_value}
HS Code: {hs_code}

Provide a complete, professional document with all required fields.
Return ONLY a JSON object with these fields:
- content: the full document text
- requirements: list of requirements for the document to be accepted
- validityPeriod: how long the document stays valid
- additionalNotes: list of practical notes for the exporter"""


def normalize_document_type(document_type: Union[str, DocumentType]) -> DocumentType:
    """
    Accepts a slug ("bill-of-lading") or a display label ("Bill of Lading",
    "Import/Export Declaration") and returns the DocumentType.
    """
    if isinstance(document_type, DocumentType):
        return document_type
    slug = "-".join(
        str(document_type or "").strip().lower().replace("/", " ").replace("_", " ").split()
    )
    try:
        return DocumentType(slug)
    except ValueError:
        allowed = ", ".join(t.value for t in DocumentType)
        raise InvalidInput(f"Unknown document type '{document_type}'. Expected one of: {allowed}")


def _format_value(order_value: float) -> str:
    value = float(order_value)
    return str(int(value)) if value.is_integer() else f"{value:.2f}"


class DocumentSynthesizer:
    """Builds ComplianceDocument payloads, from a remote answer or the static template."""

    def validate_request(self, document_type, product: Dict[str, Any], destination: str,
                         order_value: float) -> DocumentType:
        doc_type = normalize_document_type(document_type)
        if not destination or not str(destination).strip():
            raise InvalidInput("Destination country is required")
        if order_value is None or float(order_value) < 0:
            raise InvalidInput("Order value cannot be negative")
        return doc_type

    def build_prompt(self, document_type: DocumentType, product: Dict[str, Any],
                     destination: str, order_value: float) -> str:
        return render_prompt(
            DOCUMENT_PROMPT,
            document_label=document_type.value.replace("-", " "),
            product_name=product.get("name") or "Product",
            destination=destination,
            order_value=_format_value(order_value),
            hs_code=product.get("hsCode") or product.get("hs_code") or "TBD",
        )

    def fallback_document(self, document_type: DocumentType, product: Dict[str, Any],
                          destination: str, order_value: float,
                          issue_date: Optional[date] = None) -> ComplianceDocument:
        content = INVOICE_TEMPLATE.format(
            issue_date=(issue_date or date.today()).strftime("%m/%d/%Y"),
            destination=destination,
            product_name=product.get("name") or "Product Name",
            order_value=_format_value(order_value),
            hs_code=product.get("hsCode") or product.get("hs_code") or "TBD",
        )
        return ComplianceDocument(
            type=document_type,
            content=content,
            requirements=list(DOCUMENT_REQUIREMENTS),
            validity_period=VALIDITY_PERIOD,
            additional_notes=list(ADDITIONAL_NOTES),
        )

    def from_remote(self, document_type: DocumentType, remote: RemoteDocumentResponse) -> ComplianceDocument:
        return ComplianceDocument(
            type=document_type,
            content=remote.content,
            requirements=remote.requirements or list(DOCUMENT_REQUIREMENTS),
            validity_period=remote.validity_period or VALIDITY_PERIOD,
            additional_notes=remote.additional_notes or list(ADDITIONAL_NOTES),
        )
