# app/api/compliance_router.py
from typing import List

from fastapi import APIRouter, Depends # type: ignore

from app.dependencies import get_trade_ai
from app.models import ComplianceDocument, DocumentType
from app.schemas import DocumentRequest, DocumentTypeOut
from services.trade_ai import TradeAI

router = APIRouter(prefix="/api/compliance", tags=["compliance"])


@router.get("/document-types", response_model=List[DocumentTypeOut])
def list_document_types():
    return [
        DocumentTypeOut(value=t.value, label=t.value.replace("-", " ").title())
        for t in DocumentType
    ]


@router.post("/documents", response_model=ComplianceDocument)
def generate_document(req: DocumentRequest, trade_ai: TradeAI = Depends(get_trade_ai)):
    return trade_ai.generate_compliance_document(
        req.document_type, req.product, req.destination, req.order_value
    )
