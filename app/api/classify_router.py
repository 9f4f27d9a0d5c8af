# app/api/classify_router.py
from fastapi import APIRouter, Depends # type: ignore

from app.dependencies import get_trade_ai
from app.models import ClassificationResult, ProductDescriptor
from app.schemas import AnalyzeRequest, AnalyzeResponse, ClassifyRequest
from services.trade_ai import TradeAI

router = APIRouter(prefix="/api/classify", tags=["classify"])


@router.post("/hs-code", response_model=ClassificationResult)
def classify_product(req: ClassifyRequest, trade_ai: TradeAI = Depends(get_trade_ai)):
    descriptor = ProductDescriptor(
        name=req.name.strip(),
        description=req.description.strip(),
        category=req.category.strip(),
        attributes=tuple(req.attributes),
        detected_objects=frozenset(req.detected_objects),
    )
    return trade_ai.get_hs_code(descriptor)


@router.post("/analyze", response_model=AnalyzeResponse)
def analyze_product(req: AnalyzeRequest, trade_ai: TradeAI = Depends(get_trade_ai)):
    analysis, from_remote = trade_ai.analyze_product(req.name, req.description)
    return AnalyzeResponse(analysis=analysis, ai_classified=from_remote)
