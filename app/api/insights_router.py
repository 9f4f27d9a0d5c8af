# app/api/insights_router.py
from fastapi import APIRouter, Depends # type: ignore

from app.dependencies import get_trade_ai
from app.schemas import InsightsRequest, InsightsResponse
from services.trade_ai import TradeAI

router = APIRouter(prefix="/api/insights", tags=["insights"])


@router.post("", response_model=InsightsResponse)
def trade_insights(req: InsightsRequest, trade_ai: TradeAI = Depends(get_trade_ai)):
    return InsightsResponse(query=req.query, answer=trade_ai.get_trade_insights(req.query))
