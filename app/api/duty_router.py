# app/api/duty_router.py
from fastapi import APIRouter, Depends # type: ignore

from app.dependencies import get_trade_ai
from app.schemas import TaxRequest, TaxResponse
from services.trade_ai import TradeAI

router_duty = APIRouter(prefix="/api/duty", tags=["duty"])


@router_duty.post("/calculate", response_model=TaxResponse)
def calculate_landed_cost(req: TaxRequest, trade_ai: TradeAI = Depends(get_trade_ai)) -> TaxResponse:
    calculations = trade_ai.calculate_taxes(
        category=req.category,
        hs_code=req.hs_code,
        product_value=req.product_value,
        destinations=req.destinations,
        product_name=req.product_name,
    )
    return TaxResponse(calculations=calculations)
