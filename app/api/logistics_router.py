# app/api/logistics_router.py
import logging
from typing import List

from fastapi import APIRouter, Depends, File, Request, UploadFile # type: ignore

from app.dependencies import get_logistics_records, get_trade_ai
from app.models import LogisticsRecord, ShippingPlan
from app.schemas import LogisticsResponse, ShippingRequest
from services.trade_ai import TradeAI
from utils.csv_io import parse_logistics_csv, summarize_shipments

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/logistics", tags=["logistics"])


@router.post("/upload", response_model=LogisticsResponse)
async def upload_logistics(request: Request, file: UploadFile = File(...)):
    records, errors = parse_logistics_csv(await file.read())
    # Each upload replaces the previous data set
    request.app.state.logistics_records = records
    logger.info("Loaded %d logistics records from %s", len(records), file.filename)
    return LogisticsResponse(
        records=records,
        summary=summarize_shipments(records),
        warnings=[str(e) for e in errors],
    )


@router.get("", response_model=LogisticsResponse)
def list_logistics(records: List[LogisticsRecord] = Depends(get_logistics_records)):
    return LogisticsResponse(records=records, summary=summarize_shipments(records))


@router.post("/optimize", response_model=ShippingPlan)
def optimize_shipping(req: ShippingRequest, trade_ai: TradeAI = Depends(get_trade_ai)):
    return trade_ai.optimize_shipping(req.origin, req.destination, req.product, req.urgency)
