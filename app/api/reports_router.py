# app/api/reports_router.py
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Response # type: ignore

from app.dependencies import get_logistics_records, get_store
from app.inventory_store import InventoryStore
from app.models import LogisticsRecord
from utils.export import (
    compliance_report,
    dashboard_report,
    inventory_report,
    logistics_report,
    render_export,
    transaction_report,
)

router = APIRouter(prefix="/api/reports", tags=["reports"])


@router.get("/dashboard")
def dashboard_data(store: InventoryStore = Depends(get_store)) -> Dict[str, Any]:
    return store.generate_dashboard_data()


@router.get("/billing")
def billing_data(store: InventoryStore = Depends(get_store)) -> List[Dict[str, Any]]:
    return store.generate_billing_data()


@router.get("/compliance")
def compliance_data(store: InventoryStore = Depends(get_store)) -> List[Dict[str, Any]]:
    return store.generate_compliance_data()


@router.get("/{report}/export")
def export_report(report: str, format: str = "csv",
                  store: InventoryStore = Depends(get_store),
                  logistics: List[LogisticsRecord] = Depends(get_logistics_records)):
    builders = {
        "inventory": lambda: inventory_report(store.items),
        "billing": lambda: transaction_report(store.generate_billing_data()),
        "compliance": lambda: compliance_report(store.generate_compliance_data()),
        "logistics": lambda: logistics_report(logistics),
        "dashboard": lambda: dashboard_report(store.generate_dashboard_data()),
    }
    if report not in builders:
        raise HTTPException(status_code=404, detail=f"Unknown report '{report}'")

    content, media_type, filename = render_export(builders[report](), format)
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
