# app/api/inventory_router.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Response, UploadFile # type: ignore
from fastapi.concurrency import run_in_threadpool

from app.dependencies import get_batches, get_chain, get_store
from app.inventory_store import InventoryStore
from app.models import InventoryItem, InventoryStats
from app.schemas import CancelResponse, InventoryListResponse, InventoryUpdateRequest, UploadResponse
from chains.inventory_chain import BatchRegistry, InventoryAnalysisChain
from utils.csv_io import parse_inventory_csv

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/inventory", tags=["inventory"])


@router.get("", response_model=InventoryListResponse)
def list_items(q: Optional[str] = None, sku: Optional[str] = None, category: Optional[str] = None,
               status: Optional[str] = None, store: InventoryStore = Depends(get_store)):
    snapshot = store.snapshot()
    if q:
        items = store.search(q)
    elif sku:
        items = store.items_by_sku(sku)
    elif category:
        items = store.items_by_category(category)
    elif status:
        items = store.items_by_status(status)
    else:
        items = list(snapshot.items)
    return InventoryListResponse(items=items, stats=snapshot.stats)


@router.get("/stats", response_model=InventoryStats)
def inventory_stats(store: InventoryStore = Depends(get_store)):
    return store.stats


@router.post("/upload", response_model=UploadResponse)
async def upload_inventory(file: UploadFile = File(...), upload_id: Optional[str] = Form(None),
                           chain: InventoryAnalysisChain = Depends(get_chain),
                           batches: BatchRegistry = Depends(get_batches)):
    content = await file.read()
    rows = parse_inventory_csv(content)
    warnings = [str(e) for row in rows for e in row.errors]

    upload_id, token = batches.begin(upload_id)
    logger.info("Upload %s: analyzing %d rows from %s", upload_id, len(rows), file.filename)
    try:
        # The analysis loop sleeps between items; keep it off the event loop
        items = await run_in_threadpool(chain.analyze_rows, rows, token)
    finally:
        batches.finish(upload_id)

    if items:
        chain.store.add_items(items)
    return UploadResponse(
        upload_id=upload_id,
        total_rows=len(rows),
        processed=len(items),
        cancelled=token.cancelled,
        items=items,
        warnings=warnings,
    )


@router.post("/uploads/{upload_id}/cancel", response_model=CancelResponse)
def cancel_upload(upload_id: str, batches: BatchRegistry = Depends(get_batches)):
    if not batches.cancel(upload_id):
        raise HTTPException(status_code=404, detail="Upload not found or already finished")
    return CancelResponse(upload_id=upload_id, cancelled=True)


@router.get("/{item_id}", response_model=InventoryItem)
def get_item(item_id: str, store: InventoryStore = Depends(get_store)):
    item = store.get_item(item_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Inventory item not found")
    return item


@router.patch("/{item_id}", response_model=InventoryItem)
def update_item(item_id: str, req: InventoryUpdateRequest, store: InventoryStore = Depends(get_store)):
    return store.update_item(item_id, **req.model_dump(exclude_unset=True))


@router.delete("/{item_id}", status_code=204)
def delete_item(item_id: str, store: InventoryStore = Depends(get_store)):
    store.remove_item(item_id)
    return Response(status_code=204)


@router.post("/{item_id}/reclassify", response_model=InventoryItem)
def reclassify_item(item_id: str, chain: InventoryAnalysisChain = Depends(get_chain)):
    return chain.reclassify(item_id)
