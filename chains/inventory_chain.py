# chains/inventory_chain.py
import logging
import threading
import time
from typing import Callable, Dict, List, Optional, Tuple, Union
from uuid import uuid4

from app.inventory_store import InventoryStore, new_item_id, stock_status
from app.models import InventoryItem, ProductAnalysis, ProductDescriptor
from services.trade_ai import TradeAI
from tariff_rules import tables
from utils.csv_io import InventoryRow, parse_inventory_csv
from utils.errors import ItemNotFound

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


class CancellationToken:
    """Set from any thread to stop a running batch before its next item."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class InventoryAnalysisChain:
    def __init__(self, trade_ai: TradeAI, store: InventoryStore, delay_seconds: float = 0.2):
        self.trade_ai = trade_ai
        self.store = store
        self.delay_seconds = delay_seconds

    def analyze_rows(self, rows: List[InventoryRow],
                     token: Optional[CancellationToken] = None,
                     on_progress: Optional[ProgressCallback] = None) -> List[InventoryItem]:
        """
        Analyzes rows one at a time, sleeping delay_seconds between items.
        A row whose analysis fails still becomes an item (fallback values),
        so the output has one item per processed row. Stops early when the
        token is cancelled and returns what was done so far.
        """
        items: List[InventoryItem] = []
        total = len(rows)
        for index, row in enumerate(rows):
            if token is not None and token.cancelled:
                logger.info("Batch analysis cancelled after %d of %d rows", index, total)
                break
            if index > 0 and self.delay_seconds > 0:
                time.sleep(self.delay_seconds)
                if token is not None and token.cancelled:
                    logger.info("Batch analysis cancelled after %d of %d rows", index, total)
                    break

            try:
                analysis, from_remote = self.trade_ai.analyze_product(row.name, row.description)
                items.append(self._item_from_analysis(row, analysis, from_remote))
            except Exception:
                logger.exception("Analysis failed for row %d (%s), using fallback item", row.row_number, row.name)
                items.append(self._fallback_item(row))

            logger.info("Analyzed %d/%d: %s", index + 1, total, row.name)
            if on_progress is not None:
                on_progress(index + 1, total)
        return items

    def ingest_csv(self, source: Union[str, bytes],
                   token: Optional[CancellationToken] = None,
                   on_progress: Optional[ProgressCallback] = None) -> List[InventoryItem]:
        """Parses an inventory upload, analyzes every row and adds the results to the store."""
        rows = parse_inventory_csv(source)
        items = self.analyze_rows(rows, token=token, on_progress=on_progress)
        if items:
            self.store.add_items(items)
        return items

    def reclassify(self, item_id: str) -> InventoryItem:
        item = self.store.get_item(item_id)
        if item is None:
            raise ItemNotFound(f"Inventory item '{item_id}' not found")

        analysis, from_remote = self.trade_ai.analyze_product(item.name, item.description or "")
        result = self.trade_ai.get_hs_code(ProductDescriptor(
            name=item.name,
            description=item.description or "",
            category=analysis.category,
        ))
        return self.store.update_item(
            item_id,
            category=analysis.category,
            hs_code=result.hs_code,
            market_demand=analysis.market_demand,
            seasonality=analysis.seasonality,
            compliance_risk=analysis.compliance_risk,
            ai_classified=from_remote,
        )

    @staticmethod
    def _item_from_analysis(row: InventoryRow, analysis: ProductAnalysis, from_remote: bool) -> InventoryItem:
        return InventoryItem(
            id=new_item_id(),
            sku=row.sku,
            name=row.name,
            category=analysis.category,
            availability=row.availability,
            hs_code=analysis.hs_code,
            warehouse=row.warehouse,
            country=row.country,
            last_synced=time.strftime("%Y-%m-%d %H:%M"),
            status=stock_status(row.availability),
            ai_classified=from_remote,
            price=analysis.suggested_price,
            market_demand=analysis.market_demand,
            seasonality=analysis.seasonality,
            compliance_risk=analysis.compliance_risk,
            description=analysis.description,
        )

    @staticmethod
    def _fallback_item(row: InventoryRow) -> InventoryItem:
        return InventoryItem(
            id=new_item_id(),
            sku=row.sku,
            name=row.name,
            category=tables.GENERAL_CATEGORY,
            availability=row.availability,
            hs_code=tables.UNKNOWN_HS_CODE,
            warehouse=row.warehouse,
            country=row.country,
            last_synced=time.strftime("%Y-%m-%d %H:%M"),
            status=stock_status(row.availability),
            ai_classified=False,
            price=tables.DEFAULT_PRICE,
            market_demand="medium",
            seasonality="Year-round",
            compliance_risk="low",
            description="Analysis unavailable; classified with default values",
        )


class BatchRegistry:
    """Tracks running uploads so another request can cancel them by id."""

    def __init__(self):
        self._tokens: Dict[str, CancellationToken] = {}
        self._lock = threading.Lock()

    def begin(self, upload_id: Optional[str] = None) -> Tuple[str, CancellationToken]:
        upload_id = upload_id or uuid4().hex
        token = CancellationToken()
        with self._lock:
            self._tokens[upload_id] = token
        return upload_id, token

    def cancel(self, upload_id: str) -> bool:
        with self._lock:
            token = self._tokens.get(upload_id)
        if token is None:
            return False
        token.cancel()
        return True

    def finish(self, upload_id: str) -> None:
        with self._lock:
            self._tokens.pop(upload_id, None)

    def active(self) -> List[str]:
        with self._lock:
            return list(self._tokens)
