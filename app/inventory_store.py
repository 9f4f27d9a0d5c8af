# ---------------------------
# File: app/inventory_store.py
# ---------------------------
import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple
from uuid import uuid4

from pydantic import ValidationError

from app.models import InventoryItem, InventoryStats, StockStatus
from services.duty_calculator import DutyCalculator
from utils.errors import InvalidInput, ItemNotFound

logger = logging.getLogger(__name__)

LOW_STOCK_THRESHOLD = 20
BILLING_DEFAULT_PRICE = 50.0
BILLING_MAX_UNITS = 10


def stock_status(availability: int) -> StockStatus:
    if availability <= 0:
        return "out-of-stock"
    if availability < LOW_STOCK_THRESHOLD:
        return "low-stock"
    return "in-stock"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class InventorySnapshot:
    """Immutable view handed to listeners after every change."""
    items: Tuple[InventoryItem, ...]
    stats: InventoryStats


Listener = Callable[[InventorySnapshot], None]


SAMPLE_ITEMS = [
    {
        "id": "1", "sku": "TN-ELE-001", "name": "Wireless Bluetooth Headphones",
        "category": "Electronics - Audio", "availability": 245, "hs_code": "8518.30.00",
        "warehouse": "UK-LON-01", "country": "United Kingdom", "last_synced": "2024-01-15 14:30",
        "status": "in-stock", "ai_classified": True, "price": 149, "market_demand": "high",
        "seasonality": "Holiday peak", "compliance_risk": "medium",
    },
    {
        "id": "2", "sku": "TN-APP-002", "name": "Smart Home Security Camera",
        "category": "Electronics - Photography", "availability": 12, "hs_code": "8525.80.30",
        "warehouse": "DE-BER-01", "country": "Germany", "last_synced": "2024-01-15 12:15",
        "status": "low-stock", "ai_classified": True, "price": 299, "market_demand": "high",
        "seasonality": "Year-round", "compliance_risk": "medium",
    },
    {
        "id": "3", "sku": "TN-TEX-003", "name": "Organic Cotton T-Shirt",
        "category": "Textiles - Tops", "availability": 0, "hs_code": "6109.10.00",
        "warehouse": "FR-PAR-01", "country": "France", "last_synced": "2024-01-15 09:45",
        "status": "out-of-stock", "ai_classified": False, "price": 29, "market_demand": "medium",
        "seasonality": "Spring/Summer peak", "compliance_risk": "high",
    },
]


class InventoryStore:
    """In-memory inventory for one application process.

    The item collection is never mutated in place: every change builds a new
    tuple from the current one under the lock, then listeners get the new
    snapshot once the lock is released.
    """

    def __init__(self, seed_sample_data: bool = False):
        self._items: Tuple[InventoryItem, ...] = ()
        self._stats = InventoryStats(last_updated=_now())
        self._listeners: List[Listener] = []
        self._lock = threading.RLock()
        self._seed_sample_data = seed_sample_data
        self._started = False

    # --- Lifecycle ---
    def start(self) -> None:
        if self._started:
            return
        self._started = True
        if self._seed_sample_data and not self._items:
            seed = tuple(InventoryItem(**data) for data in SAMPLE_ITEMS)
            self._mutate(lambda current: seed)
            logger.info("Seeded inventory with %d sample items", len(SAMPLE_ITEMS))

    def close(self) -> None:
        with self._lock:
            self._listeners.clear()
            self._started = False

    # --- Subscriptions ---
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)
        return unsubscribe

    def snapshot(self) -> InventorySnapshot:
        with self._lock:
            return InventorySnapshot(items=self._items, stats=self._stats)

    @property
    def items(self) -> Tuple[InventoryItem, ...]:
        return self._items

    @property
    def stats(self) -> InventoryStats:
        return self._stats

    @staticmethod
    def _calculate_stats(items: Tuple[InventoryItem, ...]) -> InventoryStats:
        return InventoryStats(
            total_items=len(items),
            low_stock_count=sum(1 for i in items if i.status == "low-stock"),
            out_of_stock_count=sum(1 for i in items if i.status == "out-of-stock"),
            ai_classified_count=sum(1 for i in items if i.ai_classified),
            last_updated=_now(),
        )

    def _mutate(self, change: Callable[[Tuple[InventoryItem, ...]], Tuple[InventoryItem, ...]]) -> InventorySnapshot:
        """Applies change to the current items under the lock, then notifies listeners outside it."""
        with self._lock:
            self._items = change(self._items)
            self._stats = self._calculate_stats(self._items)
            snapshot = InventorySnapshot(items=self._items, stats=self._stats)
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Inventory listener failed")
        return snapshot

    # --- Mutations ---
    def add_items(self, new_items: Iterable[InventoryItem]) -> InventorySnapshot:
        """Appends items; an item whose sku already exists replaces the old one in place."""
        new_items = list(new_items)

        def change(current: Tuple[InventoryItem, ...]) -> Tuple[InventoryItem, ...]:
            items = list(current)
            positions = {item.sku: idx for idx, item in enumerate(items)}
            for item in new_items:
                if item.sku in positions:
                    items[positions[item.sku]] = item
                else:
                    positions[item.sku] = len(items)
                    items.append(item)
            return tuple(items)

        return self._mutate(change)

    def update_item(self, item_id: str, **updates: Any) -> InventoryItem:
        """
        Overwrites the given fields and refreshes last_synced. Changing the
        availability recomputes the stock status. Nothing is re-classified.
        A sku already held by another item is rejected.
        """
        updates.pop("id", None)
        updates.pop("last_synced", None)
        updated: List[InventoryItem] = []

        def change(current: Tuple[InventoryItem, ...]) -> Tuple[InventoryItem, ...]:
            item = next((i for i in current if i.id == item_id), None)
            if item is None:
                raise ItemNotFound(f"Inventory item '{item_id}' not found")
            sku = updates.get("sku")
            if sku is not None and any(i.sku == sku and i.id != item_id for i in current):
                raise InvalidInput(f"SKU '{sku}' is already used by another inventory item")

            data = item.model_dump()
            data.update(updates)
            if "availability" in updates and "status" not in updates:
                data["status"] = stock_status(int(data["availability"]))
            data["last_synced"] = _now()
            try:
                updated.append(InventoryItem(**data))
            except ValidationError as e:
                raise InvalidInput(f"Invalid inventory update: {e.errors()[0]['msg']}")
            return tuple(updated[0] if i.id == item_id else i for i in current)

        self._mutate(change)
        return updated[0]

    def remove_item(self, item_id: str) -> None:
        def change(current: Tuple[InventoryItem, ...]) -> Tuple[InventoryItem, ...]:
            if not any(i.id == item_id for i in current):
                raise ItemNotFound(f"Inventory item '{item_id}' not found")
            return tuple(i for i in current if i.id != item_id)

        self._mutate(change)

    # --- Queries ---
    def get_item(self, item_id: str) -> Optional[InventoryItem]:
        return next((i for i in self._items if i.id == item_id), None)

    def items_by_sku(self, sku: str) -> List[InventoryItem]:
        return [i for i in self._items if i.sku == sku]

    def items_by_category(self, category: str) -> List[InventoryItem]:
        return [i for i in self._items if i.category == category]

    def items_by_status(self, status: str) -> List[InventoryItem]:
        return [i for i in self._items if i.status == status]

    def search(self, query: str) -> List[InventoryItem]:
        term = (query or "").strip().lower()
        return [
            i for i in self._items
            if term in i.name.lower() or term in i.sku.lower() or term in i.category.lower()
        ]

    # --- Views for the dashboard, billing and compliance pages ---
    def generate_dashboard_data(self) -> Dict[str, Any]:
        stats = self._stats
        rate = round(stats.ai_classified_count / stats.total_items * 100) if stats.total_items else 0
        return {
            "total_skus": stats.total_items,
            "ai_classified": stats.ai_classified_count,
            "low_stock": stats.low_stock_count,
            "out_of_stock": stats.out_of_stock_count,
            "compliance_rate": rate,
            "last_updated": stats.last_updated,
        }

    def generate_billing_data(self) -> List[Dict[str, Any]]:
        """One transaction per item, priced for up to ten units and taxed for the item's country."""
        transactions = []
        for item in self._items:
            order_value = (item.price or BILLING_DEFAULT_PRICE) * min(item.availability, BILLING_MAX_UNITS)
            calc = DutyCalculator(item.category, hs_code=item.hs_code).calculate_landed_cost(
                order_value, item.country
            )
            transactions.append({
                "id": item.id,
                "date": item.last_synced[:10],
                "product": item.name,
                "country": item.country,
                "order_value": order_value,
                "duty_rate": calc.duty_rate,
                "vat_rate": calc.vat_rate,
                "duty_amount": calc.duty_amount,
                "vat_amount": calc.vat_amount,
                "total_tax": calc.total_tax,
                "total_amount": calc.total_amount,
                "status": "paid" if item.status == "in-stock" else "pending",
                "order_ref": f"ORD-{item.sku}",
                "hs_code": item.hs_code,
                "trade_agreements": calc.trade_agreements,
            })
        return transactions

    def generate_compliance_data(self) -> List[Dict[str, Any]]:
        return [
            {
                "id": item.id,
                "type": "Commercial Invoice",
                "product_name": item.name,
                "destination": item.country,
                "order_ref": f"ORD-{item.sku}",
                "status": "completed" if item.ai_classified else "pending",
                "created_date": item.last_synced[:10],
                "compliance_risk": item.compliance_risk,
                "ai_generated": item.ai_classified,
            }
            for item in self._items
        ]


def new_item_id() -> str:
    return uuid4().hex
