# ---------------------------
# File: app/schemas.py
# ---------------------------
from typing import List, Optional, Any, Dict
from pydantic import Field

from app.models import (
    InventoryItem,
    InventoryStats,
    LogisticsRecord,
    LogisticsSummary,
    ProductAnalysis,
    TaxCalculation,
    TradeModel,
)


class ClassifyRequest(TradeModel):
    name: str = Field("", description="Product name")
    description: str = ""
    category: str = ""
    attributes: List[str] = Field(default_factory=list)
    detected_objects: List[str] = Field(default_factory=list, description="Object labels from an image, if any")


class AnalyzeRequest(TradeModel):
    name: str = Field(..., min_length=1)
    description: str = ""


class AnalyzeResponse(TradeModel):
    analysis: ProductAnalysis
    ai_classified: bool


class TaxRequest(TradeModel):
    product_value: float
    category: str = ""
    hs_code: Optional[str] = None
    destinations: Optional[List[str]] = None
    product_name: str = "Product"


class TaxResponse(TradeModel):
    calculations: List[TaxCalculation]


class DocumentRequest(TradeModel):
    document_type: str = Field(..., description="Slug (bill-of-lading) or label (Bill of Lading)")
    product: Dict[str, Any] = Field(default_factory=dict)
    destination: str = ""
    order_value: float = 0.0


class DocumentTypeOut(TradeModel):
    value: str
    label: str


class InventoryListResponse(TradeModel):
    items: List[InventoryItem]
    stats: InventoryStats


class InventoryUpdateRequest(TradeModel):
    name: Optional[str] = None
    sku: Optional[str] = None
    category: Optional[str] = None
    availability: Optional[int] = None
    hs_code: Optional[str] = None
    warehouse: Optional[str] = None
    country: Optional[str] = None
    status: Optional[str] = None
    price: Optional[float] = None
    market_demand: Optional[str] = None
    seasonality: Optional[str] = None
    compliance_risk: Optional[str] = None
    description: Optional[str] = None


class UploadResponse(TradeModel):
    upload_id: str
    total_rows: int
    processed: int
    cancelled: bool
    items: List[InventoryItem]
    warnings: List[str] = Field(default_factory=list)


class CancelResponse(TradeModel):
    upload_id: str
    cancelled: bool


class LogisticsResponse(TradeModel):
    records: List[LogisticsRecord]
    summary: LogisticsSummary
    warnings: List[str] = Field(default_factory=list)


class ShippingRequest(TradeModel):
    origin: str = Field(..., min_length=1)
    destination: str = Field(..., min_length=1)
    product: Dict[str, Any] = Field(default_factory=dict)
    urgency: str = "standard"


class InsightsRequest(TradeModel):
    query: str = ""


class InsightsResponse(TradeModel):
    query: str
    answer: str
