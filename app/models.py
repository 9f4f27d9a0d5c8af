# ---------------------------
# File: app/models.py
# ---------------------------
"""
Pydantic models for the trade domain: classification, tax, documents,
inventory and logistics. The same models validate remote AI responses,
so field aliases follow the camelCase names used on the wire (hsCode, dutyRate, ...).
"""
from enum import Enum
from typing import Dict, List, Optional, FrozenSet, Tuple, Literal
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

StockStatus = Literal["in-stock", "low-stock", "out-of-stock"]
Demand = Literal["high", "medium", "low"]
RiskLevel = Literal["low", "medium", "high"]
Urgency = Literal["standard", "express", "economy"]

HS_CODE_PATTERN = r"^\d{4}(\.\d{2}){1,3}$"


class TradeModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DocumentType(str, Enum):
    COMMERCIAL_INVOICE = "commercial-invoice"
    CERTIFICATE_OF_ORIGIN = "certificate-of-origin"
    PACKING_LIST = "packing-list"
    BILL_OF_LADING = "bill-of-lading"
    IMPORT_EXPORT_DECLARATION = "import-export-declaration"
    LETTER_OF_UNDERTAKING = "letter-of-undertaking"


# --- Classification ---
class ProductDescriptor(TradeModel):
    """Input of a single classification request."""
    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    category: str = ""
    attributes: Tuple[str, ...] = ()
    detected_objects: FrozenSet[str] = frozenset()


class ClassificationResult(TradeModel):
    model_config = ConfigDict(frozen=True)

    hs_code: str = Field(..., min_length=1)
    description: str
    category: str
    duty_rate: float = Field(..., ge=0)
    confidence: int = Field(..., ge=0, le=100)
    restrictions: List[str] = Field(default_factory=list)
    alternative_codes: List[str] = Field(default_factory=list)
    tariff_schedule: str


# --- Tax ---
class TaxBreakdown(TradeModel):
    base_value: float
    duty: float
    vat: float
    additional_fees: float = 0.0


class TaxCalculation(TradeModel):
    product_value: float = Field(..., ge=0)
    hs_code: str
    country: str
    duty_rate: float = Field(..., ge=0)
    vat_rate: float = Field(..., ge=0)
    duty_amount: float = Field(..., ge=0)
    vat_amount: float = Field(..., ge=0)
    total_tax: float = Field(..., ge=0)
    total_amount: float = Field(..., ge=0)
    breakdown: Optional[TaxBreakdown] = None
    effective_date: str = ""
    trade_agreements: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _total_covers_value(self):
        if self.total_amount + 1e-9 < self.product_value:
            raise ValueError("totalAmount must not be lower than productValue")
        return self


# --- Documents ---
class ComplianceDocument(TradeModel):
    type: DocumentType
    content: str
    requirements: List[str] = Field(default_factory=list)
    validity_period: str
    additional_notes: List[str] = Field(default_factory=list)


# --- Product analysis (CSV intake) ---
class ProductAnalysis(TradeModel):
    product_name: str
    category: str
    hs_code: str
    confidence: int = Field(..., ge=0, le=100)
    suggested_price: float = Field(..., ge=0)
    market_demand: Demand = "medium"
    seasonality: str = "Year-round"
    compliance_risk: RiskLevel = "low"
    description: str = ""


# --- Inventory ---
class InventoryItem(TradeModel):
    model_config = ConfigDict(frozen=True)

    id: str
    sku: str
    name: str
    category: str
    availability: int = Field(..., ge=0)
    hs_code: str
    warehouse: str
    country: str
    last_synced: str
    status: StockStatus
    ai_classified: bool = False
    price: Optional[float] = Field(default=None, ge=0)
    market_demand: Demand = "medium"
    seasonality: Optional[str] = None
    compliance_risk: RiskLevel = "low"
    description: Optional[str] = None


class InventoryStats(TradeModel):
    total_items: int = 0
    low_stock_count: int = 0
    out_of_stock_count: int = 0
    ai_classified_count: int = 0
    last_updated: str = ""


# --- Logistics ---
class LogisticsRecord(TradeModel):
    warehouse_id: str
    warehouse_name: str = "Unknown Warehouse"
    address: str = "Address not provided"
    latitude: float = 0.0
    longitude: float = 0.0
    sku_id: str
    hs_code: str = "0000.00.00"
    sku_description: str = "Product description not available"
    quantity: int = 0
    shipment_id: str
    shipment_status: str = "pending"
    origin: str = "Unknown Origin"
    origin_latitude: float = 0.0
    origin_longitude: float = 0.0
    destination: str = "Unknown Destination"
    destination_latitude: float = 0.0
    destination_longitude: float = 0.0
    carrier: str = "Standard Carrier"
    eta: str = "TBD"
    last_updated: str = ""


class CarrierOption(TradeModel):
    name: str
    cost: str
    time: str
    reliability: str


class ShippingCosts(TradeModel):
    shipping: float = Field(..., ge=0)
    duties: float = Field(..., ge=0)
    taxes: float = Field(..., ge=0)
    total: float = Field(..., ge=0)


class ShippingPlan(TradeModel):
    recommended_carriers: List[CarrierOption] = Field(..., min_length=1)
    documentation: List[str] = Field(default_factory=list)
    estimated_costs: ShippingCosts
    notes: str = ""


# --- Remote gateway response schemas ---
# Every field is optional: whatever the model returns overrides the
# deterministic value field by field, the rest comes from the fallback.
class RemoteHSCodeResponse(TradeModel):
    hs_code: Optional[str] = Field(default=None, pattern=HS_CODE_PATTERN)
    description: Optional[str] = None
    duty_rate: Optional[float] = Field(default=None, ge=0)
    restrictions: Optional[List[str]] = None
    confidence: Optional[int] = Field(default=None, ge=0, le=100)
    alternative_codes: Optional[List[str]] = None


class RemoteTaxResponse(TradeModel):
    tax_calculations: List[TaxCalculation] = Field(..., min_length=1)


class RemoteDocumentResponse(TradeModel):
    content: str = Field(..., min_length=1)
    requirements: Optional[List[str]] = None
    validity_period: Optional[str] = None
    additional_notes: Optional[List[str]] = None


class RemoteAnalysisResponse(TradeModel):
    category: Optional[str] = None
    hs_code: Optional[str] = Field(default=None, pattern=HS_CODE_PATTERN)
    confidence: Optional[int] = Field(default=None, ge=0, le=100)
    suggested_price: Optional[float] = Field(default=None, ge=0)
    market_demand: Optional[Demand] = None
    seasonality: Optional[str] = None
    compliance_risk: Optional[RiskLevel] = None
    description: Optional[str] = None


class LogisticsSummary(TradeModel):
    total_records: int = 0
    total_quantity: int = 0
    warehouse_count: int = 0
    carrier_count: int = 0
    status_counts: Dict[str, int] = Field(default_factory=dict)
