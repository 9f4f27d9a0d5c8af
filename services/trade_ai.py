# services/trade_ai.py
"""
Trade intelligence facade.

Every operation first asks the remote AI gateway and, when that is not
possible (no key, network error, malformed or invalid JSON), answers from
the deterministic rules engine instead. Callers never see RemoteUnavailable.
"""
import logging
import math
from datetime import date
from typing import Any, Dict, List, Optional, Sequence, Tuple

from agents.classifier_agent import ProductClassifier
from agents.gateway_agent import RemoteClassificationGateway, remote_or_none
from app.models import (
    ClassificationResult,
    ComplianceDocument,
    ProductAnalysis,
    ProductDescriptor,
    RemoteAnalysisResponse,
    RemoteDocumentResponse,
    RemoteHSCodeResponse,
    RemoteTaxResponse,
    ShippingPlan,
    TaxCalculation,
)
from services.document_service import DocumentSynthesizer
from services.duty_calculator import estimate_taxes
from tariff_rules import tables
from utils.errors import InvalidInput, RemoteUnavailable
from utils.llm_utils import render_prompt

logger = logging.getLogger(__name__)

HS_CODE_PROMPT = """As a trade classification expert, provide the most accurate HS code for this product:

Product: {name}
Category: {category}
Description: {description}
Attributes: {attributes}

Provide response in JSON format with: hsCode, description, dutyRate, restrictions, confidence, alternativeCodes"""

TAX_PROMPT = """Calculate accurate import taxes for this product:

Product: {name}
HS Code: {hs_code}
Value: ${value}
Destinations: {destinations}

Provide current duty rates, VAT rates, and total calculations for each country in JSON format.
Return an object with a taxCalculations list; each entry has productValue, hsCode, country,
dutyRate, vatRate, dutyAmount, vatAmount, totalTax, totalAmount and tradeAgreements."""

ANALYSIS_PROMPT = """As a trade expert, analyze this product for international trade:

Product: {name}
Description: {description}

Provide a JSON response with:
- category: Product category for trade classification
- hsCode: Harmonized System code
- confidence: Classification confidence (0-100)
- suggestedPrice: Estimated market price in USD
- marketDemand: high/medium/low
- seasonality: Seasonal demand pattern
- complianceRisk: low/medium/high
- description: Brief product analysis

Focus on accuracy for international trade and customs classification."""

INSIGHTS_PROMPT = """As a trade expert, provide detailed insights for this query: "{query}"

Include specific, actionable advice about:
- Trade regulations
- Market opportunities
- Compliance requirements
- Cost optimization strategies
- Risk mitigation

Provide a comprehensive, professional response."""

SHIPPING_PROMPT = """Optimize shipping from {origin} to {destination} for:

Product: {name}
Category: {category}
Urgency: {urgency}

Provide carrier recommendations, costs, transit times, and documentation requirements.
Return JSON with recommendedCarriers (name, cost, time, reliability), documentation,
estimatedCosts (shipping, duties, taxes, total) and notes."""

INSIGHTS_FALLBACK = """**Trade Insights for: "{query}"**

I understand you're looking for trade information. Here are some general trade considerations:

1. **Classification**: Proper HS code classification is crucial for accurate duty calculations
2. **Documentation**: Ensure all required trade documents are complete and accurate
3. **Compliance**: Check destination country requirements for your specific product category
4. **Optimization**: Consider consolidating shipments to reduce per-unit costs

**Next Steps:**
- Verify product classification with customs authorities
- Review current trade agreements for potential duty reductions
- Ensure all compliance requirements are met
- Consider working with a licensed customs broker

Would you like me to help you with a specific trade calculation or document generation?"""

FALLBACK_CARRIERS = [
    {"name": "DHL Express", "cost": "$45-65", "time": "2-3 days", "reliability": "99%"},
    {"name": "FedEx International", "cost": "$40-60", "time": "3-4 days", "reliability": "98%"},
    {"name": "UPS Worldwide", "cost": "$35-55", "time": "4-5 days", "reliability": "97%"},
]

# urgency -> (shipping, total)
SHIPPING_ESTIMATES = {
    "express": (65.0, 105.0),
    "standard": (45.0, 85.0),
    "economy": (35.0, 75.0),
}

REMOTE_ANALYSIS_CONFIDENCE = 90


def _consistent(calc: TaxCalculation, product_value: float) -> bool:
    """The remote figures must be for the requested value and add up like the rules do."""
    return (
        math.isclose(calc.product_value, product_value, abs_tol=0.005)
        and math.isclose(calc.vat_amount, (calc.product_value + calc.duty_amount) * (calc.vat_rate / 100), abs_tol=0.01)
        and math.isclose(calc.total_amount, calc.product_value + calc.duty_amount + calc.vat_amount, abs_tol=0.01)
    )


class TradeAI:
    def __init__(self, gateway: Optional[RemoteClassificationGateway] = None,
                 classifier: Optional[ProductClassifier] = None,
                 documents: Optional[DocumentSynthesizer] = None):
        self.gateway = gateway
        self.classifier = classifier or ProductClassifier()
        self.documents = documents or DocumentSynthesizer()

    # --- Classification ---
    def get_hs_code(self, descriptor: ProductDescriptor) -> ClassificationResult:
        if not descriptor.name.strip() and not descriptor.description.strip():
            raise InvalidInput("Product name or description is required")

        fallback = self.classifier.classify(descriptor)
        prompt = render_prompt(
            HS_CODE_PROMPT,
            name=descriptor.name,
            category=descriptor.category or "Unknown",
            description=descriptor.description or "N/A",
            attributes=", ".join(descriptor.attributes) or "N/A",
        )
        remote = remote_or_none(self.gateway, prompt, RemoteHSCodeResponse)
        if remote is None:
            return fallback

        return ClassificationResult(
            hs_code=remote.hs_code or fallback.hs_code,
            description=remote.description or fallback.description,
            category=fallback.category,
            duty_rate=remote.duty_rate if remote.duty_rate is not None else fallback.duty_rate,
            confidence=remote.confidence if remote.confidence is not None else tables.MATCHED_CONFIDENCE,
            restrictions=remote.restrictions if remote.restrictions is not None else fallback.restrictions,
            alternative_codes=(
                remote.alternative_codes if remote.alternative_codes is not None else fallback.alternative_codes
            ),
            tariff_schedule=tables.TARIFF_SCHEDULE,
        )

    # --- Taxes ---
    def calculate_taxes(self, category: str, hs_code: Optional[str], product_value: float,
                        destinations: Optional[Sequence[str]] = None,
                        product_name: str = "Product") -> List[TaxCalculation]:
        """
        Duty and VAT for each destination. The category drives the rates; the
        HS code is carried through to the result (or derived from the category).
        """
        destinations = list(destinations) if destinations else list(tables.DEFAULT_DESTINATIONS)
        # Raises InvalidInput before anything is sent upstream
        fallback = estimate_taxes(product_value, category or hs_code or "", destinations, hs_code=hs_code)

        prompt = render_prompt(
            TAX_PROMPT,
            name=product_name,
            hs_code=fallback[0].hs_code,
            value=product_value,
            destinations=", ".join(destinations),
        )
        remote = remote_or_none(self.gateway, prompt, RemoteTaxResponse)
        if remote is None:
            return fallback

        countries = [calc.country for calc in remote.tax_calculations]
        if countries != destinations:
            logger.warning("Remote tax answer covered %s instead of %s, using rules fallback",
                           countries, destinations)
            return fallback
        if not all(_consistent(calc, fallback[0].product_value) for calc in remote.tax_calculations):
            logger.warning("Remote tax answer does not add up for value %s, using rules fallback",
                           product_value)
            return fallback
        return remote.tax_calculations

    # --- Documents ---
    def generate_compliance_document(self, document_type, product: Dict[str, Any], destination: str,
                                     order_value: float, issue_date: Optional[date] = None) -> ComplianceDocument:
        doc_type = self.documents.validate_request(document_type, product, destination, order_value)
        prompt = self.documents.build_prompt(doc_type, product, destination, order_value)
        remote = remote_or_none(self.gateway, prompt, RemoteDocumentResponse)
        if remote is None:
            return self.documents.fallback_document(doc_type, product, destination, order_value,
                                                    issue_date=issue_date)
        return self.documents.from_remote(doc_type, remote)

    # --- Product analysis (CSV intake) ---
    def analyze_product(self, product_name: str, description: str = "") -> Tuple[ProductAnalysis, bool]:
        """
        Returns the analysis and whether it came from the remote AI.
        """
        prompt = render_prompt(ANALYSIS_PROMPT, name=product_name, description=description)
        remote = remote_or_none(self.gateway, prompt, RemoteAnalysisResponse)
        if remote is None:
            return self.fallback_analysis(product_name, description), False

        category = remote.category or self.classifier.categorize_product(product_name)
        hs_code = remote.hs_code or self.classifier.classify(
            ProductDescriptor(name=product_name, category=remote.category or "")
        ).hs_code
        analysis = ProductAnalysis(
            product_name=product_name,
            category=category,
            hs_code=hs_code,
            confidence=remote.confidence if remote.confidence is not None else REMOTE_ANALYSIS_CONFIDENCE,
            suggested_price=(
                remote.suggested_price if remote.suggested_price is not None
                else self.classifier.estimate_price(product_name)
            ),
            market_demand=remote.market_demand or "medium",
            seasonality=remote.seasonality or "Year-round",
            compliance_risk=remote.compliance_risk or self.classifier.assess_compliance_risk(category),
            description=remote.description or f"AI-analyzed {product_name} for international trade",
        )
        return analysis, True

    def fallback_analysis(self, product_name: str, description: str = "") -> ProductAnalysis:
        category = self.classifier.categorize_product(product_name)
        result = self.classifier.classify(ProductDescriptor(name=product_name, description=description))
        return ProductAnalysis(
            product_name=product_name,
            category=category,
            hs_code=result.hs_code,
            confidence=tables.UNMATCHED_CONFIDENCE,
            suggested_price=self.classifier.estimate_price(product_name),
            market_demand="medium",
            seasonality="Year-round",
            compliance_risk=self.classifier.assess_compliance_risk(category),
            description=f"Rules-based analysis for {product_name}. Enhanced analysis available with API configuration.",
        )

    # --- Free-text helpers ---
    def get_trade_insights(self, query: str) -> str:
        if not query or not query.strip():
            raise InvalidInput("Query is required")
        if self.gateway is not None and self.gateway.available:
            try:
                return self.gateway.generate_text(render_prompt(INSIGHTS_PROMPT, query=query))
            except RemoteUnavailable as e:
                logger.warning("Remote trade insights unavailable, using static answer: %s", e)
        return INSIGHTS_FALLBACK.format(query=query)

    def optimize_shipping(self, origin: str, destination: str, product: Dict[str, Any],
                          urgency: str = "standard") -> ShippingPlan:
        if urgency not in SHIPPING_ESTIMATES:
            raise InvalidInput(f"Urgency must be one of: {', '.join(SHIPPING_ESTIMATES)}")
        prompt = render_prompt(
            SHIPPING_PROMPT,
            origin=origin,
            destination=destination,
            name=product.get("name") or "Product",
            category=product.get("category") or "General",
            urgency=urgency,
        )
        remote = remote_or_none(self.gateway, prompt, ShippingPlan)
        if remote is not None:
            return remote

        shipping, total = SHIPPING_ESTIMATES[urgency]
        return ShippingPlan.model_validate({
            "recommendedCarriers": FALLBACK_CARRIERS,
            "documentation": ["Commercial Invoice", "Packing List", "Certificate of Origin"],
            "estimatedCosts": {"shipping": shipping, "duties": 15.0, "taxes": 25.0, "total": total},
            "notes": "Recommendations based on current market rates and service levels",
        })
