from datetime import date

import pytest

from app.models import DocumentType, ProductDescriptor
from services.document_service import INVOICE_TEMPLATE
from services.trade_ai import FALLBACK_CARRIERS, TradeAI
from tariff_rules import tables
from utils.errors import InvalidInput


def test_offline_hs_code_uses_rules(offline_ai):
    result = offline_ai.get_hs_code(ProductDescriptor(name="Wireless Bluetooth Headphones"))
    assert result.hs_code == "8518.30.00"
    assert result.confidence == 94
    assert result.tariff_schedule == tables.TARIFF_SCHEDULE


def test_blank_product_is_rejected(offline_ai):
    with pytest.raises(InvalidInput):
        offline_ai.get_hs_code(ProductDescriptor(name="  "))


def test_remote_hs_code_overrides_field_by_field(remote_ai):
    ai, llm = remote_ai({"hsCode": "8518.30.00", "description": "Wireless headphones", "confidence": 98})
    result = ai.get_hs_code(ProductDescriptor(name="Headphones", category="Electronics - Audio"))
    assert result.description == "Wireless headphones"
    assert result.confidence == 98
    # Not in the remote answer, so taken from the rules
    assert result.duty_rate == 2.5
    assert result.alternative_codes == ["8518.21.00", "8518.29.00"]
    assert "Headphones" in llm.prompts[0]


def test_remote_failure_falls_back(remote_ai):
    ai, _ = remote_ai(ConnectionError("connection refused"))
    result = ai.get_hs_code(ProductDescriptor(name="Garden hose"))
    assert result.hs_code == tables.UNKNOWN_HS_CODE
    assert result.confidence == tables.UNMATCHED_CONFIDENCE


def test_offline_taxes(offline_ai):
    [calc] = offline_ai.calculate_taxes("Electronics - Audio", None, 100, ["Germany"])
    assert calc.total_amount == pytest.approx(121.975)


def test_negative_value_never_reaches_remote(remote_ai):
    ai, llm = remote_ai({"taxCalculations": []})
    with pytest.raises(InvalidInput):
        ai.calculate_taxes("Footwear", None, -10, ["France"])
    assert llm.prompts == []


def test_remote_taxes_for_other_countries_are_ignored(remote_ai):
    remote_calc = {
        "productValue": 100, "hsCode": "6403.99.00", "country": "Japan", "dutyRate": 10,
        "vatRate": 10, "dutyAmount": 10, "vatAmount": 11, "totalTax": 21, "totalAmount": 121,
    }
    ai, _ = remote_ai({"taxCalculations": [remote_calc]})
    [calc] = ai.calculate_taxes("Footwear", None, 100, ["France"])
    assert calc.country == "France"
    assert calc.duty_rate == 37.5


def test_remote_taxes_are_used_when_they_match(remote_ai):
    remote_calc = {
        "productValue": 100, "hsCode": "6403.99.00", "country": "France", "dutyRate": 8,
        "vatRate": 20, "dutyAmount": 8, "vatAmount": 21.6, "totalTax": 29.6, "totalAmount": 129.6,
    }
    ai, _ = remote_ai({"taxCalculations": [remote_calc]})
    [calc] = ai.calculate_taxes("Footwear", None, 100, ["France"])
    assert calc.duty_rate == 8


def test_remote_total_below_value_is_rejected(remote_ai):
    remote_calc = {
        "productValue": 100, "hsCode": "6403.99.00", "country": "France", "dutyRate": 8,
        "vatRate": 20, "dutyAmount": 8, "vatAmount": 21.6, "totalTax": 29.6, "totalAmount": 50,
    }
    ai, _ = remote_ai({"taxCalculations": [remote_calc]})
    [calc] = ai.calculate_taxes("Footwear", None, 100, ["France"])
    assert calc.duty_rate == 37.5


def test_malformed_remote_document_gives_template(remote_ai):
    ai, _ = remote_ai("Here is your invoice: {not json")
    product = {"name": "Smart Home Security Camera", "hsCode": "8525.80.30"}
    doc = ai.generate_compliance_document(
        "Bill of Lading", product, "Germany", 299, issue_date=date(2024, 1, 15)
    )
    expected = INVOICE_TEMPLATE.format(
        issue_date="01/15/2024", destination="Germany",
        product_name="Smart Home Security Camera", order_value="299", hs_code="8525.80.30",
    )
    assert doc.content == expected
    assert doc.type == DocumentType.BILL_OF_LADING


def test_remote_document_is_used(remote_ai):
    ai, _ = remote_ai({"content": "CERTIFICATE OF ORIGIN ...", "validityPeriod": "12 months"})
    doc = ai.generate_compliance_document("certificate-of-origin", {"name": "Shirt"}, "France", 50)
    assert doc.content == "CERTIFICATE OF ORIGIN ..."
    assert doc.validity_period == "12 months"
    assert doc.requirements  # filled from the defaults


def test_fallback_analysis(offline_ai):
    analysis, from_remote = offline_ai.analyze_product("Organic Cotton T-Shirt")
    assert from_remote is False
    assert analysis.category == "Textiles - Tops"
    assert analysis.hs_code == "6109.10.00"
    assert analysis.suggested_price == 29.0
    assert analysis.compliance_risk == "high"
    assert analysis.confidence == tables.UNMATCHED_CONFIDENCE


def test_remote_analysis(remote_ai):
    ai, _ = remote_ai({"category": "Electronics - Audio", "hsCode": "8518.30.00", "marketDemand": "high"})
    analysis, from_remote = ai.analyze_product("Studio monitor headphones")
    assert from_remote is True
    assert analysis.market_demand == "high"
    assert analysis.confidence == 90
    assert analysis.suggested_price == 149.0


def test_insights(offline_ai, remote_ai):
    assert '"duty drawback"' in offline_ai.get_trade_insights("duty drawback")
    ai, _ = remote_ai("Consider bonded warehousing.")
    assert ai.get_trade_insights("duty drawback") == "Consider bonded warehousing."
    with pytest.raises(InvalidInput):
        offline_ai.get_trade_insights("   ")


def test_shipping_plan(offline_ai):
    plan = offline_ai.optimize_shipping("United States", "Germany", {"name": "Camera"}, urgency="express")
    assert [c.name for c in plan.recommended_carriers] == [c["name"] for c in FALLBACK_CARRIERS]
    assert plan.estimated_costs.shipping == 65.0
    assert plan.estimated_costs.total == 105.0
    with pytest.raises(InvalidInput):
        offline_ai.optimize_shipping("US", "DE", {}, urgency="teleport")


def test_facade_without_gateway():
    ai = TradeAI()
    assert ai.get_hs_code(ProductDescriptor(name="Laptop")).hs_code == "8471.30.01"


def test_remote_taxes_for_another_value_are_ignored(remote_ai):
    remote_calc = {
        "productValue": 500, "hsCode": "6403.99.00", "country": "France", "dutyRate": 8,
        "vatRate": 20, "dutyAmount": 40, "vatAmount": 108, "totalTax": 148, "totalAmount": 648,
    }
    ai, _ = remote_ai({"taxCalculations": [remote_calc]})
    [calc] = ai.calculate_taxes("Footwear", None, 100, ["France"])
    assert calc.product_value == 100
    assert calc.duty_rate == 37.5


def test_remote_taxes_that_do_not_add_up_are_ignored(remote_ai):
    remote_calc = {
        "productValue": 100, "hsCode": "6403.99.00", "country": "France", "dutyRate": 8,
        "vatRate": 20, "dutyAmount": 8, "vatAmount": 20, "totalTax": 28, "totalAmount": 140,
    }
    ai, _ = remote_ai({"taxCalculations": [remote_calc]})
    [calc] = ai.calculate_taxes("Footwear", None, 100, ["France"])
    assert calc.duty_rate == 37.5
