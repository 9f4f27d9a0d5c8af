# services/duty_calculator.py

import math
from datetime import date
from typing import List, Optional, Sequence, Tuple

from app.models import TaxBreakdown, TaxCalculation
from tariff_rules import tables
from utils.errors import InvalidInput
from utils.llm_utils import format_hs_code, validate_hs_code


class DutyCalculator:
    """
    Handles all logic related to calculating import duties and VAT/GST.
    """

    def __init__(self, hs_code_or_category: str, hs_code: Optional[str] = None):
        """
        Initializes the calculator for a product category or an HS code.

        An HS code is mapped back to its category through the signature
        table; unknown codes and categories use the default duty rate.
        """
        self.category, resolved_code = self._resolve(hs_code_or_category or "")
        self.hs_code = hs_code or resolved_code

    @staticmethod
    def _resolve(value: str) -> Tuple[str, str]:
        value = value.strip()
        digits = value.replace(".", "")
        if value and (validate_hs_code(value) or digits.isdigit()):
            code = format_hs_code(value)
            category = tables.hs_code_to_category().get(code, tables.GENERAL_CATEGORY)
            return category, code

        category = value or tables.GENERAL_CATEGORY
        for sig in tables.HS_SIGNATURES:
            if sig.category == category:
                return category, sig.hs_code
        return category, tables.UNKNOWN_HS_CODE

    def _get_duty_rate(self, country: str) -> float:
        """Category base rate scaled by the destination country's multiplier."""
        base_rate = tables.DUTY_RATES.get(self.category, tables.DEFAULT_DUTY_RATE)
        multiplier = tables.COUNTRY_DUTY_MULTIPLIERS.get(country, tables.DEFAULT_DUTY_MULTIPLIER)
        return base_rate * multiplier

    @staticmethod
    def _get_vat_rate(country: str) -> float:
        return tables.COUNTRY_VAT_RATES.get(country, tables.DEFAULT_VAT_RATE)

    def calculate_landed_cost(self, product_value: float, country: str,
                              effective_date: Optional[date] = None) -> TaxCalculation:
        """
        Calculates duty, VAT and total landed cost for one destination.

        Args:
            product_value: Declared value of the goods, must be >= 0
            country: Destination country name
            effective_date: Date stamped on the calculation (defaults to today)

        Returns:
            A TaxCalculation with the detailed breakdown.
        """
        product_value = _check_value(product_value)

        duty_rate = self._get_duty_rate(country)
        vat_rate = self._get_vat_rate(country)

        # VAT is levied on the duty-inclusive value
        duty_amount = product_value * (duty_rate / 100)
        vat_amount = (product_value + duty_amount) * (vat_rate / 100)
        total_tax = duty_amount + vat_amount
        total_amount = product_value + duty_amount + vat_amount

        return TaxCalculation(
            product_value=product_value,
            hs_code=self.hs_code,
            country=country,
            duty_rate=duty_rate,
            vat_rate=vat_rate,
            duty_amount=duty_amount,
            vat_amount=vat_amount,
            total_tax=total_tax,
            total_amount=total_amount,
            breakdown=TaxBreakdown(
                base_value=product_value,
                duty=duty_amount,
                vat=vat_amount,
                additional_fees=0.0,
            ),
            effective_date=(effective_date or date.today()).isoformat(),
            trade_agreements=list(tables.TRADE_AGREEMENTS.get(country, [])),
        )


def _check_value(product_value) -> float:
    try:
        value = float(product_value)
    except (TypeError, ValueError):
        raise InvalidInput(f"Product value must be a number, got {product_value!r}")
    if math.isnan(value) or math.isinf(value):
        raise InvalidInput("Product value must be a finite number")
    if value < 0:
        raise InvalidInput("Product value cannot be negative")
    return value


def estimate_taxes(product_value: float, hs_code_or_category: str,
                   destinations: Optional[Sequence[str]] = None,
                   hs_code: Optional[str] = None,
                   effective_date: Optional[date] = None) -> List[TaxCalculation]:
    """
    One TaxCalculation per destination, in the order the destinations were given.
    """
    _check_value(product_value)
    if destinations is None:
        destinations = tables.DEFAULT_DESTINATIONS

    calculator = DutyCalculator(hs_code_or_category, hs_code=hs_code)
    return [
        calculator.calculate_landed_cost(product_value, country, effective_date=effective_date)
        for country in destinations
    ]
