# agents/classifier_agent.py
# Deterministic product classification over the static rules tables.

from typing import Callable, Dict, List, Optional, Tuple
from app.models import ProductDescriptor, ClassificationResult
from tariff_rules import tables

Predicate = Callable[[Dict[str, str]], bool]


def _mask(text: str, terms: Tuple[str, ...]) -> str:
    for term in terms:
        text = text.replace(term, " ")
    return text


def _contains_any(text: str, keywords: Tuple[str, ...]) -> bool:
    return any(k in text for k in keywords)


def _signature_predicate(sig: tables.HSSignature) -> Predicate:
    """Builds the predicate for one HS signature over normalized fields."""
    def predicate(fields: Dict[str, str]) -> bool:
        name = _mask(fields["name"], sig.masked_terms)
        return (
            _contains_any(fields["category"], sig.category_keywords)
            or _contains_any(name, sig.name_keywords)
            or _contains_any(_mask(fields["objects"], sig.masked_terms), sig.object_keywords)
            or _contains_any(fields["attributes"], sig.attribute_keywords)
        )
    return predicate


# Evaluated in order; the first predicate that holds decides the HS code.
CLASSIFICATION_RULES: List[Tuple[Predicate, tables.HSSignature]] = [
    (_signature_predicate(sig), sig) for sig in tables.HS_SIGNATURES
]


def _normalize(descriptor: ProductDescriptor) -> Dict[str, str]:
    return {
        "name": descriptor.name.lower(),
        "category": descriptor.category.lower(),
        "attributes": " ".join(descriptor.attributes).lower(),
        "objects": " ".join(sorted(descriptor.detected_objects)).lower(),
    }


def _mentions(text: str, keyword: str) -> bool:
    """Substring test that ignores longer look-alike words ('phone' in 'headphone')."""
    lookalikes = tuple(t for t in tables.PHONE_LOOKALIKES if keyword in t and keyword != t)
    return keyword in _mask(text, lookalikes)


def _keyword_lookup(name: str, table, default):
    text = name.lower()
    for keywords, value in table:
        if any(_mentions(text, k) for k in keywords):
            return value
    return default


class ProductClassifier:
    """
    Classifies products into HS codes using keyword signatures.
    Pure: no I/O, no state, never raises. Unknown products fall back to the
    sentinel code with a lower confidence.
    """

    def __init__(self, rules: Optional[List[Tuple[Predicate, tables.HSSignature]]] = None):
        self.rules = rules if rules is not None else CLASSIFICATION_RULES

    def match_signature(self, descriptor: ProductDescriptor) -> Optional[tables.HSSignature]:
        """
        Returns the first signature whose predicate holds.

        The free-text description is only consulted when nothing else matched,
        so a description mentioning another product never overrides the name.
        """
        fields = _normalize(descriptor)
        for predicate, sig in self.rules:
            if predicate(fields):
                return sig

        description = descriptor.description.lower()
        if description:
            desc_fields = {"name": description, "category": "", "attributes": "", "objects": ""}
            for predicate, sig in self.rules:
                if predicate(desc_fields):
                    return sig
        return None

    def classify(self, descriptor: ProductDescriptor) -> ClassificationResult:
        sig = self.match_signature(descriptor)

        if sig is not None:
            hs_code = sig.hs_code
            # A declared category with its own rate wins over the signature's
            rate_category = descriptor.category if descriptor.category in tables.DUTY_RATES else sig.category
            confidence = tables.MATCHED_CONFIDENCE
        else:
            hs_code = tables.UNKNOWN_HS_CODE
            rate_category = descriptor.category or tables.GENERAL_CATEGORY
            confidence = tables.UNMATCHED_CONFIDENCE

        category = descriptor.category or (sig.category if sig else tables.GENERAL_CATEGORY)

        return ClassificationResult(
            hs_code=hs_code,
            description=self.describe(hs_code, descriptor),
            category=category,
            duty_rate=self.estimate_duty_rate(rate_category),
            confidence=confidence,
            restrictions=self.restrictions_for(category),
            alternative_codes=list(tables.ALTERNATIVE_CODES.get(hs_code, [])),
            tariff_schedule=tables.TARIFF_SCHEDULE,
        )

    def describe(self, hs_code: str, descriptor: ProductDescriptor) -> str:
        if hs_code in tables.HS_DESCRIPTIONS:
            return tables.HS_DESCRIPTIONS[hs_code]
        return f"{descriptor.name} - {descriptor.category}"

    @staticmethod
    def estimate_duty_rate(category: str) -> float:
        return tables.DUTY_RATES.get(category, tables.DEFAULT_DUTY_RATE)

    @staticmethod
    def restrictions_for(category: str) -> List[str]:
        """Collects notices from every category bucket that applies."""
        category = category.lower()
        restrictions: List[str] = []
        for keywords, notices in tables.RESTRICTION_BUCKETS:
            if _contains_any(category, keywords):
                restrictions.extend(notices)
        return restrictions or [tables.GENERIC_RESTRICTION]

    @staticmethod
    def assess_compliance_risk(category: str) -> str:
        category = category.lower()
        for keywords, risk in tables.COMPLIANCE_RISK_BUCKETS:
            if _contains_any(category, keywords):
                return risk
        return tables.DEFAULT_COMPLIANCE_RISK

    @staticmethod
    def categorize_product(product_name: str) -> str:
        return _keyword_lookup(product_name, tables.CATEGORY_KEYWORDS, tables.GENERAL_CATEGORY)

    @staticmethod
    def estimate_price(product_name: str) -> float:
        return _keyword_lookup(product_name, tables.PRICE_ESTIMATES, tables.DEFAULT_PRICE)

    @staticmethod
    def category_for_hs_code(hs_code: str) -> Optional[str]:
        return tables.hs_code_to_category().get(hs_code.strip())
