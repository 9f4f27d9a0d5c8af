# tariff_rules/tables.py
"""
Static rules tables used by the deterministic fallback engine.

Ordered tables are tuples and are evaluated top to bottom; the first match
wins, so entries must not be reordered. Plain lookups are dicts.
"""

from dataclasses import dataclass
from typing import Dict, List, Tuple

TARIFF_SCHEDULE = "2024 Harmonized Tariff Schedule"

UNKNOWN_HS_CODE = "9999.99.99"
GENERAL_CATEGORY = "General Merchandise"

MATCHED_CONFIDENCE = 94
UNMATCHED_CONFIDENCE = 85

DEFAULT_DUTY_RATE = 5.0
DEFAULT_DUTY_MULTIPLIER = 1.0
DEFAULT_VAT_RATE = 20.0

DEFAULT_DESTINATIONS: Tuple[str, ...] = (
    "United Kingdom",
    "Germany",
    "France",
    "Canada",
    "Australia",
)

# Words containing "phone" that are not phones. They are masked out before
# the phone keywords are tested.
PHONE_LOOKALIKES: Tuple[str, ...] = ("headphone", "earphone", "microphone")


@dataclass(frozen=True)
class HSSignature:
    hs_code: str
    category: str
    category_keywords: Tuple[str, ...] = ()
    name_keywords: Tuple[str, ...] = ()
    object_keywords: Tuple[str, ...] = ()
    attribute_keywords: Tuple[str, ...] = ()
    masked_terms: Tuple[str, ...] = ()


HS_SIGNATURES: Tuple[HSSignature, ...] = (
    HSSignature(
        hs_code="8517.12.00",
        category="Electronics - Mobile Devices",
        category_keywords=("mobile",),
        name_keywords=("phone", "smartphone"),
        object_keywords=("mobile phone", "smartphone"),
        masked_terms=PHONE_LOOKALIKES,
    ),
    HSSignature(
        hs_code="8471.30.01",
        category="Electronics - Computing",
        category_keywords=("computing",),
        name_keywords=("laptop", "computer"),
        object_keywords=("laptop", "computer"),
    ),
    HSSignature(
        hs_code="8518.30.00",
        category="Electronics - Audio",
        category_keywords=("audio",),
        name_keywords=("headphone", "speaker"),
        object_keywords=("headphones",),
        attribute_keywords=("audio",),
    ),
    HSSignature(
        hs_code="8525.80.30",
        category="Electronics - Photography",
        category_keywords=("photography",),
        name_keywords=("camera",),
        object_keywords=("camera",),
    ),
    HSSignature(
        hs_code="9102.11.00",
        category="Electronics - Wearables",
        category_keywords=("wearables",),
        name_keywords=("watch", "smartwatch"),
        object_keywords=("watch",),
    ),
    HSSignature(
        hs_code="6109.10.00",
        category="Textiles - Tops",
        category_keywords=("textiles", "tops"),
        name_keywords=("shirt", "clothing", "textile"),
        object_keywords=("clothing",),
    ),
)

HS_DESCRIPTIONS: Dict[str, str] = {
    "8517.12.00": "Telephones for cellular networks or for other wireless networks",
    "8471.30.01": "Portable automatic data processing machines, weighing not more than 10 kg",
    "8518.30.00": "Headphones and earphones, whether or not combined with a microphone",
    "8525.80.30": "Television cameras, digital cameras and video camera recorders",
    "9102.11.00": "Wrist-watches, electrically operated, whether or not incorporating a stop-watch facility",
    "6109.10.00": "T-shirts, singlets and other vests, of cotton, knitted or crocheted",
    UNKNOWN_HS_CODE: "Other products not elsewhere specified",
}

DUTY_RATES: Dict[str, float] = {
    "Electronics - Mobile Devices": 0.0,
    "Electronics - Computing": 0.0,
    "Electronics - Audio": 2.5,
    "Electronics - Photography": 0.0,
    "Electronics - Wearables": 4.2,
    "Textiles - Tops": 16.5,
    "Textiles - Bottoms": 16.6,
    "Footwear": 37.5,
    "Leather Goods": 17.6,
}

COUNTRY_DUTY_MULTIPLIERS: Dict[str, float] = {
    "United Kingdom": 1.0,
    "Germany": 1.0,
    "France": 1.0,
    "Canada": 0.8,
    "Australia": 1.2,
}

# VAT, or GST for Canada and Australia
COUNTRY_VAT_RATES: Dict[str, float] = {
    "United Kingdom": 20.0,
    "Germany": 19.0,
    "France": 20.0,
    "Canada": 5.0,
    "Australia": 10.0,
}

TRADE_AGREEMENTS: Dict[str, List[str]] = {
    "United Kingdom": ["UK-EU Trade Agreement", "CPTPP (pending)"],
    "Germany": ["EU Single Market", "EU-Mercosur Agreement"],
    "France": ["EU Single Market", "EU-Japan EPA"],
    "Canada": ["USMCA", "CETA", "CPTPP"],
    "Australia": ["CPTPP", "RCEP", "AUSFTA"],
}

ALTERNATIVE_CODES: Dict[str, List[str]] = {
    "8518.30.00": ["8518.21.00", "8518.29.00"],
    "8517.12.00": ["8517.11.00", "8517.18.00"],
    "8471.30.01": ["8471.41.01", "8471.49.00"],
    "6109.10.00": ["6109.90.00", "6205.20.00"],
}

# (category substrings, notices); every matching bucket contributes, in order
RESTRICTION_BUCKETS: Tuple[Tuple[Tuple[str, ...], Tuple[str, ...]], ...] = (
    (
        ("electronics",),
        (
            "CE marking required for EU markets",
            "FCC certification required for US market",
            "RoHS compliance required",
            "Energy efficiency labeling may be required",
        ),
    ),
    (
        ("textiles",),
        (
            "Textile labeling requirements",
            "REACH compliance for chemical substances",
            "Country of origin marking required",
        ),
    ),
    (
        ("food", "beverage"),
        (
            "FDA approval required for US",
            "Health certificates required",
            "Nutritional labeling mandatory",
        ),
    ),
)
GENERIC_RESTRICTION = "Standard import documentation required"

# (category substrings, risk); first match wins
COMPLIANCE_RISK_BUCKETS: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("food", "beverage"), "high"),
    (("textiles",), "high"),
    (("electronics",), "medium"),
)
DEFAULT_COMPLIANCE_RISK = "low"

# Product-name keywords -> analysis category, first match wins
CATEGORY_KEYWORDS: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("phone", "smartphone"), "Electronics - Mobile Devices"),
    (("laptop", "computer"), "Electronics - Computing"),
    (("headphone", "speaker"), "Electronics - Audio"),
    (("camera",), "Electronics - Photography"),
    (("watch", "smartwatch"), "Electronics - Wearables"),
    (("shirt", "clothing"), "Textiles - Tops"),
    (("shoe", "footwear"), "Footwear"),
    (("furniture",), "Home & Garden - Furniture"),
    (("kitchen", "cookware"), "Home & Garden - Kitchen"),
    (("sport", "fitness"), "Sports & Recreation"),
    (("toy", "game"), "Toys & Games"),
)

# Product-name keywords -> estimated unit price in USD, first match wins
PRICE_ESTIMATES: Tuple[Tuple[Tuple[str, ...], float], ...] = (
    (("phone", "smartphone"), 299.0),
    (("laptop", "computer"), 799.0),
    (("headphone",), 149.0),
    (("camera",), 599.0),
    (("watch", "smartwatch"), 249.0),
    (("shirt", "clothing"), 29.0),
    (("shoe",), 89.0),
    (("furniture",), 199.0),
    (("kitchen",), 79.0),
    (("sport", "fitness"), 39.0),
    (("toy",), 24.0),
)
DEFAULT_PRICE = 50.0


def hs_code_to_category() -> Dict[str, str]:
    """Reverse lookup of the signature table: HS code -> canonical category."""
    return {sig.hs_code: sig.category for sig in HS_SIGNATURES}
