# utils/csv_io.py
import io
import time
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Tuple, Union

import pandas as pd

from app.models import LogisticsRecord, LogisticsSummary
from utils.errors import InvalidInput, ParseError

logger = logging.getLogger(__name__)

NAME_COLUMNS = ("name", "productname", "product")
SKU_COLUMNS = ("sku",)
AVAILABILITY_COLUMNS = ("availability", "stock", "quantity")

DEFAULT_WAREHOUSE = "Main Warehouse"
DEFAULT_COUNTRY = "United States"

EMPTY_CSV_MESSAGE = "CSV file must contain at least a header row and one data row"


def _to_text(source: Union[str, bytes]) -> str:
    if isinstance(source, bytes):
        return source.decode("utf-8-sig", errors="replace")
    return source


def read_csv_frame(source: Union[str, bytes]) -> pd.DataFrame:
    """
    Reads CSV text into a DataFrame of stripped strings with lowercase headers.

    Rows with more fields than the header are cut back to the header width
    instead of being rejected, and short rows are padded with empty strings,
    so the row count always matches the file.
    """
    text = _to_text(source)
    if not text or not text.strip():
        raise InvalidInput(EMPTY_CSV_MESSAGE)

    try:
        width = len(pd.read_csv(io.StringIO(text), nrows=0, engine="python").columns)
        df = pd.read_csv(
            io.StringIO(text),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            engine="python",
            index_col=False,
            on_bad_lines=lambda bad_line: bad_line[:width],
        )
    except pd.errors.ParserError as e:
        # Unbalanced quotes swallow the rest of the file, so no row can be trusted
        raise InvalidInput(f"CSV file could not be read, check for unclosed quotes: {e}") from e
    if df.empty:
        raise InvalidInput(EMPTY_CSV_MESSAGE)

    df = df.fillna("")
    df.columns = [str(c).strip().lower() for c in df.columns]
    return df.apply(lambda col: col.astype(str).str.strip())


def parse_csv_rows(source: Union[str, bytes]) -> List[Dict[str, str]]:
    """Rows as dicts keyed by lowercase header."""
    return read_csv_frame(source).to_dict("records")


def _first(row: Dict[str, str], keys: Tuple[str, ...]) -> str:
    for key in keys:
        value = row.get(key, "")
        if value:
            return value
    return ""


def _parse_number(value: str, cast, default, column: str, row_number: int, errors: List[ParseError]):
    if value == "":
        return default
    try:
        return cast(float(value)) if cast is int else cast(value)
    except (TypeError, ValueError, OverflowError):
        errors.append(ParseError(f"Row {row_number}: '{value}' is not a valid {column}", row_number))
        return default


@dataclass
class InventoryRow:
    """One inventory CSV row with defaults applied."""
    row_number: int
    name: str
    sku: str
    availability: int
    warehouse: str
    country: str
    description: str = ""
    errors: List[ParseError] = field(default_factory=list)


def parse_inventory_csv(source: Union[str, bytes]) -> List[InventoryRow]:
    """
    Parses an inventory upload (name, sku, availability, warehouse, country,
    description). Headers match case-insensitively. Bad values are defaulted
    and reported on the row rather than dropping the row.
    """
    rows: List[InventoryRow] = []
    stamp = int(time.time() * 1000)
    for i, raw in enumerate(parse_csv_rows(source)):
        row_number = i + 1
        errors: List[ParseError] = []

        availability = _parse_number(
            _first(raw, AVAILABILITY_COLUMNS), int, 0, "availability", row_number, errors
        )
        if availability < 0:
            errors.append(ParseError(f"Row {row_number}: availability cannot be negative", row_number))
            availability = 0

        rows.append(InventoryRow(
            row_number=row_number,
            name=_first(raw, NAME_COLUMNS) or f"Product {row_number}",
            sku=_first(raw, SKU_COLUMNS) or f"SKU-{stamp}-{i}",
            availability=availability,
            warehouse=raw.get("warehouse") or DEFAULT_WAREHOUSE,
            country=raw.get("country") or DEFAULT_COUNTRY,
            description=raw.get("description", ""),
            errors=errors,
        ))
        for error in errors:
            logger.warning("Defaulted inventory value: %s", error)
    return rows


FLOAT_COLUMNS = (
    "latitude", "longitude",
    "origin_latitude", "origin_longitude",
    "destination_latitude", "destination_longitude",
)


def parse_logistics_csv(source: Union[str, bytes]) -> Tuple[List[LogisticsRecord], List[ParseError]]:
    """
    Parses a logistics upload (warehouses, SKUs and shipments). Every row
    yields a record; missing or unreadable fields take their defaults.
    """
    records: List[LogisticsRecord] = []
    errors: List[ParseError] = []
    now = pd.Timestamp.now(tz="UTC").isoformat()

    for i, raw in enumerate(parse_csv_rows(source)):
        row_number = i + 1
        values = {k: v for k, v in raw.items() if v != "" and k in LogisticsRecord.model_fields}

        for column in FLOAT_COLUMNS:
            if column in values:
                values[column] = _parse_number(values[column], float, 0.0, column, row_number, errors)
        if "quantity" in values:
            values["quantity"] = _parse_number(values["quantity"], int, 0, "quantity", row_number, errors)

        values.setdefault("warehouse_id", f"WH-{row_number}")
        values.setdefault("sku_id", f"SKU-{row_number}")
        values.setdefault("shipment_id", f"SHP-{row_number}")
        values.setdefault("last_updated", now)
        records.append(LogisticsRecord(**values))

    for error in errors:
        logger.warning("Defaulted logistics value: %s", error)
    return records, errors


def summarize_shipments(records: List[LogisticsRecord]) -> LogisticsSummary:
    statuses = Counter(r.shipment_status for r in records)
    return LogisticsSummary(
        total_records=len(records),
        total_quantity=sum(r.quantity for r in records),
        warehouse_count=len({r.warehouse_id for r in records}),
        carrier_count=len({r.carrier for r in records}),
        status_counts=dict(statuses),
    )
