# utils/export.py
"""
Tabular exports shared by the inventory, billing, compliance and logistics
views. Every export is derived from one ExportData shape and rendered as
CSV, a spreadsheet-compatible HTML table (.xls) or a print-ready HTML page.
"""
from dataclasses import dataclass
from datetime import datetime
from html import escape
from typing import Any, Dict, Iterable, List, Optional, Tuple

import pandas as pd

from app.models import InventoryItem, LogisticsRecord
from utils.errors import InvalidInput

BRAND = "TradeNest"


@dataclass
class ExportData:
    filename: str
    rows: List[Dict[str, Any]]
    headers: List[str]
    title: Optional[str] = None
    subtitle: Optional[str] = None


def _cell(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def to_csv(data: ExportData) -> str:
    """CSV text with RFC4180-style quoting (fields with commas, quotes or newlines are quoted)."""
    table = [[_cell(row.get(h)) for h in data.headers] for row in data.rows]
    df = pd.DataFrame(table, columns=data.headers, dtype=object)
    return df.to_csv(index=False, lineterminator="\n")


def _table_html(data: ExportData) -> str:
    head = "".join(f"<th>{escape(h)}</th>" for h in data.headers)
    body = "".join(
        "<tr>" + "".join(f"<td>{escape(_cell(row.get(h)))}</td>" for h in data.headers) + "</tr>"
        for row in data.rows
    )
    return f"<table><thead><tr>{head}</tr></thead><tbody>{body}</tbody></table>"


def to_excel_html(data: ExportData) -> str:
    """HTML table that spreadsheet applications open as a worksheet."""
    parts = [
        '<html xmlns:o="urn:schemas-microsoft-com:office:office" '
        'xmlns:x="urn:schemas-microsoft-com:office:excel" '
        'xmlns="http://www.w3.org/TR/REC-html40">',
        "<head>",
        '<meta charset="utf-8">',
        '<meta name="ProgId" content="Excel.Sheet">',
        f'<meta name="Generator" content="{BRAND} Export">',
        "<!--[if gte mso 9]><xml><x:ExcelWorkbook><x:ExcelWorksheets><x:ExcelWorksheet>"
        "<x:Name>Data</x:Name><x:WorksheetOptions><x:DisplayGridlines/></x:WorksheetOptions>"
        "</x:ExcelWorksheet></x:ExcelWorksheets></x:ExcelWorkbook></xml><![endif]-->",
        "<style>table { border-collapse: collapse; width: 100%; } "
        "th, td { border: 1px solid #ddd; padding: 8px; text-align: left; } "
        "th { background-color: #f2f2f2; font-weight: bold; } "
        ".header { text-align: center; margin-bottom: 20px; font-size: 18px; font-weight: bold; } "
        ".subtitle { text-align: center; margin-bottom: 10px; font-size: 14px; color: #666; }</style>",
        "</head>",
        "<body>",
    ]
    if data.title:
        parts.append(f'<div class="header">{escape(data.title)}</div>')
    if data.subtitle:
        parts.append(f'<div class="subtitle">{escape(data.subtitle)}</div>')
    parts.append(_table_html(data))
    parts.append("</body></html>")
    return "\n".join(parts)


PRINT_STYLE = """@page { size: A4 landscape; margin: 0.5in; }
body { font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif; margin: 0; padding: 20px; font-size: 12px; }
.header { text-align: center; margin-bottom: 30px; border-bottom: 2px solid #333; padding-bottom: 15px; }
.header h1 { margin: 0; color: #333; font-size: 24px; }
.header .subtitle { margin: 5px 0 0 0; color: #666; font-size: 14px; }
.header .generated { margin: 10px 0 0 0; color: #999; font-size: 12px; }
.stats { display: flex; justify-content: space-around; margin: 20px 0; padding: 15px; border: 1px solid #e2e8f0; }
.stat-value { font-size: 18px; font-weight: bold; }
.stat-label { font-size: 12px; color: #718096; }
table { width: 100%; border-collapse: collapse; margin-top: 20px; }
th { background: #5a67d8; color: white; padding: 12px 8px; text-align: left; font-size: 11px; }
td { padding: 10px 8px; border: 1px solid #e2e8f0; font-size: 10px; }
tr:nth-child(even) { background-color: #f8fafc; }
.footer { margin-top: 30px; text-align: center; font-size: 10px; color: #999; }
@media print { body { margin: 0; } .no-print { display: none; } }"""


def to_print_html(data: ExportData, generated_at: Optional[datetime] = None) -> str:
    """Standalone HTML report meant to be printed or saved as PDF from a browser."""
    generated_at = generated_at or datetime.now()
    title = data.title or f"{BRAND} Export Report"
    subtitle = f'<div class="subtitle">{escape(data.subtitle)}</div>' if data.subtitle else ""
    stats = (
        '<div class="stats">'
        f'<div class="stat-item"><div class="stat-value">{len(data.rows)}</div>'
        '<div class="stat-label">Total Records</div></div>'
        f'<div class="stat-item"><div class="stat-value">{len(data.headers)}</div>'
        '<div class="stat-label">Data Fields</div></div>'
        f'<div class="stat-item"><div class="stat-value">{generated_at.date().isoformat()}</div>'
        '<div class="stat-label">Export Date</div></div>'
        "</div>"
    )
    return (
        "<!DOCTYPE html>\n<html>\n<head>\n"
        f"<title>{escape(title)}</title>\n<meta charset=\"utf-8\">\n"
        f"<style>{PRINT_STYLE}</style>\n</head>\n<body>\n"
        f'<div class="header"><h1>{escape(title)}</h1>{subtitle}'
        f'<div class="generated">Generated on: {generated_at.strftime("%Y-%m-%d %H:%M:%S")}</div></div>\n'
        f"{stats}\n{_table_html(data)}\n"
        f'<div class="footer"><p><strong>{BRAND}</strong> - AI-Powered Global Trade Platform</p>'
        f"<p>This report contains {len(data.rows)} records exported from your {BRAND} dashboard</p></div>\n"
        "</body>\n</html>"
    )


# format -> (renderer, media type, extension)
EXPORT_FORMATS = {
    "csv": (to_csv, "text/csv; charset=utf-8", "csv"),
    "excel": (to_excel_html, "application/vnd.ms-excel; charset=utf-8", "xls"),
    "pdf": (to_print_html, "text/html; charset=utf-8", "html"),
}


def render_export(data: ExportData, export_format: str) -> Tuple[str, str, str]:
    """Returns (content, media type, filename) for one of the EXPORT_FORMATS."""
    if export_format not in EXPORT_FORMATS:
        raise InvalidInput(f"Export format must be one of: {', '.join(EXPORT_FORMATS)}")
    renderer, media_type, extension = EXPORT_FORMATS[export_format]
    return renderer(data), media_type, f"{data.filename}.{extension}"


# --- Label formatters ---
STOCK_STATUS_LABELS = {"in-stock": "In Stock", "low-stock": "Low Stock", "out-of-stock": "Out of Stock"}
DEMAND_LABELS = {"high": "High Demand", "medium": "Medium Demand", "low": "Low Demand"}
RISK_LABELS = {"low": "Low Risk", "medium": "Medium Risk", "high": "High Risk"}
PAYMENT_LABELS = {"paid": "Paid", "pending": "Pending", "overdue": "Overdue", "processing": "Processing"}
DOCUMENT_STATUS_LABELS = {"completed": "Generated", "pending": "In Progress", "error": "Failed", "draft": "Draft"}
SHIPMENT_LABELS = {"delivered": "Delivered", "in-transit": "In Transit", "delayed": "Delayed", "processing": "Processing"}


def _label(labels: Dict[str, str], value: Optional[str], default: str = "Unknown") -> str:
    if not value:
        return default
    return labels.get(value, value)


def _stamp() -> str:
    return datetime.now().date().isoformat()


# --- Report builders ---
def inventory_report(items: Iterable[InventoryItem]) -> ExportData:
    headers = [
        "SKU", "Product Name", "Category", "Current Stock", "Stock Status", "HS Code",
        "Price", "Market Demand", "Compliance Risk", "Warehouse Location", "AI Classified", "Last Updated",
    ]
    rows = [
        {
            "SKU": item.sku,
            "Product Name": item.name,
            "Category": item.category,
            "Current Stock": item.availability,
            "Stock Status": _label(STOCK_STATUS_LABELS, item.status),
            "HS Code": item.hs_code or "Pending",
            "Price": f"${item.price:.2f}" if item.price is not None else "TBD",
            "Market Demand": _label(DEMAND_LABELS, item.market_demand),
            "Compliance Risk": _label(RISK_LABELS, item.compliance_risk),
            "Warehouse Location": item.warehouse,
            "AI Classified": "Yes" if item.ai_classified else "No",
            "Last Updated": item.last_synced,
        }
        for item in items
    ]
    return ExportData(
        filename=f"inventory-report-{_stamp()}",
        rows=rows,
        headers=headers,
        title=f"{BRAND} Inventory Management Report",
        subtitle="Complete inventory analysis with AI classification and market insights",
    )


def transaction_report(transactions: Iterable[Dict[str, Any]]) -> ExportData:
    headers = [
        "Transaction Date", "Order Reference", "Product Name", "Destination Country",
        "Base Order Value", "VAT Rate (%)", "Duty Amount", "VAT Amount", "Total Amount",
        "Payment Status", "HS Code", "Trade Agreement",
    ]
    rows = [
        {
            "Transaction Date": tx.get("date", ""),
            "Order Reference": tx.get("order_ref") or tx.get("id") or "N/A",
            "Product Name": tx.get("product") or "Unknown Product",
            "Destination Country": tx.get("country") or "N/A",
            "Base Order Value": f"${tx.get('order_value', 0.0):.2f}",
            "VAT Rate (%)": f"{tx.get('vat_rate', 0.0)}%",
            "Duty Amount": f"${tx.get('duty_amount', 0.0):.2f}",
            "VAT Amount": f"${tx.get('vat_amount', 0.0):.2f}",
            "Total Amount": f"${tx.get('total_amount', 0.0):.2f}",
            "Payment Status": _label(PAYMENT_LABELS, tx.get("status")),
            "HS Code": tx.get("hs_code") or "TBD",
            "Trade Agreement": ", ".join(tx.get("trade_agreements") or []) or "Standard Rates",
        }
        for tx in transactions
    ]
    return ExportData(
        filename=f"billing-transactions-{_stamp()}",
        rows=rows,
        headers=headers,
        title=f"{BRAND} Billing & Transaction Report",
        subtitle="Detailed financial transactions with calculated taxes and duties",
    )


def compliance_report(documents: Iterable[Dict[str, Any]]) -> ExportData:
    headers = [
        "Document ID", "Document Type", "Product Name", "Destination Country", "Order Reference",
        "Generation Status", "Compliance Risk Level", "Created Date", "AI Generated",
    ]
    rows = [
        {
            "Document ID": doc.get("id", ""),
            "Document Type": doc.get("type") or "Commercial Invoice",
            "Product Name": doc.get("product_name") or "N/A",
            "Destination Country": doc.get("destination") or "N/A",
            "Order Reference": doc.get("order_ref") or "N/A",
            "Generation Status": _label(DOCUMENT_STATUS_LABELS, doc.get("status")),
            "Compliance Risk Level": _label(RISK_LABELS, doc.get("compliance_risk")),
            "Created Date": doc.get("created_date", ""),
            "AI Generated": "Yes" if doc.get("ai_generated") else "No",
        }
        for doc in documents
    ]
    return ExportData(
        filename=f"compliance-documents-{_stamp()}",
        rows=rows,
        headers=headers,
        title=f"{BRAND} Compliance & Documentation Report",
        subtitle="Trade document status and regulatory compliance tracking",
    )


def logistics_report(records: Iterable[LogisticsRecord]) -> ExportData:
    headers = [
        "Warehouse ID", "Warehouse Name", "Address", "Coordinates", "SKU ID", "HS Code",
        "Product Description", "Quantity", "Shipment ID", "Shipment Status", "Origin",
        "Destination", "Carrier", "ETA", "Last Updated",
    ]
    rows = [
        {
            "Warehouse ID": r.warehouse_id,
            "Warehouse Name": r.warehouse_name,
            "Address": r.address,
            "Coordinates": f"{r.latitude}, {r.longitude}",
            "SKU ID": r.sku_id,
            "HS Code": r.hs_code,
            "Product Description": r.sku_description,
            "Quantity": r.quantity,
            "Shipment ID": r.shipment_id,
            "Shipment Status": _label(SHIPMENT_LABELS, r.shipment_status),
            "Origin": r.origin,
            "Destination": r.destination,
            "Carrier": r.carrier,
            "ETA": r.eta,
            "Last Updated": r.last_updated,
        }
        for r in records
    ]
    return ExportData(
        filename=f"logistics-report-{_stamp()}",
        rows=rows,
        headers=headers,
        title=f"{BRAND} Logistics & Warehouse Report",
        subtitle="Comprehensive logistics data with warehouse and shipment tracking",
    )


def dashboard_report(dashboard: Dict[str, Any]) -> ExportData:
    updated = dashboard.get("last_updated", "")
    metrics = [
        ("Total SKUs", dashboard.get("total_skus", 0)),
        ("AI Classified", dashboard.get("ai_classified", 0)),
        ("Low Stock", dashboard.get("low_stock", 0)),
        ("Out of Stock", dashboard.get("out_of_stock", 0)),
        ("Compliance Rate", f"{dashboard.get('compliance_rate', 0)}%"),
    ]
    return ExportData(
        filename=f"dashboard-report-{_stamp()}",
        rows=[{"Metric": m, "Current Value": v, "Last Updated": updated} for m, v in metrics],
        headers=["Metric", "Current Value", "Last Updated"],
        title=f"{BRAND} Dashboard Analytics Report",
        subtitle="Overview of trade operations and classification coverage",
    )
