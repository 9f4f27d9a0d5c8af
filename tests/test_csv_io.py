import pytest

from utils.csv_io import parse_csv_rows, parse_inventory_csv, parse_logistics_csv, summarize_shipments
from utils.errors import InvalidInput


def test_headers_are_case_insensitive_with_aliases():
    rows = parse_inventory_csv("ProductName,SKU,Stock\nDesk lamp,DL-1,7\n")
    assert rows[0].name == "Desk lamp"
    assert rows[0].sku == "DL-1"
    assert rows[0].availability == 7


def test_defaults_for_missing_columns():
    [row] = parse_inventory_csv("name\nDesk lamp\n")
    assert row.availability == 0
    assert row.warehouse == "Main Warehouse"
    assert row.country == "United States"
    assert row.sku.startswith("SKU-")


def test_bad_values_are_defaulted_not_dropped():
    rows = parse_inventory_csv("name,availability\nLamp,lots\nChair,-3\nTable,12\n")
    assert [r.availability for r in rows] == [0, 0, 12]
    assert len(rows[0].errors) == 1
    assert rows[0].errors[0].row_number == 1
    assert len(rows[1].errors) == 1
    assert rows[2].errors == []


def test_ragged_rows_keep_row_count():
    rows = parse_inventory_csv("name,sku,availability\nLamp,L-1,3,extra,fields\nChair\n")
    assert len(rows) == 2
    assert rows[0].availability == 3
    assert rows[1].name == "Chair"


def test_quoted_fields():
    rows = parse_csv_rows('name,description\n"Lamp, brass","Says ""hello"""\n')
    assert rows == [{"name": "Lamp, brass", "description": 'Says "hello"'}]


@pytest.mark.parametrize("content", ["", "   \n", "name,sku,availability\n"])
def test_empty_files_are_rejected(content):
    with pytest.raises(InvalidInput):
        parse_inventory_csv(content)


def test_logistics_defaults_and_summary():
    content = (
        "warehouse_id,sku_id,quantity,shipment_status,carrier,latitude\n"
        "WH-9,SKU-A,10,delivered,DHL,51.5\n"
        ",,abc,,,north\n"
    )
    records, errors = parse_logistics_csv(content)
    assert len(records) == 2
    assert records[0].latitude == 51.5
    assert records[1].warehouse_id == "WH-2"
    assert records[1].shipment_id == "SHP-2"
    assert records[1].hs_code == "0000.00.00"
    assert records[1].shipment_status == "pending"
    assert records[1].carrier == "Standard Carrier"
    assert records[1].quantity == 0
    assert len(errors) == 2

    summary = summarize_shipments(records)
    assert summary.total_records == 2
    assert summary.total_quantity == 10
    assert summary.warehouse_count == 2
    assert summary.status_counts == {"delivered": 1, "pending": 1}


def test_unclosed_quote_is_rejected():
    with pytest.raises(InvalidInput):
        parse_inventory_csv('name,sku,availability\nWidget,A1,5\n"Broken,B2,7\n')
    with pytest.raises(InvalidInput):
        parse_logistics_csv('warehouse_id,sku_id,quantity\nWH-1,SKU-1,5\n"WH-2,SKU-2,7\n')
