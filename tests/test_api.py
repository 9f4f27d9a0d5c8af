import pytest
from fastapi.testclient import TestClient

from app.main import create_app

INVENTORY_CSV = "name,sku,availability\nBluetooth speaker,SP-1,40\nWool socks,SO-1,3\n"


def test_health(client):
    assert client.get("/api/health").json() == {"status": "ok", "remote_ai": False}


def test_classify(client):
    resp = client.post("/api/classify/hs-code", json={"name": "Wireless Bluetooth Headphones"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["hsCode"] == "8518.30.00"
    assert body["dutyRate"] == 2.5
    assert body["confidence"] == 94


def test_classify_requires_a_product(client):
    resp = client.post("/api/classify/hs-code", json={"name": ""})
    assert resp.status_code == 400


def test_analyze(client):
    body = client.post("/api/classify/analyze", json={"name": "Trail running shoe"}).json()
    assert body["analysis"]["category"] == "Footwear"
    assert body["aiClassified"] is False


def test_duty(client):
    resp = client.post("/api/duty/calculate", json={
        "productValue": 100, "category": "Electronics - Audio", "destinations": ["Germany"],
    })
    [calc] = resp.json()["calculations"]
    assert calc["totalAmount"] == pytest.approx(121.975)
    assert calc["tradeAgreements"] == ["EU Single Market", "EU-Mercosur Agreement"]


def test_duty_rejects_negative_value(client):
    resp = client.post("/api/duty/calculate", json={"productValue": -1, "category": "Footwear"})
    assert resp.status_code == 400
    assert "negative" in resp.json()["detail"]


def test_compliance_document(client):
    resp = client.post("/api/compliance/documents", json={
        "documentType": "Packing List", "product": {"name": "Desk lamp"},
        "destination": "Canada", "orderValue": 45,
    })
    assert resp.status_code == 200
    body = resp.json()
    assert body["type"] == "packing-list"
    assert body["content"].startswith("COMMERCIAL INVOICE")

    bad = client.post("/api/compliance/documents", json={"documentType": "Poem", "destination": "Canada"})
    assert bad.status_code == 400


def test_document_types(client):
    values = [t["value"] for t in client.get("/api/compliance/document-types").json()]
    assert "bill-of-lading" in values
    assert len(values) == 6


def test_inventory_lifecycle(client):
    listing = client.get("/api/inventory").json()
    assert listing["stats"]["totalItems"] == 3

    upload = client.post(
        "/api/inventory/upload",
        files={"file": ("inventory.csv", INVENTORY_CSV, "text/csv")},
        data={"upload_id": "batch-1"},
    ).json()
    assert upload["uploadId"] == "batch-1"
    assert upload["processed"] == 2
    assert upload["cancelled"] is False
    speaker, socks = upload["items"]
    assert speaker["hsCode"] == "8518.30.00"
    assert socks["status"] == "low-stock"

    assert client.get("/api/inventory/stats").json()["totalItems"] == 5
    assert [i["sku"] for i in client.get("/api/inventory", params={"q": "speaker"}).json()["items"]] == ["SP-1"]

    patched = client.patch(f"/api/inventory/{socks['id']}", json={"availability": 0})
    assert patched.json()["status"] == "out-of-stock"

    reclassified = client.post(f"/api/inventory/{speaker['id']}/reclassify")
    assert reclassified.json()["category"] == "Electronics - Audio"

    assert client.delete(f"/api/inventory/{socks['id']}").status_code == 204
    assert client.get(f"/api/inventory/{socks['id']}").status_code == 404
    assert client.delete(f"/api/inventory/{socks['id']}").status_code == 404


def test_upload_validation(client):
    resp = client.post("/api/inventory/upload", files={"file": ("empty.csv", "name,sku\n", "text/csv")})
    assert resp.status_code == 400
    assert client.post("/api/inventory/uploads/nope/cancel").status_code == 404


def test_invalid_patch(client):
    resp = client.patch("/api/inventory/1", json={"availability": -2})
    assert resp.status_code == 400


def test_logistics(client):
    content = "warehouse_id,sku_id,quantity,shipment_status\nWH-1,SKU-1,5,delivered\nWH-2,SKU-2,7,in-transit\n"
    body = client.post("/api/logistics/upload", files={"file": ("l.csv", content, "text/csv")}).json()
    assert body["summary"]["totalQuantity"] == 12
    assert len(client.get("/api/logistics").json()["records"]) == 2

    export = client.get("/api/reports/logistics/export", params={"format": "csv"})
    assert export.status_code == 200
    assert export.text.splitlines()[0].startswith("Warehouse ID,Warehouse Name")


def test_shipping(client):
    plan = client.post("/api/logistics/optimize", json={
        "origin": "United States", "destination": "France", "product": {"name": "Camera"}, "urgency": "economy",
    }).json()
    assert plan["estimatedCosts"]["total"] == 75.0
    bad = client.post("/api/logistics/optimize", json={"origin": "US", "destination": "FR", "urgency": "rocket"})
    assert bad.status_code == 400


def test_reports(client):
    assert client.get("/api/reports/dashboard").json()["total_skus"] == 3
    assert len(client.get("/api/reports/billing").json()) == 3
    assert len(client.get("/api/reports/compliance").json()) == 3

    resp = client.get("/api/reports/inventory/export", params={"format": "excel"})
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("application/vnd.ms-excel")
    assert 'filename="inventory-report-' in resp.headers["content-disposition"]

    assert client.get("/api/reports/unknown/export").status_code == 404
    assert client.get("/api/reports/billing/export", params={"format": "docx"}).status_code == 400


def test_insights(client):
    body = client.post("/api/insights", json={"query": "tariffs on steel"}).json()
    assert '"tariffs on steel"' in body["answer"]
    assert client.post("/api/insights", json={"query": ""}).status_code == 400


def test_remote_answers_flow_through(config, make_llm):
    llm = make_llm({"hsCode": "8517.13.00", "description": "Smartphones", "confidence": 99})
    with TestClient(create_app(config, llm=llm)) as client:
        body = client.post("/api/classify/hs-code", json={"name": "Pixel 9"}).json()
    assert body["hsCode"] == "8517.13.00"
    assert body["confidence"] == 99


def test_upload_with_unclosed_quote_is_a_client_error(client):
    body = 'name,sku,availability\nWidget,A1,5\n"Broken,B2,7\n'
    resp = client.post("/api/inventory/upload", files={"file": ("bad.csv", body, "text/csv")})
    assert resp.status_code == 400


def test_patch_cannot_duplicate_a_sku(client):
    resp = client.patch("/api/inventory/2", json={"sku": "TN-ELE-001"})
    assert resp.status_code == 400
