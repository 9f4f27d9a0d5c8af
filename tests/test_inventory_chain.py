import pytest

from chains.inventory_chain import BatchRegistry, CancellationToken, InventoryAnalysisChain
from tariff_rules import tables
from utils.csv_io import parse_inventory_csv
from utils.errors import ItemNotFound

CSV = b"""name,sku,availability,warehouse,country
Wireless Headphones,HP-1,0,UK-LON-01,United Kingdom
Cotton Shirt,SH-1,15,FR-PAR-01,France
Laptop Pro,LP-1,150,,
"""


@pytest.fixture
def chain(offline_ai, store):
    return InventoryAnalysisChain(offline_ai, store, delay_seconds=0)


def test_ingest_csv_adds_classified_items(chain, store):
    items = chain.ingest_csv(CSV)
    assert [i.sku for i in items] == ["HP-1", "SH-1", "LP-1"]
    assert [i.status for i in items] == ["out-of-stock", "low-stock", "in-stock"]
    assert [i.hs_code for i in items] == ["8518.30.00", "6109.10.00", "8471.30.01"]
    assert all(not i.ai_classified for i in items)
    assert items[2].warehouse == "Main Warehouse"
    assert items[2].country == "United States"
    assert store.stats.total_items == 6


def test_failed_analysis_keeps_the_row(chain, monkeypatch):
    calls = []

    def flaky(name, description=""):
        calls.append(name)
        if name == "Cotton Shirt":
            raise RuntimeError("analysis crashed")
        return chain.trade_ai.fallback_analysis(name, description)

    monkeypatch.setattr(chain.trade_ai, "analyze_product", lambda n, d="": (flaky(n, d), False))
    items = chain.analyze_rows(parse_inventory_csv(CSV))
    assert len(items) == 3
    assert items[1].hs_code == tables.UNKNOWN_HS_CODE
    assert items[1].category == tables.GENERAL_CATEGORY
    assert items[1].ai_classified is False
    assert calls == ["Wireless Headphones", "Cotton Shirt", "Laptop Pro"]


def test_cancellation_stops_between_items(chain):
    token = CancellationToken()
    progress = []

    def on_progress(done, total):
        progress.append(done)
        if done == 1:
            token.cancel()

    items = chain.analyze_rows(parse_inventory_csv(CSV), token=token, on_progress=on_progress)
    assert len(items) == 1
    assert progress == [1]


def test_pacing_delay_between_items(chain, monkeypatch):
    sleeps = []
    monkeypatch.setattr("chains.inventory_chain.time.sleep", sleeps.append)
    chain.delay_seconds = 0.2
    chain.analyze_rows(parse_inventory_csv(CSV))
    assert sleeps == [0.2, 0.2]


def test_remote_analysis_marks_items(config, remote_ai, store):
    ai, llm = remote_ai({"category": "Electronics - Audio", "hsCode": "8518.30.00", "confidence": 96})
    chain = InventoryAnalysisChain(ai, store, delay_seconds=0)
    items = chain.ingest_csv("name,availability\nStudio headphones,30\n")
    assert items[0].ai_classified is True
    assert len(llm.prompts) == 1


def test_reclassify(chain, store):
    store.update_item("3", category="Unknown")
    item = chain.reclassify("3")
    assert item.category == "Textiles - Tops"
    assert item.hs_code == "6109.10.00"
    with pytest.raises(ItemNotFound):
        chain.reclassify("missing")


def test_batch_registry():
    registry = BatchRegistry()
    upload_id, token = registry.begin()
    assert registry.active() == [upload_id]
    assert registry.cancel(upload_id) is True
    assert token.cancelled
    registry.finish(upload_id)
    assert registry.cancel(upload_id) is False


def test_cancel_during_pacing_delay_skips_next_row(chain, monkeypatch):
    token = CancellationToken()
    analyzed = []
    original = chain.trade_ai.analyze_product

    def record(name, description=""):
        analyzed.append(name)
        return original(name, description)

    monkeypatch.setattr(chain.trade_ai, "analyze_product", record)
    monkeypatch.setattr("chains.inventory_chain.time.sleep", lambda seconds: token.cancel())
    chain.delay_seconds = 0.2
    items = chain.analyze_rows(parse_inventory_csv(CSV), token=token)
    assert len(items) == 1
    assert analyzed == ["Wireless Headphones"]
