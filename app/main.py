# ---------------------------
# File: app/main.py
# ---------------------------
"""
FastAPI application for the trade assistant.
Run with: `uvicorn app.main:app --reload`
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request # type: ignore
from fastapi.middleware.cors import CORSMiddleware # type: ignore
from fastapi.responses import JSONResponse

from agents.gateway_agent import RemoteClassificationGateway
from app.api.classify_router import router as classify_router
from app.api.compliance_router import router as compliance_router
from app.api.duty_router import router_duty
from app.api.insights_router import router as insights_router
from app.api.inventory_router import router as inventory_router
from app.api.logistics_router import router as logistics_router
from app.api.reports_router import router as reports_router
from app.inventory_store import InventoryStore
from chains.inventory_chain import BatchRegistry, InventoryAnalysisChain
from services.trade_ai import TradeAI
from utils.config import TradeConfig, configure_logging
from utils.errors import InvalidInput, ItemNotFound

logger = logging.getLogger(__name__)


def create_app(config: TradeConfig = None, llm=None) -> FastAPI:
    """
    Builds the application. ``llm`` replaces the configured chat model client,
    which lets tests run the remote path without network access.
    """
    config = config or TradeConfig()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(config)
        store = InventoryStore(seed_sample_data=config.seed_sample_data)
        store.start()
        gateway = RemoteClassificationGateway(config, llm=llm)
        if not gateway.available:
            logger.warning("No AI API key configured, serving rules-based answers only")
        trade_ai = TradeAI(gateway=gateway)

        app.state.config = config
        app.state.store = store
        app.state.trade_ai = trade_ai
        app.state.chain = InventoryAnalysisChain(trade_ai, store, delay_seconds=config.batch_delay_seconds)
        app.state.batches = BatchRegistry()
        app.state.logistics_records = []
        try:
            yield
        finally:
            store.close()

    app = FastAPI(title="Trade Operations Assistant API", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(InvalidInput)
    async def invalid_input_handler(request: Request, exc: InvalidInput):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(ItemNotFound)
    async def not_found_handler(request: Request, exc: ItemNotFound):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"detail": "An unexpected error occurred"})

    app.include_router(classify_router)
    app.include_router(router_duty)
    app.include_router(compliance_router)
    app.include_router(inventory_router)
    app.include_router(logistics_router)
    app.include_router(reports_router)
    app.include_router(insights_router)

    @app.get("/api/health")
    def health():
        return {"status": "ok", "remote_ai": app.state.trade_ai.gateway.available}

    return app


app = create_app()
