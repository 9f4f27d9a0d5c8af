# ---------------------------
# File: app/dependencies.py
# ---------------------------
# Request-scoped accessors for the objects the lifespan puts on app.state.

from typing import List

from fastapi import Request

from app.inventory_store import InventoryStore
from app.models import LogisticsRecord
from chains.inventory_chain import BatchRegistry, InventoryAnalysisChain
from services.trade_ai import TradeAI
from utils.config import TradeConfig


def get_config(request: Request) -> TradeConfig:
    return request.app.state.config


def get_store(request: Request) -> InventoryStore:
    return request.app.state.store


def get_trade_ai(request: Request) -> TradeAI:
    return request.app.state.trade_ai


def get_chain(request: Request) -> InventoryAnalysisChain:
    return request.app.state.chain


def get_batches(request: Request) -> BatchRegistry:
    return request.app.state.batches


def get_logistics_records(request: Request) -> List[LogisticsRecord]:
    return request.app.state.logistics_records
