import json
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from agents.gateway_agent import RemoteClassificationGateway
from app.inventory_store import InventoryStore
from app.main import create_app
from services.trade_ai import TradeAI
from utils.config import TradeConfig


class FakeLLM:
    """Stands in for the chat model: returns queued answers, or raises them if they are exceptions."""

    def __init__(self, *answers):
        self.answers = list(answers)
        self.prompts = []

    def invoke(self, prompt):
        self.prompts.append(prompt)
        answer = self.answers.pop(0) if len(self.answers) > 1 else self.answers[0]
        if isinstance(answer, Exception):
            raise answer
        if isinstance(answer, (dict, list)):
            answer = json.dumps(answer)
        return SimpleNamespace(content=answer)


@pytest.fixture
def config(monkeypatch):
    for name in ("TRADE_AI_API_KEY", "OPENAI_API_KEY", "TRADE_AI_BASE_URL"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("TRADE_BATCH_DELAY_SECONDS", "0")
    monkeypatch.setenv("TRADE_SEED_SAMPLE_DATA", "true")
    return TradeConfig()


@pytest.fixture
def offline_ai(config):
    return TradeAI(gateway=RemoteClassificationGateway(config))


@pytest.fixture
def remote_ai(config):
    """Factory: TradeAI wired to a FakeLLM answering with the given payloads."""
    def build(*answers):
        llm = FakeLLM(*answers)
        return TradeAI(gateway=RemoteClassificationGateway(config, llm=llm)), llm
    return build


@pytest.fixture
def store():
    s = InventoryStore(seed_sample_data=True)
    s.start()
    yield s
    s.close()


@pytest.fixture
def client(config):
    with TestClient(create_app(config)) as c:
        yield c


@pytest.fixture
def make_llm():
    return FakeLLM
