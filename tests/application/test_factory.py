import pytest

from fakes import FakeGateway
from lexiqueue.application.config import AppConfig
from lexiqueue.application.factory import build_engine, build_registry, get_review_gateway
from lexiqueue.infrastructure.adapters.http_gateway import HttpReviewGateway


def test_gateway_uses_configured_service(mock_home):
    config = AppConfig(api_base="https://svc.test/fn", token="t0k", request_timeout=5)
    gateway = get_review_gateway(config)

    assert isinstance(gateway, HttpReviewGateway)
    assert gateway.url == "https://svc.test/fn/vocabulary-review"
    assert gateway.token == "t0k"
    assert gateway.timeout == 5


def test_build_engine_from_config(mock_home):
    config = AppConfig(mode="review", limit=12, category="verbs", restart_on_empty=True)
    engine = build_engine(config, gateway=FakeGateway())

    assert engine.mode == "review"
    assert engine.limit == 12
    assert engine.category == "verbs"


def test_build_engine_overrides(mock_home):
    config = AppConfig(category="verbs")
    engine = build_engine(config, gateway=FakeGateway(), mode="learn", category="nouns")
    assert engine.category == "nouns"


def test_registry_engines_use_requested_category(mock_home):
    config = AppConfig(category="verbs")
    registry = build_registry(config, gateway=FakeGateway())

    assert registry.get("learn").category is None
    assert registry.get("review", "food").category == "food"


@pytest.mark.asyncio
async def test_registry_aclose_closes_http_client(mock_home):
    registry = build_registry(AppConfig(api_base="http://svc.test"))
    registry.get("learn")
    client = registry.gateway._get_client()

    await registry.aclose()

    assert client.is_closed


@pytest.mark.asyncio
async def test_engine_aclose_closes_http_client(mock_home):
    engine = build_engine(AppConfig(api_base="http://svc.test"))
    client = engine._gateway._get_client()

    await engine.aclose()

    assert engine.closed
    assert client.is_closed
