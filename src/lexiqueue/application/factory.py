"""
Engine Factory
Centralizes wiring of gateways and engines from configuration.
"""

from lexiqueue.application.config import AppConfig
from lexiqueue.application.engine import ReviewEngine
from lexiqueue.application.registry import EngineRegistry
from lexiqueue.domain.ports import ReviewGateway
from lexiqueue.infrastructure.adapters.http_gateway import HttpReviewGateway


def get_review_gateway(config: AppConfig) -> ReviewGateway:
    """
    Returns the ReviewGateway implementation for the configured service.
    """
    return HttpReviewGateway(
        base_url=config.api_base,
        token=config.token,
        timeout=config.request_timeout,
    )


def build_engine(
    config: AppConfig,
    gateway: ReviewGateway | None = None,
    mode: str | None = None,
    category: str | None = None,
) -> ReviewEngine:
    """
    Build a ReviewEngine; `mode`/`category` default to the configured ones.
    """
    return _make_engine(
        config,
        gateway or get_review_gateway(config),
        mode or config.mode,
        category if category is not None else config.category,
    )


def _make_engine(
    config: AppConfig, gateway: ReviewGateway, mode: str, category: str | None
) -> ReviewEngine:
    return ReviewEngine(
        gateway,
        mode=mode,
        limit=config.limit,
        category=category,
        auto_fetch=config.auto_fetch,
        restart_on_empty=config.restart_on_empty,
        exact_rollback=config.exact_rollback,
    )


def build_registry(config: AppConfig, gateway: ReviewGateway | None = None) -> EngineRegistry:
    """
    Registry whose engines share one gateway (transport only, no session state).
    """
    shared = gateway or get_review_gateway(config)
    return EngineRegistry(
        lambda mode, category: _make_engine(config, shared, mode, category), gateway=shared
    )
