"""Shared dependencies for API routes.

Components are built once from settings and reused; tests swap them through
``app.dependency_overrides`` or ``clear()``.
"""

from config import settings
from services import llm_client
from services.review_orchestrator import ReviewOrchestrator
from services.rubric_registry import RubricRegistry, load_registry
from services.session_aggregator import SessionAggregator
from services.store import BaseStore, create_store

_registry: RubricRegistry | None = None
_store: BaseStore | None = None


def get_registry() -> RubricRegistry:
    global _registry
    if _registry is None:
        _registry = load_registry(settings.rubric_path or None)
    return _registry


def get_store() -> BaseStore:
    global _store
    if _store is None:
        _store = create_store(settings.store_backend, settings.store_path)
    return _store


def get_orchestrator() -> ReviewOrchestrator:
    return ReviewOrchestrator(
        store=get_store(),
        registry=get_registry(),
        llm=llm_client.complete,
        identity_strategy=settings.identity_match_strategy,
        onboarding_question=settings.onboarding_question_number,
    )


def get_aggregator() -> SessionAggregator:
    return SessionAggregator(
        store=get_store(),
        registry=get_registry(),
        llm=llm_client.complete if llm_client.is_configured() else None,
    )


def clear() -> None:
    """Drop cached components. Useful for testing."""
    global _registry, _store
    _registry = None
    _store = None
