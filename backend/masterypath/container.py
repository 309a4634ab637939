"""Dependency injection container — wires implementations to interfaces."""
from __future__ import annotations
from functools import lru_cache

from masterypath.application.concept_graph_service import ConceptGraphService
from masterypath.application.recommendation_resolver import RecommendationResolver
from masterypath.application.unlock_engine import UnlockEngine
from masterypath.persistence.repositories.sqlite.sqlite_concept_repository import SqliteConceptRepository
from masterypath.persistence.repositories.sqlite.sqlite_mastery_repository import SqliteMasteryRepository


@lru_cache(maxsize=1)
def get_concept_repo() -> SqliteConceptRepository:
    return SqliteConceptRepository()


@lru_cache(maxsize=1)
def get_mastery_repo() -> SqliteMasteryRepository:
    return SqliteMasteryRepository()


@lru_cache(maxsize=1)
def get_concept_graph_service() -> ConceptGraphService:
    return ConceptGraphService(repo=get_concept_repo())


@lru_cache(maxsize=1)
def get_unlock_engine() -> UnlockEngine:
    return UnlockEngine(graph=get_concept_graph_service(), mastery=get_mastery_repo())


@lru_cache(maxsize=1)
def get_recommendation_resolver() -> RecommendationResolver:
    return RecommendationResolver(graph=get_concept_graph_service(), mastery=get_mastery_repo())


def reset() -> None:
    """Drop every cached singleton (tests, config reloads)."""
    for factory in (
        get_recommendation_resolver,
        get_unlock_engine,
        get_concept_graph_service,
        get_mastery_repo,
        get_concept_repo,
    ):
        factory.cache_clear()
