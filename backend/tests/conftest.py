"""Shared fixtures: a fresh SQLite file per test and services wired to it."""
from datetime import datetime, timezone

import pytest

from masterypath.application.concept_graph_service import ConceptGraphService
from masterypath.application.recommendation_resolver import RecommendationResolver
from masterypath.application.unlock_engine import UnlockEngine
from masterypath.domain.concept.models import Concept
from masterypath.domain.progress.models import ConceptProgress, LearnerMasterySnapshot
from masterypath.persistence.db import init_db
from masterypath.persistence.repositories.sqlite.sqlite_concept_repository import SqliteConceptRepository
from masterypath.persistence.repositories.sqlite.sqlite_mastery_repository import SqliteMasteryRepository


@pytest.fixture
def db_path(tmp_path):
    path = str(tmp_path / "mastery.db")
    init_db(path)
    return path


@pytest.fixture
def concept_repo(db_path):
    return SqliteConceptRepository(db_path)


@pytest.fixture
def mastery_repo(db_path):
    return SqliteMasteryRepository(db_path)


@pytest.fixture
def graph_service(concept_repo):
    return ConceptGraphService(repo=concept_repo)


@pytest.fixture
def abc_concepts():
    """A (root), B <- A, C <- A, B."""
    return [
        Concept.of("A"),
        Concept.of("B", ["A"]),
        Concept.of("C", ["A", "B"]),
    ]


@pytest.fixture
def abc_graph(graph_service, abc_concepts):
    return graph_service.ingest(abc_concepts)


@pytest.fixture
def engine(graph_service, mastery_repo, abc_graph):
    return UnlockEngine(graph=graph_service, mastery=mastery_repo)


@pytest.fixture
def resolver(graph_service, mastery_repo, abc_graph):
    return RecommendationResolver(graph=graph_service, mastery=mastery_repo)


@pytest.fixture
def snapshot_factory():
    """Build an in-memory snapshot: {concept_id: best_score}, mastered ids explicit."""

    def make(learner_id="L", scores=None, mastered=()):
        now = datetime.now(timezone.utc)
        scores = dict(scores or {})
        for cid in mastered:
            scores.setdefault(cid, 1.0)
        records = [
            ConceptProgress(
                learner_id=learner_id,
                concept_id=cid,
                score=score,
                best_score=score,
                attempts=1,
                mastered=cid in mastered,
                mastered_at=now if cid in mastered else None,
                last_updated=now,
                created_at=now,
            )
            for cid, score in scores.items()
        ]
        return LearnerMasterySnapshot(learner_id, records)

    return make
