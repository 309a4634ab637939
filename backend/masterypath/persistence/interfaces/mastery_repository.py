"""Abstract repository interface for per-learner progress records."""
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Iterable

from masterypath.domain.progress.models import ConceptProgress, LearnerMasterySnapshot


class MasteryRepository(ABC):

    @abstractmethod
    def get_or_create(self, learner_id: str, concept_id: str) -> ConceptProgress:
        """Return the record, inserting a zeroed one (mastered=False, attempts=0) if absent."""
        ...

    @abstractmethod
    def ensure_records(self, learner_id: str, concept_ids: Iterable[str]) -> int:
        """Insert zeroed records for any missing ids; returns how many were created."""
        ...

    @abstractmethod
    def apply_observation(
        self, learner_id: str, concept_id: str, score: float, threshold: float
    ) -> ConceptProgress:
        """
        Atomic read-modify-write: attempts += 1, score = score, best_score = max,
        last_updated = now, and mastered/mastered_at set once when score >= threshold.
        Never un-masters a record.
        """
        ...

    @abstractmethod
    def snapshot(self, learner_id: str) -> LearnerMasterySnapshot:
        """Consistent read of all of a learner's records."""
        ...
