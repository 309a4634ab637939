"""Per-learner progress records and the read snapshot built from them."""
from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, Iterator, Mapping, Optional


class ProgressState(str, Enum):
    LOCKED = "locked"
    UNLOCKED = "unlocked"
    ATTEMPTED = "attempted"
    MASTERED = "mastered"


@dataclass(frozen=True)
class ConceptProgress:
    learner_id: str
    concept_id: str
    score: float
    best_score: float
    attempts: int
    mastered: bool
    mastered_at: Optional[datetime]
    last_updated: datetime
    created_at: datetime


class LearnerMasterySnapshot(Mapping[str, ConceptProgress]):
    """Read-only view of one learner's progress records, keyed by concept id."""

    def __init__(self, learner_id: str, records: Iterable[ConceptProgress] = ()):
        self.learner_id = learner_id
        by_concept: Dict[str, ConceptProgress] = {}
        for record in records:
            if record.learner_id != learner_id:
                raise ValueError(
                    f"Record for learner '{record.learner_id}' in snapshot of '{learner_id}'"
                )
            by_concept[record.concept_id] = record
        self._records = MappingProxyType(by_concept)

    def __getitem__(self, concept_id: str) -> ConceptProgress:
        return self._records[concept_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def is_mastered(self, concept_id: str) -> bool:
        record = self._records.get(concept_id)
        return record is not None and record.mastered

    def best_score(self, concept_id: str) -> float:
        record = self._records.get(concept_id)
        return record.best_score if record is not None else 0.0

    def mastered_ids(self) -> FrozenSet[str]:
        return frozenset(cid for cid, r in self._records.items() if r.mastered)

    def __repr__(self) -> str:
        return f"LearnerMasterySnapshot({self.learner_id!r}, records={len(self._records)})"
