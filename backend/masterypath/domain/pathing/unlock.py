"""Unlock rules — pure functions of (graph snapshot, mastery snapshot)."""
from __future__ import annotations
from typing import Dict, FrozenSet, Optional

from masterypath.core.config import MASTERY_THRESHOLD
from masterypath.domain.concept.graph import ConceptGraph
from masterypath.domain.progress.models import LearnerMasterySnapshot, ProgressState
from masterypath.domain.progress.rules import state_of


def compute_unlocked(graph: ConceptGraph, snapshot: LearnerMasterySnapshot) -> FrozenSet[str]:
    """
    A concept is unlocked iff every prerequisite is mastered (vacuously true
    for roots). Recomputed in full on every call.
    """
    return frozenset(
        concept.id
        for concept in graph.all_concepts()
        if all(snapshot.is_mastered(p) for p in concept.prerequisites)
    )


def compute_frontier(
    graph: ConceptGraph,
    snapshot: LearnerMasterySnapshot,
    unlocked: Optional[FrozenSet[str]] = None,
) -> FrozenSet[str]:
    """Unlocked but not yet mastered. Pass ``unlocked`` when already computed from ``snapshot``."""
    if unlocked is None:
        unlocked = compute_unlocked(graph, snapshot)
    return unlocked - snapshot.mastered_ids()


def can_attempt(
    graph: ConceptGraph,
    concept_id: str,
    snapshot: LearnerMasterySnapshot,
    threshold: float = MASTERY_THRESHOLD,
) -> bool:
    """True iff every prerequisite's best score is at or above ``threshold``."""
    return all(snapshot.best_score(p) >= threshold for p in graph.prerequisites_of(concept_id))


def compute_states(graph: ConceptGraph, snapshot: LearnerMasterySnapshot) -> Dict[str, ProgressState]:
    unlocked = compute_unlocked(graph, snapshot)
    return {
        concept.id: state_of(snapshot.get(concept.id), concept.id in unlocked)
        for concept in graph.all_concepts()
    }
