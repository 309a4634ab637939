"""Application service — applies mastery observations and recomputes unlock sets."""
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, FrozenSet, Tuple

from masterypath.application.concept_graph_service import ConceptGraphService
from masterypath.core.config import MASTERY_THRESHOLD
from masterypath.core.logging_config import get_logger
from masterypath.domain.common.errors import InvalidScore
from masterypath.domain.concept.graph import ConceptGraph
from masterypath.domain.pathing.unlock import compute_frontier, compute_states, compute_unlocked
from masterypath.domain.progress.models import LearnerMasterySnapshot, ProgressState
from masterypath.domain.progress.rules import validate_score
from masterypath.persistence.interfaces.mastery_repository import MasteryRepository

logger = get_logger(__name__)


@dataclass(frozen=True)
class AttemptOutcome:
    mastered: bool
    # Full current unlocked set. Callers wanting "newly unlocked" diff against their own prior set.
    unlocked: FrozenSet[str]


class UnlockEngine:
    def __init__(
        self,
        graph: ConceptGraphService,
        mastery: MasteryRepository,
        threshold: float = MASTERY_THRESHOLD,
    ):
        self._graph = graph
        self._mastery = mastery
        self._threshold = threshold

    def _materialise(self, learner_id: str) -> Tuple[ConceptGraph, LearnerMasterySnapshot, FrozenSet[str]]:
        """Recompute the unlocked set from one mastery snapshot and create records for it."""
        graph = self._graph.snapshot()
        snapshot = self._mastery.snapshot(learner_id)
        unlocked = compute_unlocked(graph, snapshot)
        created = self._mastery.ensure_records(learner_id, unlocked)
        if created:
            logger.debug(
                "Materialised progress records",
                extra={"learner_id": learner_id, "created": created},
            )
        return graph, snapshot, unlocked

    def unlocked_for(self, learner_id: str) -> FrozenSet[str]:
        """Recompute the learner's unlocked set and materialise records for it."""
        return self._materialise(learner_id)[2]

    def record_attempt(self, learner_id: str, concept_id: str, score: float) -> AttemptOutcome:
        self._graph.snapshot().get(concept_id)
        value = validate_score(score).unwrap_or_raise(lambda reason: InvalidScore(score, reason))

        record = self._mastery.apply_observation(learner_id, concept_id, value, self._threshold)
        if record.mastered and record.mastered_at == record.last_updated:
            logger.info(
                "Concept mastered",
                extra={"learner_id": learner_id, "concept_id": concept_id, "score": value},
            )

        return AttemptOutcome(mastered=record.mastered, unlocked=self.unlocked_for(learner_id))

    def frontier_for(self, learner_id: str) -> FrozenSet[str]:
        """Unlocked concepts the learner has not mastered yet."""
        return self.unlocked_and_frontier_for(learner_id)[1]

    def unlocked_and_frontier_for(self, learner_id: str) -> Tuple[FrozenSet[str], FrozenSet[str]]:
        """Both sets from the same mastery snapshot, so the frontier is always a subset."""
        graph, snapshot, unlocked = self._materialise(learner_id)
        return unlocked, compute_frontier(graph, snapshot, unlocked)

    def states_for(self, learner_id: str) -> Dict[str, ProgressState]:
        self.unlocked_for(learner_id)
        return compute_states(self._graph.snapshot(), self._mastery.snapshot(learner_id))

    def snapshot_for(self, learner_id: str) -> LearnerMasterySnapshot:
        return self._mastery.snapshot(learner_id)
