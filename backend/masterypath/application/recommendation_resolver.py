"""Application service — read-only path recommendations toward a goal concept."""
from __future__ import annotations

from masterypath.application.concept_graph_service import ConceptGraphService
from masterypath.core.config import MASTERY_THRESHOLD
from masterypath.core.logging_config import get_logger
from masterypath.domain.pathing.recommendation import Recommendation, describe_path, recommend_path
from masterypath.domain.pathing.unlock import can_attempt
from masterypath.persistence.interfaces.mastery_repository import MasteryRepository

logger = get_logger(__name__)


class RecommendationResolver:
    def __init__(
        self,
        graph: ConceptGraphService,
        mastery: MasteryRepository,
        threshold: float = MASTERY_THRESHOLD,
    ):
        self._graph = graph
        self._mastery = mastery
        self._threshold = threshold

    def recommend(self, learner_id: str, goal_concept_id: str) -> Recommendation:
        graph = self._graph.snapshot()
        snapshot = self._mastery.snapshot(learner_id)
        path = recommend_path(graph, snapshot, goal_concept_id, self._threshold)
        logger.debug(
            "Recommendation computed",
            extra={"learner_id": learner_id, "goal": goal_concept_id, "length": len(path)},
        )
        return Recommendation(
            learner_id=learner_id,
            goal_concept_id=goal_concept_id,
            graph_version=graph.version,
            steps=describe_path(graph, snapshot, path, self._threshold),
        )

    def can_attempt(self, learner_id: str, concept_id: str) -> bool:
        return can_attempt(
            self._graph.snapshot(), concept_id, self._mastery.snapshot(learner_id), self._threshold
        )
