"""
Shortest remaining path to a goal concept.

The path is the goal plus every not-yet-mastered ancestor, in topological
order. Kahn's algorithm pops from a min-heap, so concepts with no ordering
constraint between them come out by ascending id and the same inputs always
give the same path.
"""
from __future__ import annotations
import heapq
from dataclasses import dataclass, field
from typing import Dict, List, Set

from masterypath.core.config import MASTERY_THRESHOLD
from masterypath.domain.common.errors import GoalUnreachable
from masterypath.domain.concept.graph import ConceptGraph
from masterypath.domain.pathing.unlock import can_attempt
from masterypath.domain.progress.models import LearnerMasterySnapshot


@dataclass(frozen=True)
class PathStep:
    concept_id: str
    title: str
    locked: bool
    prerequisite_scores: Dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class Recommendation:
    learner_id: str
    goal_concept_id: str
    graph_version: int
    steps: List[PathStep] = field(default_factory=list)

    @property
    def path(self) -> List[str]:
        return [step.concept_id for step in self.steps]


def recommend_path(
    graph: ConceptGraph,
    snapshot: LearnerMasterySnapshot,
    goal_concept_id: str,
    threshold: float = MASTERY_THRESHOLD,
) -> List[str]:
    graph.get(goal_concept_id)
    if snapshot.is_mastered(goal_concept_id):
        return []

    members: Set[str] = {
        cid for cid in graph.ancestors_of(goal_concept_id) if not snapshot.is_mastered(cid)
    }
    members.add(goal_concept_id)

    in_degree: Dict[str, int] = {
        cid: len(graph.prerequisites_of(cid) & members) for cid in members
    }
    ready = [cid for cid, degree in in_degree.items() if degree == 0]
    heapq.heapify(ready)

    order: List[str] = []
    while ready:
        cid = heapq.heappop(ready)
        order.append(cid)
        for dependent in graph.dependents_of(cid):
            if dependent in in_degree:
                in_degree[dependent] -= 1
                if in_degree[dependent] == 0:
                    heapq.heappush(ready, dependent)

    # The goal is a descendant of every other member, so it always sorts last.
    blocked = {
        prereq
        for cid in order
        for prereq in graph.prerequisites_of(cid)
        if prereq not in members and snapshot.best_score(prereq) < threshold
    }
    if blocked:
        raise GoalUnreachable(goal_concept_id, blocked)
    return order


def describe_path(
    graph: ConceptGraph,
    snapshot: LearnerMasterySnapshot,
    path: List[str],
    threshold: float = MASTERY_THRESHOLD,
) -> List[PathStep]:
    steps = []
    for cid in path:
        concept = graph.get(cid)
        steps.append(
            PathStep(
                concept_id=cid,
                title=concept.title or cid,
                locked=not can_attempt(graph, cid, snapshot, threshold),
                prerequisite_scores={p: snapshot.best_score(p) for p in sorted(concept.prerequisites)},
            )
        )
    return steps
