"""
Immutable, versioned snapshot of the prerequisite DAG.

A ``ConceptGraph`` can only be obtained through ``ConceptGraph.build``, which
rejects unknown prerequisite ids and cycles. Every reader downstream (unlock
rules, path resolution) relies on that and never re-checks acyclicity.
"""
from __future__ import annotations
from collections import deque
from typing import Dict, FrozenSet, Iterable, Iterator, List, Mapping, Optional, Set

from masterypath.domain.common.errors import ConceptNotFound, CycleDetected, InvalidConcept
from masterypath.domain.concept.models import Concept

_WHITE, _GRAY, _BLACK = 0, 1, 2


def find_cycle(prerequisites: Mapping[str, Iterable[str]]) -> Optional[List[str]]:
    """
    Return one prerequisite cycle as [a, b, ..., a] (each id a prerequisite of
    the next), or None when the relation is acyclic. Nodes and edges are walked
    in ascending id order so the reported cycle is deterministic.
    """
    dependents: Dict[str, List[str]] = {cid: [] for cid in prerequisites}
    for cid, prereqs in prerequisites.items():
        for prereq in prereqs:
            dependents.setdefault(prereq, []).append(cid)
    for children in dependents.values():
        children.sort()

    color: Dict[str, int] = {cid: _WHITE for cid in dependents}
    for root in sorted(dependents):
        if color[root] != _WHITE:
            continue
        path: List[str] = [root]
        stack: List[Iterator[str]] = [iter(dependents[root])]
        color[root] = _GRAY
        while stack:
            child = next(stack[-1], None)
            if child is None:
                stack.pop()
                color[path.pop()] = _BLACK
                continue
            if color[child] == _GRAY:
                start = path.index(child)
                return path[start:] + [child]
            if color[child] == _WHITE:
                color[child] = _GRAY
                path.append(child)
                stack.append(iter(dependents[child]))
    return None


class ConceptGraph:
    def __init__(self, concepts: Dict[str, Concept], version: int):
        # Use ConceptGraph.build(); this constructor trusts its input.
        self._concepts = concepts
        self._version = version
        dependents: Dict[str, Set[str]] = {cid: set() for cid in concepts}
        for concept in concepts.values():
            for prereq in concept.prerequisites:
                dependents[prereq].add(concept.id)
        self._dependents = {cid: frozenset(ds) for cid, ds in dependents.items()}
        self._ordered = [concepts[cid] for cid in sorted(concepts)]

    @classmethod
    def build(cls, concepts: Iterable[Concept], version: int = 1) -> "ConceptGraph":
        by_id: Dict[str, Concept] = {}
        for concept in concepts:
            if concept.id in by_id:
                raise InvalidConcept(f"Concept '{concept.id}' is defined more than once.")
            by_id[concept.id] = concept

        for concept in sorted(by_id.values(), key=lambda c: c.id):
            for prereq in sorted(concept.prerequisites):
                if prereq not in by_id:
                    raise ConceptNotFound(prereq, referenced_by=concept.id)

        cycle = find_cycle({cid: c.prerequisites for cid, c in by_id.items()})
        if cycle is not None:
            raise CycleDetected(cycle)
        return cls(by_id, version)

    @property
    def version(self) -> int:
        return self._version

    def __contains__(self, concept_id: object) -> bool:
        return concept_id in self._concepts

    def __len__(self) -> int:
        return len(self._concepts)

    def all_concepts(self) -> List[Concept]:
        """All concepts, ordered by ascending id."""
        return list(self._ordered)

    def get(self, concept_id: str) -> Concept:
        try:
            return self._concepts[concept_id]
        except KeyError:
            raise ConceptNotFound(concept_id) from None

    def prerequisites_of(self, concept_id: str) -> FrozenSet[str]:
        return self.get(concept_id).prerequisites

    def dependents_of(self, concept_id: str) -> FrozenSet[str]:
        self.get(concept_id)
        return self._dependents[concept_id]

    def ancestors_of(self, concept_id: str) -> FrozenSet[str]:
        """Every concept reachable by following prerequisite edges backward (excludes the concept)."""
        seen: Set[str] = set()
        queue = deque(self.prerequisites_of(concept_id))
        while queue:
            cid = queue.popleft()
            if cid in seen:
                continue
            seen.add(cid)
            queue.extend(self._concepts[cid].prerequisites - seen)
        return frozenset(seen)

    def __repr__(self) -> str:
        return f"ConceptGraph(version={self._version}, concepts={len(self._concepts)})"
