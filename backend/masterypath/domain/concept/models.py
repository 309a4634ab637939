"""Concept domain models — pure Python, no DB or HTTP dependencies."""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable


@dataclass(frozen=True)
class Concept:
    id: str
    title: str = ""
    prerequisites: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def of(cls, concept_id: str, prerequisites: Iterable[str] = (), title: str = "") -> "Concept":
        return cls(id=concept_id, title=title or concept_id, prerequisites=frozenset(prerequisites))
