"""Abstract repository interface for the prerequisite graph."""
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import List, Sequence

from masterypath.domain.concept.models import Concept


class ConceptRepository(ABC):

    @abstractmethod
    def list_all(self) -> List[Concept]:
        """Return every stored concept, ordered by id ASC."""
        ...

    @abstractmethod
    def replace_all(self, concepts: Sequence[Concept]) -> int:
        """Atomically replace the whole graph; returns the new graph version."""
        ...

    @abstractmethod
    def get_version(self) -> int:
        """Return the version stamped by the last replace_all, or 0."""
        ...
