"""
Application service for the Concept Graph Store.

Holds the current validated ``ConceptGraph`` snapshot. The snapshot is
immutable; ingestion builds and validates a new one, persists it, then swaps
it in. Reads compare the cached version with the stored one and reload when
another worker has ingested since; ``invalidate`` forces a reload.
"""
from __future__ import annotations
import json
import threading
from typing import Any, Iterable, List, Mapping, Optional

from masterypath.core.logging_config import get_logger
from masterypath.domain.common.errors import CycleDetected, InvalidConcept
from masterypath.domain.concept.graph import ConceptGraph
from masterypath.domain.concept.models import Concept
from masterypath.domain.concept.rules import validate_concept_content
from masterypath.persistence.interfaces.concept_repository import ConceptRepository

logger = get_logger(__name__)


class ConceptGraphService:
    def __init__(self, repo: ConceptRepository):
        self._repo = repo
        self._lock = threading.Lock()
        self._snapshot: Optional[ConceptGraph] = None

    # ------------------------------------------------------------------
    # READ
    # ------------------------------------------------------------------
    def snapshot(self) -> ConceptGraph:
        """
        The current graph. The cached snapshot is reused while its version
        matches the stored one, so an ingest by another worker is picked up on
        the next read.
        """
        stored_version = self._repo.get_version()
        current = self._snapshot
        if current is not None and current.version == stored_version:
            return current
        with self._lock:
            # Re-read under the lock: an ingest here may have moved the version on.
            stored_version = self._repo.get_version()
            current = self._snapshot
            if current is None or current.version != stored_version:
                # Version is read before the concepts, so a racing ingest elsewhere
                # leaves an older label and triggers another reload.
                current = ConceptGraph.build(self._repo.list_all(), stored_version)
                self._snapshot = current
                logger.info(
                    "Concept graph loaded",
                    extra={"graph_version": current.version, "concepts": len(current)},
                )
            return current

    def all_concepts(self) -> List[Concept]:
        return self.snapshot().all_concepts()

    def prerequisites_of(self, concept_id: str) -> frozenset:
        return self.snapshot().prerequisites_of(concept_id)

    # ------------------------------------------------------------------
    # INGEST
    # ------------------------------------------------------------------
    def ingest(self, concepts: Iterable[Concept]) -> ConceptGraph:
        """Validate, persist and publish a complete replacement graph."""
        concepts = list(concepts)
        try:
            ConceptGraph.build(concepts)
        except CycleDetected as exc:
            logger.warning("Rejected concept graph with cycle", extra={"cycle": exc.cycle})
            raise

        with self._lock:
            version = self._repo.replace_all(concepts)
            graph = ConceptGraph.build(concepts, version)
            self._snapshot = graph
        logger.info(
            "Concept graph ingested",
            extra={"graph_version": version, "concepts": len(concepts)},
        )
        return graph

    def ingest_definitions(self, definitions: Iterable[Mapping[str, Any]]) -> ConceptGraph:
        """Ingest raw {"id", "title", "prerequisites"} dicts from the content collaborator."""
        concepts = [
            validate_concept_content(d).unwrap_or_raise(InvalidConcept) for d in definitions
        ]
        return self.ingest(concepts)

    def ingest_file(self, path: str) -> ConceptGraph:
        """Ingest a JSON file shaped as {"concepts": [...]}."""
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise InvalidConcept(f"{path}: not valid JSON ({exc}).") from exc
        if not isinstance(data, dict) or not isinstance(data.get("concepts"), list):
            raise InvalidConcept(f"{path}: expected an object with a 'concepts' list.")
        return self.ingest_definitions(data["concepts"])

    # ------------------------------------------------------------------
    # CACHE
    # ------------------------------------------------------------------
    def invalidate(self) -> None:
        with self._lock:
            self._snapshot = None
        logger.info("Concept graph cache invalidated")
