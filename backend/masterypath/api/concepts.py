"""Read-only view of the prerequisite graph."""
from __future__ import annotations

from fastapi import APIRouter, Depends

from masterypath.application.concept_graph_service import ConceptGraphService
from masterypath.container import get_concept_graph_service
from masterypath.domain.concept.models import Concept

router = APIRouter(tags=["concepts"])


def _serialize_concept(c: Concept) -> dict:
    return {
        "id": c.id,
        "title": c.title,
        "prerequisites": sorted(c.prerequisites),
    }


@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/concepts")
def list_concepts(svc: ConceptGraphService = Depends(get_concept_graph_service)):
    graph = svc.snapshot()
    return {
        "version": graph.version,
        "concepts": [_serialize_concept(c) for c in graph.all_concepts()],
    }
