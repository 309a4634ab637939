"""Ingestion rules for concept definitions coming from the content collaborator."""
from __future__ import annotations
from typing import Any, Mapping

from masterypath.domain.common.result import Result
from masterypath.domain.concept.models import Concept


def validate_concept_content(data: Mapping[str, Any]) -> Result[Concept]:
    """
    Validates one raw concept definition ({"id", "title", "prerequisites"}).
    Returns Result.ok(Concept) or Result.fail(reason).
    """
    if not isinstance(data, Mapping):
        return Result.fail(f"Concept definition must be an object, got {type(data).__name__}.")
    concept_id = data.get("id")
    if not isinstance(concept_id, str) or not concept_id.strip():
        return Result.fail("Concept 'id' is required and must be a non-empty string.")
    concept_id = concept_id.strip()

    title = data.get("title") or concept_id
    if not isinstance(title, str):
        return Result.fail(f"Concept '{concept_id}': 'title' must be a string.")

    prerequisites = data.get("prerequisites") or []
    if isinstance(prerequisites, str) or not isinstance(prerequisites, (list, tuple, set, frozenset)):
        return Result.fail(f"Concept '{concept_id}': 'prerequisites' must be a list of concept ids.")
    for prereq in prerequisites:
        if not isinstance(prereq, str) or not prereq.strip():
            return Result.fail(f"Concept '{concept_id}': prerequisite ids must be non-empty strings.")

    return Result.ok(Concept.of(concept_id, (p.strip() for p in prerequisites), title=title.strip()))
