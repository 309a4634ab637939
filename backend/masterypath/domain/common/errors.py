"""Typed failures raised by the engine. The HTTP layer maps ``code`` to a status."""
from __future__ import annotations
from typing import Iterable, List, Optional


class MasteryEngineError(Exception):
    code = "mastery_engine_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConceptNotFound(MasteryEngineError):
    code = "concept_not_found"

    def __init__(self, concept_id: str, referenced_by: Optional[str] = None):
        if referenced_by:
            message = f"Concept '{concept_id}' (prerequisite of '{referenced_by}') not found."
        else:
            message = f"Concept '{concept_id}' not found."
        super().__init__(message)
        self.concept_id = concept_id
        self.referenced_by = referenced_by


class CycleDetected(MasteryEngineError):
    code = "cycle_detected"

    def __init__(self, cycle: Iterable[str]):
        self.cycle: List[str] = list(cycle)
        super().__init__("Prerequisite cycle detected: " + " -> ".join(self.cycle))


class InvalidScore(MasteryEngineError):
    code = "invalid_score"

    def __init__(self, score: object, reason: str):
        super().__init__(f"Invalid score {score!r}: {reason}")
        self.score = score


class GoalUnreachable(MasteryEngineError):
    code = "goal_unreachable"

    def __init__(self, goal_concept_id: str, blocked: Iterable[str]):
        self.goal_concept_id = goal_concept_id
        self.blocked: List[str] = sorted(blocked)
        super().__init__(
            f"Goal '{goal_concept_id}' cannot be reached from any attemptable concept; "
            f"blocked at {self.blocked}."
        )


class InvalidConcept(MasteryEngineError):
    code = "invalid_concept"


class StoreUnavailable(MasteryEngineError):
    code = "store_unavailable"
