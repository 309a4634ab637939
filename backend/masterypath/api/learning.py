"""Learner-facing endpoints: recommendations, unlocked set, progress states."""
from __future__ import annotations
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends

from masterypath.api.auth import get_current_learner
from masterypath.application.recommendation_resolver import RecommendationResolver
from masterypath.application.unlock_engine import UnlockEngine
from masterypath.container import get_recommendation_resolver, get_unlock_engine
from masterypath.domain.pathing.recommendation import PathStep, Recommendation
from masterypath.domain.progress.models import ConceptProgress

router = APIRouter(tags=["learning"])


# ------------------------------------------------------------------
# Serializers
# ------------------------------------------------------------------
def _iso(ts: Optional[datetime]) -> Optional[str]:
    return ts.isoformat() if ts else None


def _serialize_step(s: PathStep) -> dict:
    return {
        "concept_id": s.concept_id,
        "title": s.title,
        "locked": s.locked,
        "prerequisite_scores": s.prerequisite_scores,
    }


def _serialize_recommendation(r: Recommendation) -> dict:
    return {
        "goal_concept_id": r.goal_concept_id,
        "graph_version": r.graph_version,
        "path": r.path,
        "steps": [_serialize_step(s) for s in r.steps],
    }


def _serialize_progress(p: Optional[ConceptProgress]) -> Optional[dict]:
    if p is None:
        return None
    return {
        "score": p.score,
        "best_score": p.best_score,
        "attempts": p.attempts,
        "mastered": p.mastered,
        "mastered_at": _iso(p.mastered_at),
        "last_updated": _iso(p.last_updated),
    }


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------
@router.get("/recommendation/{goal_concept_id}")
def get_recommendation(
    goal_concept_id: str,
    learner_id: str = Depends(get_current_learner),
    resolver: RecommendationResolver = Depends(get_recommendation_resolver),
):
    return _serialize_recommendation(resolver.recommend(learner_id, goal_concept_id))


@router.get("/learners/me/unlocked")
def get_unlocked(
    learner_id: str = Depends(get_current_learner),
    engine: UnlockEngine = Depends(get_unlock_engine),
):
    unlocked, frontier = engine.unlocked_and_frontier_for(learner_id)
    return {"unlocked": sorted(unlocked), "frontier": sorted(frontier)}


@router.get("/learners/me/progress")
def get_progress(
    learner_id: str = Depends(get_current_learner),
    engine: UnlockEngine = Depends(get_unlock_engine),
):
    states = engine.states_for(learner_id)
    snapshot = engine.snapshot_for(learner_id)
    return [
        {
            "concept_id": cid,
            "state": state.value,
            "progress": _serialize_progress(snapshot.get(cid)),
        }
        for cid, state in states.items()
    ]
