"""
SQLite implementation of MasteryRepository.

Every mutation is a single upsert statement inside a BEGIN IMMEDIATE
transaction, so concurrent submissions for the same (learner, concept)
serialise on the write lock instead of racing a find-then-save.
"""
from __future__ import annotations
from datetime import datetime, timezone
from typing import Iterable, Optional

from masterypath.domain.progress.models import ConceptProgress, LearnerMasterySnapshot
from masterypath.domain.progress.rules import reaches_mastery
from masterypath.persistence.db import get_connection, with_store_retry
from masterypath.persistence.interfaces.mastery_repository import MasteryRepository

_INSERT_ZEROED = """
    INSERT INTO concept_progress (
        learner_id, concept_id, score, best_score, attempts,
        mastered, mastered_at, last_updated, created_at
    ) VALUES (:learner_id, :concept_id, 0, 0, 0, 0, NULL, :now, :now)
    ON CONFLICT(learner_id, concept_id) DO NOTHING
"""

_APPLY_OBSERVATION = """
    INSERT INTO concept_progress (
        learner_id, concept_id, score, best_score, attempts,
        mastered, mastered_at, last_updated, created_at
    ) VALUES (
        :learner_id, :concept_id, :score, :score, 1,
        :mastered, :mastered_at, :now, :now
    )
    ON CONFLICT(learner_id, concept_id) DO UPDATE SET
        attempts     = concept_progress.attempts + 1,
        score        = excluded.score,
        best_score   = MAX(concept_progress.best_score, excluded.score),
        mastered_at  = CASE
                           WHEN concept_progress.mastered = 0 AND excluded.mastered = 1
                           THEN excluded.last_updated
                           ELSE concept_progress.mastered_at
                       END,
        mastered     = MAX(concept_progress.mastered, excluded.mastered),
        last_updated = excluded.last_updated
    RETURNING *
"""


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _parse_ts(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def _row_to_progress(row) -> ConceptProgress:
    return ConceptProgress(
        learner_id=row["learner_id"],
        concept_id=row["concept_id"],
        score=float(row["score"]),
        best_score=float(row["best_score"]),
        attempts=int(row["attempts"]),
        mastered=bool(row["mastered"]),
        mastered_at=_parse_ts(row["mastered_at"]),
        last_updated=_parse_ts(row["last_updated"]),
        created_at=_parse_ts(row["created_at"]),
    )


class SqliteMasteryRepository(MasteryRepository):

    def __init__(self, db_path: Optional[str] = None):
        self._db_path = db_path

    @with_store_retry
    def get_or_create(self, learner_id: str, concept_id: str) -> ConceptProgress:
        conn = get_connection(self._db_path)
        try:
            conn.execute("BEGIN IMMEDIATE")
            try:
                conn.execute(
                    _INSERT_ZEROED,
                    {"learner_id": learner_id, "concept_id": concept_id, "now": _now_iso()},
                )
                row = conn.execute(
                    "SELECT * FROM concept_progress WHERE learner_id = ? AND concept_id = ?",
                    (learner_id, concept_id),
                ).fetchone()
                conn.execute("COMMIT")
            except BaseException:
                conn.execute("ROLLBACK")
                raise
        finally:
            conn.close()
        return _row_to_progress(row)

    @with_store_retry
    def ensure_records(self, learner_id: str, concept_ids: Iterable[str]) -> int:
        now = _now_iso()
        params = [
            {"learner_id": learner_id, "concept_id": cid, "now": now}
            for cid in sorted(set(concept_ids))
        ]
        if not params:
            return 0
        conn = get_connection(self._db_path)
        try:
            conn.execute("BEGIN IMMEDIATE")
            try:
                before = conn.total_changes
                conn.executemany(_INSERT_ZEROED, params)
                created = conn.total_changes - before
                conn.execute("COMMIT")
            except BaseException:
                conn.execute("ROLLBACK")
                raise
        finally:
            conn.close()
        return created

    @with_store_retry
    def apply_observation(
        self, learner_id: str, concept_id: str, score: float, threshold: float
    ) -> ConceptProgress:
        now = _now_iso()
        mastered = reaches_mastery(score, threshold)
        conn = get_connection(self._db_path)
        try:
            conn.execute("BEGIN IMMEDIATE")
            try:
                rows = conn.execute(
                    _APPLY_OBSERVATION,
                    {
                        "learner_id": learner_id,
                        "concept_id": concept_id,
                        "score": score,
                        "mastered": 1 if mastered else 0,
                        "mastered_at": now if mastered else None,
                        "now": now,
                    },
                ).fetchall()
                conn.execute("COMMIT")
            except BaseException:
                conn.execute("ROLLBACK")
                raise
        finally:
            conn.close()
        return _row_to_progress(rows[0])

    @with_store_retry
    def snapshot(self, learner_id: str) -> LearnerMasterySnapshot:
        conn = get_connection(self._db_path)
        try:
            rows = conn.execute(
                "SELECT * FROM concept_progress WHERE learner_id = ? ORDER BY concept_id",
                (learner_id,),
            ).fetchall()
        finally:
            conn.close()
        return LearnerMasterySnapshot(learner_id, (_row_to_progress(r) for r in rows))
