"""SQLite implementation of ConceptRepository."""
from __future__ import annotations
import json
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from masterypath.domain.concept.models import Concept
from masterypath.persistence.db import get_connection, with_store_retry
from masterypath.persistence.interfaces.concept_repository import ConceptRepository


def _row_to_concept(row) -> Concept:
    return Concept.of(
        row["id"],
        json.loads(row["prerequisites"] or "[]"),
        title=row["title"],
    )


class SqliteConceptRepository(ConceptRepository):

    def __init__(self, db_path: Optional[str] = None):
        self._db_path = db_path

    @with_store_retry
    def list_all(self) -> List[Concept]:
        conn = get_connection(self._db_path)
        try:
            rows = conn.execute("SELECT * FROM concepts ORDER BY id ASC").fetchall()
        finally:
            conn.close()
        return [_row_to_concept(r) for r in rows]

    @with_store_retry
    def replace_all(self, concepts: Sequence[Concept]) -> int:
        now = datetime.now(timezone.utc).isoformat()
        conn = get_connection(self._db_path)
        try:
            conn.execute("BEGIN IMMEDIATE")
            try:
                conn.execute("DELETE FROM concepts")
                conn.executemany(
                    """
                    INSERT INTO concepts (id, title, prerequisites, updated_at)
                    VALUES (:id, :title, :prerequisites, :updated_at)
                    """,
                    [
                        {
                            "id": c.id,
                            "title": c.title or c.id,
                            "prerequisites": json.dumps(sorted(c.prerequisites)),
                            "updated_at": now,
                        }
                        for c in concepts
                    ],
                )
                rows = conn.execute(
                    """
                    UPDATE graph_meta SET value = CAST(value AS INTEGER) + 1
                    WHERE key = 'version'
                    RETURNING value
                    """
                ).fetchall()
                conn.execute("COMMIT")
            except BaseException:
                conn.execute("ROLLBACK")
                raise
        finally:
            conn.close()
        return int(rows[0]["value"])

    @with_store_retry
    def get_version(self) -> int:
        conn = get_connection(self._db_path)
        try:
            row = conn.execute("SELECT value FROM graph_meta WHERE key = 'version'").fetchone()
        finally:
            conn.close()
        return int(row["value"]) if row else 0
