"""Unlock Engine: unlock rule, lazy materialisation, record_attempt outcomes."""
import random
import threading
from decimal import Decimal
from fractions import Fraction

import pytest

from masterypath.domain.common.errors import ConceptNotFound, InvalidScore
from masterypath.domain.concept.graph import ConceptGraph
from masterypath.domain.concept.models import Concept
from masterypath.domain.pathing.unlock import compute_frontier, compute_unlocked
from masterypath.domain.progress.models import ProgressState


def _random_dag(rng, size):
    concepts = []
    for i in range(size):
        earlier = [f"c{j:02d}" for j in range(i)]
        k = rng.randint(0, min(3, len(earlier)))
        concepts.append(Concept.of(f"c{i:02d}", rng.sample(earlier, k)))
    return ConceptGraph.build(concepts)


# ------------------------------------------------------------------
# Pure unlock rule
# ------------------------------------------------------------------
@pytest.mark.parametrize("seed", range(25))
def test_unlocked_iff_all_prerequisites_mastered(seed, snapshot_factory):
    rng = random.Random(seed)
    graph = _random_dag(rng, rng.randint(1, 20))
    ids = [c.id for c in graph.all_concepts()]
    mastered = set(rng.sample(ids, rng.randint(0, len(ids))))
    snapshot = snapshot_factory(mastered=mastered)

    unlocked = compute_unlocked(graph, snapshot)
    for concept in graph.all_concepts():
        expected = concept.prerequisites <= mastered
        assert (concept.id in unlocked) == expected
        if not concept.prerequisites:
            assert concept.id in unlocked

    assert compute_unlocked(graph, snapshot) == unlocked
    assert compute_frontier(graph, snapshot) == unlocked - mastered


def test_roots_unlocked_with_empty_mastery(snapshot_factory, abc_graph):
    assert compute_unlocked(abc_graph, snapshot_factory()) == {"A"}


def test_unmastered_high_score_does_not_unlock(snapshot_factory, abc_graph):
    # The mastered flag is what gates unlocking, not a raw score.
    snapshot = snapshot_factory(scores={"A": 0.99})
    assert compute_unlocked(abc_graph, snapshot) == {"A"}


# ------------------------------------------------------------------
# Engine
# ------------------------------------------------------------------
def test_scenario_progressive_unlocks(engine):
    assert engine.unlocked_for("L") == {"A"}

    outcome = engine.record_attempt("L", "A", 0.9)
    assert outcome.mastered is True
    assert outcome.unlocked == {"A", "B"}

    outcome = engine.record_attempt("L", "B", 0.9)
    assert outcome.unlocked == {"A", "B", "C"}


def test_unlocked_concepts_are_materialised(engine, mastery_repo):
    engine.unlocked_for("L")
    record = mastery_repo.snapshot("L")["A"]
    assert (record.attempts, record.mastered) == (0, False)

    engine.record_attempt("L", "A", 0.8)
    assert sorted(mastery_repo.snapshot("L")) == ["A", "B"]


def test_unlock_computation_is_idempotent(engine):
    engine.record_attempt("L", "A", 0.9)
    assert engine.unlocked_for("L") == engine.unlocked_for("L")


def test_lower_score_never_unmasters(engine):
    assert engine.record_attempt("L", "A", 0.9).mastered is True
    outcome = engine.record_attempt("L", "A", 0.2)
    assert outcome.mastered is True
    assert outcome.unlocked == {"A", "B"}


def test_failing_score_keeps_dependents_locked(engine):
    outcome = engine.record_attempt("L", "A", 0.5)
    assert outcome.mastered is False
    assert outcome.unlocked == {"A"}


@pytest.mark.parametrize("score", [-0.01, 1.01, 10 ** 400, -(10 ** 400), float("nan"), "0.9", None, True])
def test_invalid_scores_are_rejected(engine, mastery_repo, score):
    with pytest.raises(InvalidScore):
        engine.record_attempt("L", "A", score)
    assert len(mastery_repo.snapshot("L")) == 0


def test_unknown_concept_is_rejected(engine):
    with pytest.raises(ConceptNotFound):
        engine.record_attempt("L", "Z", 0.9)


def test_integer_bounds_are_valid_scores(engine):
    assert engine.record_attempt("L", "A", 1).mastered is True
    assert engine.record_attempt("L", "B", 0).mastered is False


def test_fraction_and_decimal_scores_are_accepted(engine):
    assert engine.record_attempt("L", "A", Fraction(4, 5)).mastered is True
    assert engine.record_attempt("L", "B", Decimal("0.5")).mastered is False
    assert engine.snapshot_for("L").best_score("B") == 0.5


def test_state_machine(engine):
    states = engine.states_for("L")
    assert states == {
        "A": ProgressState.UNLOCKED,
        "B": ProgressState.LOCKED,
        "C": ProgressState.LOCKED,
    }

    engine.record_attempt("L", "A", 0.4)
    assert engine.states_for("L")["A"] is ProgressState.ATTEMPTED

    engine.record_attempt("L", "A", 0.8)
    engine.record_attempt("L", "A", 0.1)
    states = engine.states_for("L")
    assert states["A"] is ProgressState.MASTERED
    assert states["B"] is ProgressState.UNLOCKED


def test_frontier_excludes_mastered(engine):
    engine.record_attempt("L", "A", 0.9)
    assert engine.frontier_for("L") == {"B"}


def test_unlocked_and_frontier_share_one_snapshot(engine, mastery_repo, monkeypatch):
    engine.record_attempt("L", "A", 0.9)
    reads = []
    real_snapshot = mastery_repo.snapshot

    def counting_snapshot(learner_id):
        reads.append(learner_id)
        return real_snapshot(learner_id)

    monkeypatch.setattr(mastery_repo, "snapshot", counting_snapshot)
    unlocked, frontier = engine.unlocked_and_frontier_for("L")
    assert reads == ["L"]
    assert (unlocked, frontier) == ({"A", "B"}, {"B"})
    assert frontier <= unlocked


def test_concurrent_record_attempt_counts_both(engine, mastery_repo):
    engine.unlocked_for("L")
    prior = mastery_repo.snapshot("L")["A"].attempts
    barrier = threading.Barrier(2)
    outcomes = []

    def submit(score):
        barrier.wait()
        outcomes.append(engine.record_attempt("L", "A", score))

    threads = [threading.Thread(target=submit, args=(s,)) for s in (0.4, 0.9)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(outcomes) == 2
    record = mastery_repo.snapshot("L")["A"]
    assert record.attempts == prior + 2
    assert record.mastered is True
