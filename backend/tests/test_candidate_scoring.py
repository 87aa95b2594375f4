import pytest

from staffroom.services.reallocation_engine import (
    DEFAULT_WEIGHTS,
    AffectedSlot,
    CandidateProfile,
    FairnessTracker,
    ScoredCandidate,
    ScoringWeights,
    WeeklyLoadIndex,
    score_candidate,
    select_substitute,
)

MONDAY = 1


@pytest.fixture
def lab_slot():
    return AffectedSlot(
        slot_id="slot-lab",
        day_of_week=MONDAY,
        period_number=3,
        subject_id="sub-physics-lab",
        subject_department_id="dept-sci",
        is_lab=True,
        year_section_id="sec-a",
    )


@pytest.fixture
def theory_slot():
    return AffectedSlot(
        slot_id="slot-theory",
        day_of_week=MONDAY,
        period_number=2,
        subject_id="sub-maths",
        subject_department_id="dept-sci",
        is_lab=False,
        year_section_id="sec-a",
    )


def make_candidate(faculty_id, *, department_id="dept-sci", lab_qualified=False, max_periods=6, subjects=()):
    return CandidateProfile(
        faculty_id=faculty_id,
        full_name=faculty_id.title(),
        department_id=department_id,
        lab_qualified=lab_qualified,
        max_periods_per_day=max_periods,
        subject_ids=frozenset(subjects),
    )


def score(slot, candidate, *, load_index=None, fairness=None, weights=DEFAULT_WEIGHTS):
    return score_candidate(
        slot=slot,
        day_of_week=slot.day_of_week,
        candidate=candidate,
        load_index=load_index or WeeklyLoadIndex(),
        fairness=fairness or FairnessTracker(),
        weights=weights,
    )


def test_fully_suited_lab_candidate_scores_105(lab_slot):
    candidate = make_candidate("alice", lab_qualified=True, subjects={"sub-physics-lab"})

    result = score(lab_slot, candidate)

    assert result.score == 40 + 15 + 20 + 30
    assert result.subject_match is True
    assert result.has_conflict is False
    assert result.overloaded is False
    assert result.notes == "Score: 105. Subject match: Yes"


def test_unqualified_candidate_from_other_department_goes_negative_on_lab(lab_slot):
    candidate = make_candidate("bob", department_id="dept-arts")

    result = score(lab_slot, candidate)

    assert result.score == 30 - 50
    assert result.notes.endswith("Subject match: No")


def test_conflict_penalty_dominates_expertise(theory_slot):
    candidate = make_candidate("carol", subjects={"sub-maths"})
    busy = WeeklyLoadIndex([("carol", MONDAY, 2)])

    result = score(theory_slot, candidate, load_index=busy)

    assert result.has_conflict is True
    assert result.score == 40 + 15 - 100
    assert select_substitute([result]) is None


def test_conflict_only_counts_same_weekday_and_period(theory_slot):
    candidate = make_candidate("dave")
    index = WeeklyLoadIndex([("dave", MONDAY, 4), ("dave", 2, 2)])

    result = score(theory_slot, candidate, load_index=index)

    assert result.has_conflict is False
    assert result.score == 15 + 30


def test_daily_cap_reached_is_penalised(theory_slot):
    candidate = make_candidate("erin", subjects={"sub-maths"}, max_periods=2)
    index = WeeklyLoadIndex([("erin", MONDAY, 1), ("erin", MONDAY, 5)])

    result = score(theory_slot, candidate, load_index=index)

    assert result.overloaded is True
    assert result.score == 40 + 15 + 30 - 100


def test_daily_cap_counts_slot_rows(theory_slot):
    index = WeeklyLoadIndex([("frank", MONDAY, 1), ("frank", MONDAY, 1), ("frank", 3, 1)])

    assert index.periods_on_day("frank", MONDAY) == 2
    assert index.periods_on_day("frank", 3) == 1
    assert index.periods_on_day("nobody", MONDAY) == 0


def test_fairness_penalty_is_five_per_prior_substitution(theory_slot):
    candidate = make_candidate("gina", subjects={"sub-maths"})
    fairness = FairnessTracker({"gina": 3})

    result = score(theory_slot, candidate, fairness=fairness)

    assert result.prior_substitutions == 3
    assert result.score == 40 + 15 + 30 - 15


def test_custom_weights_are_applied(theory_slot):
    candidate = make_candidate("hana", subjects={"sub-maths"})
    weights = ScoringWeights(subject_match=10, department_match=0, free_period=1)

    assert score(theory_slot, candidate, weights=weights).score == 11


def test_slot_without_subject_department_never_matches_department():
    slot = AffectedSlot(
        slot_id="orphan",
        day_of_week=MONDAY,
        period_number=1,
        subject_id="missing",
        subject_department_id=None,
        is_lab=False,
        year_section_id="sec-a",
    )

    assert score(slot, make_candidate("ian")).score == 30


def test_fairness_tracker_records_and_snapshots():
    tracker = FairnessTracker({"a": 1})

    assert tracker.count("a") == 1
    assert tracker.count("b") == 0
    assert tracker.record("b") == 1
    assert tracker.record("a") == 2
    assert tracker.snapshot() == {"a": 2, "b": 1}


def _scored(name, value):
    return ScoredCandidate(
        candidate=make_candidate(name),
        score=value,
        subject_match=False,
        has_conflict=False,
        overloaded=False,
        prior_substitutions=0,
    )


def test_selector_picks_highest_positive_score():
    best = select_substitute([_scored("a", 45), _scored("b", 85), _scored("c", -20)])

    assert best.candidate.faculty_id == "b"


def test_selector_keeps_roster_order_on_ties():
    best = select_substitute([_scored("first", 60), _scored("second", 60)])

    assert best.candidate.faculty_id == "first"


def test_selector_requires_strictly_positive_score():
    assert select_substitute([_scored("zero", 0), _scored("neg", -5)]) is None
    assert select_substitute([]) is None
