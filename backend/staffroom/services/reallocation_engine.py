from __future__ import annotations

from collections import Counter, defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date, timedelta
import logging
import uuid

from sqlalchemy import func, insert, select, text
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from staffroom.core.exceptions import ReallocationPersistenceError
from staffroom.models.faculty import Faculty, FacultySubject
from staffroom.models.reallocation import Reallocation, ReallocationStatus
from staffroom.models.subject import Subject
from staffroom.models.timetable_slot import TimetableSlot

logger = logging.getLogger(__name__)

SUNDAY = 7
SELECTION_THRESHOLD = 0


def weekday_index(value: date) -> int:
    """Monday=1 .. Saturday=6, Sunday=7, matching ``TimetableSlot.day_of_week``."""
    return value.isoweekday()


def expand_teaching_dates(start_date: date, end_date: date) -> list[date]:
    dates: list[date] = []
    current = start_date
    while current <= end_date:
        if weekday_index(current) != SUNDAY:
            dates.append(current)
        current += timedelta(days=1)
    return dates


@dataclass(frozen=True)
class ScoringWeights:
    subject_match: int = 40
    department_match: int = 15
    lab_qualified: int = 20
    lab_unqualified: int = -50
    free_period: int = 30
    conflict: int = -100
    overloaded: int = -100
    per_prior_substitution: int = 5


DEFAULT_WEIGHTS = ScoringWeights()


@dataclass(frozen=True)
class AffectedSlot:
    slot_id: str
    day_of_week: int
    period_number: int
    subject_id: str
    subject_department_id: str | None
    is_lab: bool
    year_section_id: str


@dataclass(frozen=True)
class CandidateProfile:
    faculty_id: str
    full_name: str
    department_id: str
    lab_qualified: bool
    max_periods_per_day: int
    subject_ids: frozenset[str] = frozenset()


@dataclass(frozen=True)
class ScoredCandidate:
    candidate: CandidateProfile
    score: int
    subject_match: bool
    has_conflict: bool
    overloaded: bool
    prior_substitutions: int

    @property
    def notes(self) -> str:
        return f"Score: {self.score}. Subject match: {'Yes' if self.subject_match else 'No'}"


class WeeklyLoadIndex:
    """Occupied periods per (faculty, weekday), taken from the full slot table."""

    def __init__(self, entries: Iterable[tuple[str, int, int]] = ()) -> None:
        self._periods: dict[tuple[str, int], set[int]] = defaultdict(set)
        self._slot_counts: Counter[tuple[str, int]] = Counter()
        for faculty_id, day_of_week, period_number in entries:
            self._periods[(faculty_id, day_of_week)].add(period_number)
            self._slot_counts[(faculty_id, day_of_week)] += 1

    def has_conflict(self, faculty_id: str, day_of_week: int, period_number: int) -> bool:
        return period_number in self._periods.get((faculty_id, day_of_week), ())

    def periods_on_day(self, faculty_id: str, day_of_week: int) -> int:
        return self._slot_counts[(faculty_id, day_of_week)]


class FairnessTracker:
    """Running count of substitutions handed to each faculty member.

    Seeded from suggestions already stored for the window being processed and
    advanced after every selection, so later occurrences in the same run see
    the pressure of earlier ones.
    """

    def __init__(self, seed: Mapping[str, int] | None = None) -> None:
        self._counts: Counter[str] = Counter(seed or {})

    @classmethod
    def seeded_from_store(cls, db: Session, *, start_date: date, end_date: date) -> "FairnessTracker":
        rows = db.execute(
            select(Reallocation.substitute_faculty_id, func.count(Reallocation.id))
            .where(
                Reallocation.reallocation_date >= start_date,
                Reallocation.reallocation_date <= end_date,
            )
            .group_by(Reallocation.substitute_faculty_id)
        ).all()
        return cls({faculty_id: int(total) for faculty_id, total in rows})

    def count(self, faculty_id: str) -> int:
        return self._counts[faculty_id]

    def record(self, faculty_id: str) -> int:
        self._counts[faculty_id] += 1
        return self._counts[faculty_id]

    def snapshot(self) -> dict[str, int]:
        return dict(self._counts)


def score_candidate(
    *,
    slot: AffectedSlot,
    day_of_week: int,
    candidate: CandidateProfile,
    load_index: WeeklyLoadIndex,
    fairness: FairnessTracker,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> ScoredCandidate:
    """Signed suitability score of ``candidate`` for one occurrence of ``slot``.

    Hard rules (lab mismatch, double booking, daily cap) are large negative
    contributions rather than a separate filter; a candidate is selectable
    only while its total stays above ``SELECTION_THRESHOLD``.
    """
    score = 0

    subject_match = slot.subject_id in candidate.subject_ids
    if subject_match:
        score += weights.subject_match

    if slot.subject_department_id is not None and candidate.department_id == slot.subject_department_id:
        score += weights.department_match

    if slot.is_lab:
        score += weights.lab_qualified if candidate.lab_qualified else weights.lab_unqualified

    has_conflict = load_index.has_conflict(candidate.faculty_id, day_of_week, slot.period_number)
    score += weights.conflict if has_conflict else weights.free_period

    prior = fairness.count(candidate.faculty_id)
    score -= prior * weights.per_prior_substitution

    overloaded = load_index.periods_on_day(candidate.faculty_id, day_of_week) >= candidate.max_periods_per_day
    if overloaded:
        score += weights.overloaded

    return ScoredCandidate(
        candidate=candidate,
        score=score,
        subject_match=subject_match,
        has_conflict=has_conflict,
        overloaded=overloaded,
        prior_substitutions=prior,
    )


def select_substitute(scored: Iterable[ScoredCandidate]) -> ScoredCandidate | None:
    # sorted() is stable, so equal scores keep roster order.
    ranked = sorted(scored, key=lambda item: item.score, reverse=True)
    for item in ranked:
        if item.score > SELECTION_THRESHOLD:
            return item
    return None


@dataclass
class AllocationSummary:
    leave_request_id: str
    faculty_id: str
    absent_department_id: str | None = None
    slot_count: int = 0
    dates_processed: int = 0
    unassigned: int = 0
    skipped: int = 0
    suggestions: list[dict] = field(default_factory=list)

    @property
    def created(self) -> int:
        return len(self.suggestions)

    @property
    def message(self) -> str:
        if self.slot_count == 0:
            return "No slots to reallocate"
        return f"Generated {self.created} reallocation suggestions"

    def as_details(self) -> dict:
        return {
            "faculty_id": self.faculty_id,
            "absent_department_id": self.absent_department_id,
            "dates_processed": self.dates_processed,
            "created": self.created,
            "unassigned": self.unassigned,
            "skipped": self.skipped,
        }


class SubstituteAllocator:
    """Greedy per-occurrence substitute assignment for one approved leave.

    Occurrences are resolved dates ascending and, within a date, in the
    absentee's slot order ``(period_number, id)``. That order matters: every
    selection raises the chosen faculty's fairness penalty for the occurrences
    that follow. Rows are only added to the session; the caller commits.
    """

    def __init__(
        self,
        *,
        db: Session,
        leave_request_id: str,
        faculty_id: str,
        start_date: date,
        end_date: date,
        weights: ScoringWeights = DEFAULT_WEIGHTS,
        lock_runs: bool = True,
    ) -> None:
        self.db = db
        self.leave_request_id = leave_request_id
        self.faculty_id = faculty_id
        self.start_date = start_date
        self.end_date = end_date
        self.weights = weights
        self.lock_runs = lock_runs

    @property
    def dialect_name(self) -> str:
        return self.db.get_bind().dialect.name

    def run(self) -> AllocationSummary:
        summary = AllocationSummary(leave_request_id=self.leave_request_id, faculty_id=self.faculty_id)
        self._acquire_run_lock()

        slots = self._load_affected_slots()
        summary.slot_count = len(slots)
        if not slots:
            logger.info("Faculty %s has no timetable slots; nothing to reallocate", self.faculty_id)
            return summary

        absent = self.db.get(Faculty, self.faculty_id)
        summary.absent_department_id = absent.department_id if absent is not None else None

        candidates = self._load_candidates()
        load_index = self._load_weekly_index()
        fairness = FairnessTracker.seeded_from_store(self.db, start_date=self.start_date, end_date=self.end_date)
        covered = self._load_covered_occurrences([slot.slot_id for slot in slots])

        slots_by_day: dict[int, list[AffectedSlot]] = defaultdict(list)
        for slot in slots:
            slots_by_day[slot.day_of_week].append(slot)

        dates = expand_teaching_dates(self.start_date, self.end_date)
        summary.dates_processed = len(dates)

        rows: list[dict] = []
        for on_date in dates:
            day_of_week = weekday_index(on_date)
            for slot in slots_by_day.get(day_of_week, []):
                if (slot.slot_id, on_date) in covered:
                    summary.skipped += 1
                    continue

                best = select_substitute(
                    score_candidate(
                        slot=slot,
                        day_of_week=day_of_week,
                        candidate=candidate,
                        load_index=load_index,
                        fairness=fairness,
                        weights=self.weights,
                    )
                    for candidate in candidates
                )
                if best is None:
                    summary.unassigned += 1
                    logger.warning(
                        "No substitute with a positive score for slot %s (%s, period %s) on %s",
                        slot.slot_id,
                        slot.year_section_id,
                        slot.period_number,
                        on_date.isoformat(),
                    )
                    continue

                rows.append(self._build_row(slot, on_date, best))
                fairness.record(best.candidate.faculty_id)
                logger.debug(
                    "Slot %s on %s -> %s (%s, score %s, prior %s)",
                    slot.slot_id,
                    on_date.isoformat(),
                    best.candidate.full_name,
                    best.candidate.faculty_id,
                    best.score,
                    best.prior_substitutions,
                )

        inserted_ids = self._write(rows)
        summary.suggestions = [row for row in rows if row["id"] in inserted_ids]
        summary.skipped += len(rows) - len(summary.suggestions)

        logger.info(
            "Reallocation run for leave %s (%s..%s): %d created, %d unassigned, %d skipped",
            self.leave_request_id,
            self.start_date.isoformat(),
            self.end_date.isoformat(),
            summary.created,
            summary.unassigned,
            summary.skipped,
        )
        return summary

    def _acquire_run_lock(self) -> None:
        if not self.lock_runs or self.dialect_name != "postgresql":
            return
        self.db.execute(
            text("SELECT pg_advisory_xact_lock(hashtext(:lock_key))"),
            {"lock_key": f"reallocation:{self.leave_request_id}"},
        )

    def _load_affected_slots(self) -> list[AffectedSlot]:
        rows = self.db.execute(
            select(TimetableSlot, Subject)
            .outerjoin(Subject, Subject.id == TimetableSlot.subject_id)
            .where(TimetableSlot.faculty_id == self.faculty_id)
            .order_by(TimetableSlot.period_number, TimetableSlot.id)
        ).all()
        return [
            AffectedSlot(
                slot_id=slot.id,
                day_of_week=slot.day_of_week,
                period_number=slot.period_number,
                subject_id=slot.subject_id,
                subject_department_id=subject.department_id if subject is not None else None,
                is_lab=bool(slot.is_lab or (subject is not None and subject.is_lab)),
                year_section_id=slot.year_section_id,
            )
            for slot, subject in rows
        ]

    def _load_candidates(self) -> list[CandidateProfile]:
        roster = list(
            self.db.execute(
                select(Faculty)
                .where(Faculty.is_active.is_(True), Faculty.id != self.faculty_id)
                .order_by(Faculty.full_name, Faculty.id)
            ).scalars()
        )
        expertise: dict[str, set[str]] = defaultdict(set)
        for faculty_id, subject_id in self.db.execute(select(FacultySubject.faculty_id, FacultySubject.subject_id)):
            expertise[faculty_id].add(subject_id)

        return [
            CandidateProfile(
                faculty_id=member.id,
                full_name=member.full_name,
                department_id=member.department_id,
                lab_qualified=member.lab_qualified,
                max_periods_per_day=member.max_periods_per_day,
                subject_ids=frozenset(expertise.get(member.id, ())),
            )
            for member in roster
        ]

    def _load_weekly_index(self) -> WeeklyLoadIndex:
        return WeeklyLoadIndex(
            self.db.execute(
                select(TimetableSlot.faculty_id, TimetableSlot.day_of_week, TimetableSlot.period_number)
            ).all()
        )

    def _load_covered_occurrences(self, slot_ids: list[str]) -> set[tuple[str, date]]:
        rows = self.db.execute(
            select(Reallocation.timetable_slot_id, Reallocation.reallocation_date).where(
                Reallocation.timetable_slot_id.in_(slot_ids),
                Reallocation.reallocation_date >= self.start_date,
                Reallocation.reallocation_date <= self.end_date,
            )
        ).all()
        return {(slot_id, on_date) for slot_id, on_date in rows}

    def _build_row(self, slot: AffectedSlot, on_date: date, best: ScoredCandidate) -> dict:
        return {
            "id": str(uuid.uuid4()),
            "leave_request_id": self.leave_request_id,
            "timetable_slot_id": slot.slot_id,
            "original_faculty_id": self.faculty_id,
            "substitute_faculty_id": best.candidate.faculty_id,
            "reallocation_date": on_date,
            "score": best.score,
            "status": ReallocationStatus.suggested,
            "notes": best.notes,
        }

    def _write(self, rows: list[dict]) -> set[str]:
        """Bulk insert in one statement; occurrences another run already covered are skipped."""
        if not rows:
            return set()

        if self.dialect_name == "postgresql":
            stmt = postgresql.insert(Reallocation).values(rows).on_conflict_do_nothing(
                index_elements=["timetable_slot_id", "reallocation_date"]
            )
        elif self.dialect_name == "sqlite":
            stmt = sqlite.insert(Reallocation).values(rows).on_conflict_do_nothing(
                index_elements=["timetable_slot_id", "reallocation_date"]
            )
        else:
            stmt = insert(Reallocation).values(rows)

        try:
            return set(self.db.execute(stmt.returning(Reallocation.id)).scalars().all())
        except SQLAlchemyError as exc:
            self.db.rollback()
            message = str(getattr(exc, "orig", None) or exc)
            logger.error("Bulk insert of %d reallocation suggestions failed: %s", len(rows), message)
            raise ReallocationPersistenceError(message, details={"attempted": len(rows)}) from exc
