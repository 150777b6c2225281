"""
Eligibility Evaluator

Pure functions deciding whether a student's recorded grades satisfy the
requirements of a course or a job. Nothing here performs I/O, so the same
functions serve submission gating and live list filtering.

Rules:
- A requirement set maps subject names to a minimum letter grade on the
  scale A > B > C > D > E > F, and may declare a minimum GPA.
- Subjects are compared case-insensitively with whitespace collapsed.
  A student grade matches a requirement when the normalized names are equal
  or one contains the other ("Math" vs "Mathematics"). When several grades
  match, an exact match wins, otherwise the first match in entry order.
- An empty requirement set admits everyone, including students without grades.
- A non-empty requirement set rejects students with no recorded grades.
- The GPA gate is applied in addition to the subject gate.
- Letters outside the scale rank as F and earn no grade points.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum


class LetterGrade(str, Enum):
    """Letter grade scale, highest first."""

    A = "A"
    B = "B"
    C = "C"
    D = "D"
    E = "E"
    F = "F"


# Ordinal rank used for subject minimums (F=0 ... A=5)
GRADE_RANK: dict[LetterGrade, int] = {
    LetterGrade.A: 5,
    LetterGrade.B: 4,
    LetterGrade.C: 3,
    LetterGrade.D: 2,
    LetterGrade.E: 1,
    LetterGrade.F: 0,
}

# Grade points used for GPA (A=4 ... E/F=0)
GRADE_POINTS: dict[LetterGrade, int] = {
    LetterGrade.A: 4,
    LetterGrade.B: 3,
    LetterGrade.C: 2,
    LetterGrade.D: 1,
    LetterGrade.E: 0,
    LetterGrade.F: 0,
}


@dataclass(frozen=True)
class GradeEntry:
    """One recorded subject grade."""

    subject: str
    grade: str


@dataclass(frozen=True)
class RequirementSet:
    """Minimum grades per subject plus an optional GPA floor."""

    subjects: Mapping[str, str] = field(default_factory=dict)
    min_gpa: float | None = None

    @property
    def is_empty(self) -> bool:
        return not self.subjects and self.min_gpa is None


@dataclass(frozen=True)
class SubjectShortfall:
    subject: str
    required: str
    actual: str


@dataclass(frozen=True)
class EligibilityReport:
    """Outcome of an evaluation with the reasons behind a rejection."""

    eligible: bool
    no_grades: bool = False
    missing_subjects: tuple[str, ...] = ()
    shortfalls: tuple[SubjectShortfall, ...] = ()
    gpa: float | None = None
    min_gpa: float | None = None

    def reasons(self) -> list[str]:
        """Human-readable reasons, empty when eligible."""
        if self.eligible:
            return []
        if self.no_grades:
            return ["No recorded grades. Add your subjects and grades to your profile."]

        reasons = [f"Missing required subject: {subject}" for subject in self.missing_subjects]
        reasons.extend(
            f"{s.subject}: grade {s.actual} is below the required {s.required}"
            for s in self.shortfalls
        )
        if self.min_gpa is not None and (self.gpa is None or self.gpa < self.min_gpa):
            gpa_text = f"{self.gpa:.2f}" if self.gpa is not None else "n/a"
            reasons.append(f"GPA {gpa_text} is below the required {self.min_gpa:.2f}")
        return reasons


GradeSet = Mapping[str, str] | Sequence[GradeEntry | Mapping[str, str]]


def normalize_subject(subject: str) -> str:
    """Lower-case a subject name and collapse internal whitespace."""
    return " ".join(subject.split()).lower()


def parse_grade(grade: str) -> LetterGrade:
    """Parse a letter grade; anything off the scale is treated as F."""
    try:
        return LetterGrade(grade.strip().upper())
    except (ValueError, AttributeError):
        return LetterGrade.F


def grade_rank(grade: str) -> int:
    return GRADE_RANK[parse_grade(grade)]


def grade_points(grade: str) -> int:
    return GRADE_POINTS[parse_grade(grade)]


def to_entries(grades: GradeSet | None) -> list[GradeEntry]:
    """
    Flatten either accepted grade shape into ordered entries.

    Accepts a subject -> grade mapping (insertion order is entry order) or a
    sequence of GradeEntry / {"subject", "grade"} mappings.
    """
    if not grades:
        return []

    if isinstance(grades, Mapping):
        return [GradeEntry(subject=str(s), grade=str(g)) for s, g in grades.items()]

    entries = []
    for item in grades:
        if isinstance(item, GradeEntry):
            entries.append(item)
        else:
            entries.append(GradeEntry(subject=str(item["subject"]), grade=str(item["grade"])))
    return entries


def match_grade(required_subject: str, entries: Sequence[GradeEntry]) -> GradeEntry | None:
    """
    Find the student grade that satisfies a required subject name.

    Exact normalized match first, then the first containment match in order.
    """
    wanted = normalize_subject(required_subject)
    if not wanted:
        return None

    first_partial: GradeEntry | None = None
    for entry in entries:
        have = normalize_subject(entry.subject)
        if not have:
            continue
        if have == wanted:
            return entry
        if first_partial is None and (wanted in have or have in wanted):
            first_partial = entry
    return first_partial


def compute_gpa(grades: GradeSet | None) -> float | None:
    """Arithmetic mean of grade points over all recorded grades, None if none."""
    entries = to_entries(grades)
    if not entries:
        return None
    return sum(grade_points(e.grade) for e in entries) / len(entries)


def evaluate(requirements: RequirementSet | None, grades: GradeSet | None) -> EligibilityReport:
    """Evaluate grades against requirements and explain the result."""
    if requirements is None or requirements.is_empty:
        return EligibilityReport(eligible=True)

    entries = to_entries(grades)
    if not entries:
        return EligibilityReport(eligible=False, no_grades=True, min_gpa=requirements.min_gpa)

    missing: list[str] = []
    shortfalls: list[SubjectShortfall] = []

    for subject, minimum in requirements.subjects.items():
        entry = match_grade(subject, entries)
        if entry is None:
            missing.append(subject)
            continue
        if grade_rank(entry.grade) < grade_rank(minimum):
            shortfalls.append(
                SubjectShortfall(
                    subject=subject,
                    required=parse_grade(minimum).value,
                    actual=parse_grade(entry.grade).value,
                )
            )

    gpa = compute_gpa(entries)
    gpa_ok = requirements.min_gpa is None or (gpa is not None and gpa >= requirements.min_gpa)

    return EligibilityReport(
        eligible=not missing and not shortfalls and gpa_ok,
        missing_subjects=tuple(missing),
        shortfalls=tuple(shortfalls),
        gpa=gpa,
        min_gpa=requirements.min_gpa,
    )


def is_eligible(requirements: RequirementSet | None, grades: GradeSet | None) -> bool:
    """True when the grades satisfy every subject minimum and the GPA floor."""
    return evaluate(requirements, grades).eligible
