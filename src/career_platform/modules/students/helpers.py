"""
Student Helper Functions

Profile completeness rules behind the derived `eligibility_status`.
"""

from datetime import date

from career_platform.modules.eligibility.evaluator import (
    LetterGrade,
    match_grade,
    parse_grade,
    to_entries,
)
from career_platform.modules.students.models import EligibilityStatus, Student

MIN_SUBJECTS = 5
CORE_SUBJECTS = ("Mathematics", "English")
MIN_AGE = 16
MAX_AGE = 25
FAILING_GRADES = frozenset({LetterGrade.E, LetterGrade.F})


def _age_on(birth_date: date, today: date) -> int:
    return today.year - birth_date.year


def missing_profile_requirements(student: Student, today: date | None = None) -> list[str]:
    """
    List what a student still needs before the profile counts as complete.

    Checks personal details, an age between MIN_AGE and MAX_AGE, at least
    MIN_SUBJECTS graded subjects including the core subjects, and no failing
    (E or F) grades.
    """
    today = today or date.today()
    missing: list[str] = []

    if not student.name:
        missing.append("Full Name")
    if not student.date_of_birth:
        missing.append("Date of Birth")
    if not student.high_school:
        missing.append("High School")
    if not student.graduation_year:
        missing.append("Graduation Year")

    if student.date_of_birth:
        age = _age_on(student.date_of_birth, today)
        if age < MIN_AGE:
            missing.append(f"Minimum age of {MIN_AGE} years")
        if age > MAX_AGE:
            missing.append(f"Maximum age of {MAX_AGE} years")

    entries = to_entries(student.grades)
    if not entries:
        missing.append(f"At least {MIN_SUBJECTS} subjects with grades")
        return missing

    for subject in CORE_SUBJECTS:
        if match_grade(subject, entries) is None:
            missing.append(f"{subject} subject")

    if any(parse_grade(entry.grade) in FAILING_GRADES for entry in entries):
        missing.append("No failing grades (E or F)")

    if len(entries) < MIN_SUBJECTS:
        missing.append(f"Minimum of {MIN_SUBJECTS} subjects")

    return missing


def derive_eligibility_status(student: Student, today: date | None = None) -> EligibilityStatus:
    if missing_profile_requirements(student, today):
        return EligibilityStatus.INCOMPLETE
    return EligibilityStatus.ELIGIBLE


def profile_completion(student: Student, today: date | None = None) -> int:
    """Rough completion percentage shown on the dashboard."""
    missing = len(missing_profile_requirements(student, today))
    return max(0, round((10 - missing) / 10 * 100))
