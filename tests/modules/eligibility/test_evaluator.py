"""
Unit tests for the eligibility evaluator.
"""

import pytest

from career_platform.modules.eligibility.evaluator import (
    GradeEntry,
    RequirementSet,
    compute_gpa,
    evaluate,
    is_eligible,
    match_grade,
    parse_grade,
    to_entries,
)


class TestIsEligible:
    """Subject minimums and the GPA floor."""

    def test_grade_below_minimum_is_not_eligible(self):
        """English D does not satisfy a C minimum even with Mathematics A."""
        requirements = RequirementSet(subjects={"Mathematics": "B", "English": "C"})
        grades = {"Mathematics": "A", "English": "D"}

        assert is_eligible(requirements, grades) is False

    def test_grades_at_minimum_are_eligible(self):
        requirements = RequirementSet(subjects={"Mathematics": "B", "English": "C"})
        grades = {"Mathematics": "B", "English": "C", "Biology": "F"}

        assert is_eligible(requirements, grades) is True

    def test_empty_requirements_admit_student_without_grades(self):
        assert is_eligible(RequirementSet(), None) is True
        assert is_eligible(RequirementSet(), {}) is True
        assert is_eligible(None, []) is True

    def test_non_empty_requirements_reject_student_without_grades(self):
        report = evaluate(RequirementSet(subjects={"Mathematics": "E"}), {})

        assert report.eligible is False
        assert report.no_grades is True
        assert "No recorded grades" in report.reasons()[0]

    def test_missing_subject_is_not_eligible(self):
        report = evaluate(
            RequirementSet(subjects={"Physics": "C"}),
            {"Mathematics": "A", "English": "A"},
        )

        assert report.eligible is False
        assert report.missing_subjects == ("Physics",)

    def test_gpa_floor_applies_on_top_of_subjects(self):
        requirements = RequirementSet(subjects={"Mathematics": "C"}, min_gpa=3.0)
        # A=4, C=2 -> 3.0
        assert is_eligible(requirements, {"Mathematics": "A", "English": "C"}) is True
        # B=3, D=1 -> 2.0
        assert is_eligible(requirements, {"Mathematics": "B", "English": "D"}) is False

    def test_gpa_only_requirements(self):
        requirements = RequirementSet(min_gpa=2.0)
        report = evaluate(requirements, {"History": "D", "Art": "E"})

        assert report.eligible is False
        assert report.gpa == pytest.approx(0.5)
        assert "GPA 0.50 is below the required 2.00" in report.reasons()

    def test_sequence_of_entries_is_accepted(self):
        requirements = RequirementSet(subjects={"English": "B"})
        grades = [{"subject": "English", "grade": "A"}, GradeEntry("Maths", "C")]

        assert is_eligible(requirements, grades) is True

    def test_eligible_report_has_no_reasons(self):
        report = evaluate(RequirementSet(subjects={"English": "D"}), {"English": "B"})
        assert report.reasons() == []


class TestSubjectMatching:
    """Name normalization and partial matches."""

    def test_match_is_case_and_whitespace_insensitive(self):
        entries = to_entries({"  english   language ": "B"})
        assert match_grade("English Language", entries) is entries[0]

    def test_partial_match_either_direction(self):
        entries = to_entries({"Math": "B"})
        assert match_grade("Mathematics", entries) is entries[0]

        entries = to_entries({"Mathematics (Core)": "B"})
        assert match_grade("Mathematics", entries) is entries[0]

    def test_exact_match_beats_earlier_partial(self):
        entries = to_entries({"Additional Mathematics": "F", "Mathematics": "A"})
        assert match_grade("Mathematics", entries).grade == "A"

    def test_first_partial_wins_without_exact(self):
        entries = to_entries({"Mathematics Core": "C", "Mathematics Elective": "A"})
        assert match_grade("Mathematics", entries).grade == "C"

    def test_blank_requirement_matches_nothing(self):
        assert match_grade("   ", to_entries({"English": "A"})) is None


class TestGrades:
    """Letter parsing and GPA."""

    def test_unknown_letter_ranks_as_f(self):
        assert parse_grade("Z").value == "F"
        assert parse_grade(" b ").value == "B"

    def test_unknown_letter_fails_minimum(self):
        assert is_eligible(RequirementSet(subjects={"English": "E"}), {"English": "?"}) is False

    def test_compute_gpa(self):
        assert compute_gpa({"A": "A", "B": "B", "C": "C", "D": "D"}) == pytest.approx(2.5)

    def test_compute_gpa_without_grades(self):
        assert compute_gpa(None) is None
        assert compute_gpa([]) is None
