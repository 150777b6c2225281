"""
Eligibility Module

Grade/GPA based eligibility gating for course applications and job visibility.
"""

from .evaluator import (
    EligibilityReport,
    GradeEntry,
    LetterGrade,
    RequirementSet,
    compute_gpa,
    evaluate,
    is_eligible,
)

__all__ = [
    "EligibilityReport",
    "GradeEntry",
    "LetterGrade",
    "RequirementSet",
    "compute_gpa",
    "evaluate",
    "is_eligible",
]
