"""
Eligibility Schemas

The single validated requirement format accepted from institutions and
companies. Validation happens here, at entry, so stored requirements are
always a clean subject -> letter grade map.
"""

from pydantic import BaseModel, Field, field_validator

from career_platform.modules.eligibility.evaluator import (
    LetterGrade,
    RequirementSet,
    normalize_subject,
)


class RequirementsIn(BaseModel):
    """Requirement block on course/job create and update requests."""

    required_subjects: dict[str, LetterGrade] = Field(default_factory=dict)
    min_gpa: float | None = Field(None, ge=0, le=4)

    @field_validator("required_subjects")
    @classmethod
    def validate_subjects(cls, value: dict[str, LetterGrade]) -> dict[str, LetterGrade]:
        """Trim names and reject blanks or names that collide after normalization."""
        cleaned: dict[str, LetterGrade] = {}
        seen: set[str] = set()
        for subject, grade in value.items():
            name = " ".join(subject.split())
            if not name:
                raise ValueError("Subject names cannot be blank")
            key = normalize_subject(name)
            if key in seen:
                raise ValueError(f"Duplicate subject requirement: {name}")
            seen.add(key)
            cleaned[name] = grade
        return cleaned

    def to_requirement_set(self) -> RequirementSet:
        return RequirementSet(
            subjects={s: g.value for s, g in self.required_subjects.items()},
            min_gpa=self.min_gpa,
        )


def requirement_set_from_columns(
    required_subjects: dict | None, min_gpa: float | None
) -> RequirementSet:
    """Build a RequirementSet from stored course/job columns."""
    return RequirementSet(subjects=dict(required_subjects or {}), min_gpa=min_gpa)
