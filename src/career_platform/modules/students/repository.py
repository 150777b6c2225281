"""
Students Repository

Database operations for student profiles.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from .models import EligibilityStatus, Student


async def get_by_id(db: AsyncSession, id: str) -> Student | None:
    """Get a student profile by principal id."""
    return await db.get(Student, id)


async def create(db: AsyncSession, id: str, email: str) -> Student:
    """Create an empty profile for a principal seen for the first time."""
    student = Student(
        id=id,
        email=email,
        subjects=[],
        grades={},
        work_experience=[],
        extracurriculars=[],
        eligibility_status=EligibilityStatus.INCOMPLETE,
    )
    db.add(student)
    await db.commit()
    await db.refresh(student)
    return student


async def save(db: AsyncSession, student: Student) -> Student:
    await db.commit()
    await db.refresh(student)
    return student
