"""
Seed Demo Catalog

Creates a demo institution with a few courses and a demo company with one
job, then prints access tokens for an institution and a company account
linked to them. Safe to run more than once.

Usage:
    python scripts/seed_demo_catalog.py
"""

import asyncio
from datetime import UTC, datetime, timedelta

from sqlalchemy import select

from career_platform.core.database import async_session_maker, close_db
from career_platform.core.security import create_access_token
from career_platform.modules.catalog.models import (
    Company,
    Course,
    Institution,
    Job,
    OrganisationStatus,
)

INSTITUTION_NAME = "Limkokwing University"
COMPANY_NAME = "Vodacom Lesotho"

COURSES = [
    {
        "name": "BSc Software Engineering",
        "faculty": "Information and Communication Technology",
        "duration": "4 years",
        "capacity": 2,
        "required_subjects": {"Mathematics": "C", "English": "C"},
        "min_gpa": 2.5,
    },
    {
        "name": "Diploma in Business Management",
        "faculty": "Business and Globalization",
        "duration": "3 years",
        "capacity": 30,
        "required_subjects": {"English": "D"},
        "min_gpa": None,
    },
    {
        "name": "Short Course in Digital Media",
        "faculty": "Communication, Media and Broadcasting",
        "duration": "6 months",
        "capacity": None,
        "required_subjects": {},
        "min_gpa": None,
    },
]


def _token(sub: str, email: str, role: str, org_id) -> str:
    return create_access_token(
        {
            "sub": sub,
            "email": email,
            "role": role,
            "org_id": str(org_id),
            "email_verified": True,
            "exp": datetime.now(UTC) + timedelta(days=7),
        }
    )


async def seed_demo_catalog() -> None:
    """Create the demo institution, courses, company and job if missing."""

    async with async_session_maker() as db:
        result = await db.execute(select(Institution).where(Institution.name == INSTITUTION_NAME))
        institution = result.scalar_one_or_none()

        if institution:
            print(f"Demo institution already exists: {institution.name}")
        else:
            institution = Institution(
                name=INSTITUTION_NAME,
                email="admissions@limkokwing.example",
                status=OrganisationStatus.ACTIVE,
            )
            db.add(institution)
            await db.flush()

            for course in COURSES:
                db.add(Course(institution_id=institution.id, **course))
            print(f"Created institution {institution.name} with {len(COURSES)} courses")

        result = await db.execute(select(Company).where(Company.name == COMPANY_NAME))
        company = result.scalar_one_or_none()

        if company:
            print(f"Demo company already exists: {company.name}")
        else:
            company = Company(
                name=COMPANY_NAME,
                email="careers@vodacom.example",
                industry="Telecommunications",
                status=OrganisationStatus.ACTIVE,
            )
            db.add(company)
            await db.flush()

            db.add(
                Job(
                    company_id=company.id,
                    title="Graduate Network Engineer",
                    department="Technology",
                    required_subjects={"Mathematics": "B"},
                    min_gpa=3.0,
                )
            )
            print(f"Created company {company.name} with 1 job")

        await db.commit()

        print("\nAccess tokens (valid for 7 days):")
        print(
            "  Institution: "
            + _token("demo-institution", institution.email, "institution", institution.id)
        )
        print("  Company:     " + _token("demo-company", company.email, "company", company.id))

    await close_db()


if __name__ == "__main__":
    asyncio.run(seed_demo_catalog())
