from fastapi import APIRouter

from career_platform.modules.admissions.institution_router import (
    router as institution_admissions_router,
)
from career_platform.modules.admissions.router import router as applications_router
from career_platform.modules.careers.router import company_router as company_careers_router
from career_platform.modules.careers.router import router as job_applications_router
from career_platform.modules.catalog.router import (
    company_router as company_catalog_router,
)
from career_platform.modules.catalog.router import (
    institution_router as institution_catalog_router,
)
from career_platform.modules.catalog.router import router as catalog_router
from career_platform.modules.notifications.router import router as notifications_router
from career_platform.modules.students.router import router as students_router

api_router = APIRouter()

api_router.include_router(students_router, prefix="/students", tags=["Students"])

api_router.include_router(catalog_router, tags=["Catalog"])

api_router.include_router(applications_router, prefix="/applications", tags=["Applications"])

api_router.include_router(
    institution_catalog_router,
    prefix="/institutions/me",
    tags=["Institution - Courses"],
)

api_router.include_router(
    institution_admissions_router,
    prefix="/institutions/me",
    tags=["Institution - Admissions"],
)

api_router.include_router(
    job_applications_router, prefix="/job-applications", tags=["Job Applications"]
)

api_router.include_router(company_catalog_router, prefix="/companies/me", tags=["Company - Jobs"])

api_router.include_router(
    company_careers_router,
    prefix="/companies/me",
    tags=["Company - Job Applications"],
)

api_router.include_router(notifications_router, prefix="/notifications", tags=["Notifications"])
