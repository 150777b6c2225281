"""
Catalog Module

Institutions, courses, companies and jobs, with per-student eligibility on
every listing.
"""

from .models import Company, Course, Institution, Job, ListingStatus, OrganisationStatus

__all__ = ["Company", "Course", "Institution", "Job", "ListingStatus", "OrganisationStatus"]
