"""
Careers Module

Student job applications gated by the same eligibility rules as courses.
"""

from .models import JobApplication, JobApplicationStatus

__all__ = ["JobApplication", "JobApplicationStatus"]
