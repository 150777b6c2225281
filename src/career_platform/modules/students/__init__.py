"""
Students Module

Student profiles: personal details, recorded grades and derived
profile eligibility.
"""

from .models import EligibilityStatus, Student

__all__ = ["EligibilityStatus", "Student"]
