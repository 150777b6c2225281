"""
Admissions Module

Course applications, the offer selection workflow and waitlist promotion.
"""

from .models import AdmissionSource, Application, ApplicationStatus, DeclineReason

__all__ = ["AdmissionSource", "Application", "ApplicationStatus", "DeclineReason"]
