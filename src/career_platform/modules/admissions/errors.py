"""
Admissions Errors

Service-layer exceptions shared by application submission, offer selection
and waitlist promotion. Each carries the error code and HTTP status the
routers translate it to.
"""

from uuid import UUID


class AdmissionsError(Exception):
    """Base exception for admissions service errors."""

    def __init__(self, message: str, error_code: str, status_code: int = 400):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        super().__init__(message)


class NotEligibleError(AdmissionsError):
    """Raised when a student's grades do not meet a course's requirements."""

    def __init__(self, reasons: list[str]):
        self.reasons = reasons
        detail = "; ".join(reasons) if reasons else "Requirements not met"
        super().__init__(
            message=f"You do not meet the requirements for this course: {detail}",
            error_code="NOT_ELIGIBLE",
            status_code=422,
        )


class CapExceededError(AdmissionsError):
    """Raised when the student already has the maximum live applications at an institution."""

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(
            message=f"You can have at most {limit} active applications per institution.",
            error_code="CAP_EXCEEDED",
            status_code=409,
        )


class DuplicateApplicationError(AdmissionsError):
    """Raised when a live application for the same course already exists."""

    def __init__(self, course_id: UUID):
        super().__init__(
            message=f"You already have an active application for course {course_id}.",
            error_code="DUPLICATE_APPLICATION",
            status_code=409,
        )


class ApplicationNotFoundError(AdmissionsError):
    """Raised when an application is not found (or not visible to the caller)."""

    def __init__(self, application_id: UUID | None = None):
        message = (
            f"Application {application_id} not found" if application_id else "Application not found"
        )
        super().__init__(
            message=message,
            error_code="APPLICATION_NOT_FOUND",
            status_code=404,
        )


class CourseNotFoundError(AdmissionsError):
    """Raised when the target course does not exist or is closed."""

    def __init__(self, course_id: UUID):
        super().__init__(
            message=f"Course {course_id} not found or not accepting applications",
            error_code="COURSE_NOT_FOUND",
            status_code=404,
        )


class InvalidSelectionError(AdmissionsError):
    """Raised when the chosen application cannot be accepted or declined."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            error_code="INVALID_SELECTION",
            status_code=409,
        )


class InvalidDecisionError(AdmissionsError):
    """Raised when an institution decision is not allowed from the current status."""

    def __init__(self, current_status: str, decision: str):
        super().__init__(
            message=f"Cannot mark an application as {decision} while it is {current_status}",
            error_code="INVALID_STATUS_TRANSITION",
            status_code=409,
        )


class ForbiddenError(AdmissionsError):
    """Raised when the application belongs to another student."""

    def __init__(self, message: str = "You do not have access to this application"):
        super().__init__(
            message=message,
            error_code="FORBIDDEN",
            status_code=403,
        )


class ConcurrentModificationError(AdmissionsError):
    """Raised when another selection for the same student is still in progress."""

    def __init__(self):
        super().__init__(
            message="A selection is already in progress for this account. Please retry shortly.",
            error_code="CONCURRENT_MODIFICATION",
            status_code=409,
        )


class SelectionIncompleteError(AdmissionsError):
    """Raised when the selection transaction could not commit within the retry budget."""

    def __init__(self, application_id: UUID):
        super().__init__(
            message=f"Selection of application {application_id} could not be completed. "
            "No changes were saved; please retry.",
            error_code="SELECTION_INCOMPLETE",
            status_code=503,
        )


class PromotionIncompleteError(AdmissionsError):
    """Raised when waitlist promotion could not commit within the retry budget."""

    def __init__(self, course_id: UUID):
        super().__init__(
            message=f"Waitlist promotion for course {course_id} could not be completed.",
            error_code="PROMOTION_INCOMPLETE",
            status_code=503,
        )


class DataIntegrityViolationError(AdmissionsError):
    """Raised when stored data breaks the one-accepted-per-student rule."""

    def __init__(self, student_id: str, accepted_count: int):
        self.student_id = student_id
        self.accepted_count = accepted_count
        super().__init__(
            message="Your application records are in an inconsistent state. "
            "Support has been alerted.",
            error_code="DATA_INTEGRITY_VIOLATION",
            status_code=500,
        )
