"""
Exit Request Errors

Every error carries a machine-readable code and the HTTP status the router
responds with.
"""


class ExitRequestServiceError(Exception):
    """Base exception for exit request service errors."""

    def __init__(self, message: str, error_code: str, status_code: int = 400):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        super().__init__(message)


class ValidationError(ExitRequestServiceError):
    """Raised when input is malformed."""

    def __init__(self, message: str, error_code: str = "VALIDATION_ERROR"):
        super().__init__(message=message, error_code=error_code, status_code=400)


class UnrecognizedDepartmentError(ValidationError):
    """Raised when a teacher's department is neither College nor Highschool."""

    def __init__(self, department: str):
        self.department = department
        super().__init__(
            message="Invalid teacher department",
            error_code="INVALID_TEACHER_DEPARTMENT",
        )


class StudentNotFoundError(ExitRequestServiceError):
    """
    Raised when a student ID does not resolve to an account.

    Submitting for an unknown student is a bad request (400); looking one up
    is a plain 404.
    """

    def __init__(self, student_id: str, status_code: int = 404):
        self.student_id = student_id
        super().__init__(
            message="Student not found",
            error_code="STUDENT_NOT_FOUND",
            status_code=status_code,
        )


class TeacherNotFoundError(ExitRequestServiceError):
    """Raised when a teacher ID does not resolve to an account."""

    def __init__(self, teacher_id: str):
        self.teacher_id = teacher_id
        super().__init__(
            message="Teacher not found",
            error_code="TEACHER_NOT_FOUND",
            status_code=404,
        )


class ExitRequestNotFoundError(ExitRequestServiceError):
    """Raised when an exit request is not found."""

    def __init__(self, request_id: str | None = None):
        message = f"Exit request {request_id} not found" if request_id else "Exit request not found"
        super().__init__(
            message=message,
            error_code="EXIT_REQUEST_NOT_FOUND",
            status_code=404,
        )


class RequestFinalizedError(ExitRequestServiceError):
    """Raised when a decision targets a fully approved or declined request."""

    def __init__(self, request_id: str, status: str):
        self.request_id = request_id
        self.status = status
        super().__init__(
            message=f"Exit request is already {status} and can no longer be changed",
            error_code="REQUEST_FINALIZED",
            status_code=409,
        )


class InvalidStatusTransitionError(ExitRequestServiceError):
    """Raised when a computed status change is not in the transition table."""

    def __init__(self, current: str, new: str):
        super().__init__(
            message=f"Cannot transition exit request from '{current}' to '{new}'",
            error_code="INVALID_STATUS_TRANSITION",
            status_code=409,
        )


class IntegrityViolationError(ExitRequestServiceError):
    """
    Raised when a filtered view contains a record the viewer may not see.

    The whole response is withheld; no partial data is returned.
    """

    def __init__(self, message: str = "Data integrity error: unauthorized records detected"):
        super().__init__(
            message=message,
            error_code="INTEGRITY_VIOLATION",
            status_code=500,
        )
