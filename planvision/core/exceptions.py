"""
Custom exceptions for the application
"""


class AppException(Exception):
    """Base application exception"""
    pass


class NotFoundError(AppException):
    """Raised when a resource is not found"""
    pass


class PersistenceError(AppException):
    """Raised when a datastore write fails"""
    pass


class InvalidJobTransitionError(AppException):
    """Raised when a generation job status change is not allowed"""

    def __init__(self, job_id: str, current: str, requested: str):
        super().__init__(f"Generation job {job_id} cannot move from {current} to {requested}")
        self.job_id = job_id
        self.current = current
        self.requested = requested


class ReferenceFetchError(AppException):
    """Raised when the reference image cannot be downloaded"""

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code
