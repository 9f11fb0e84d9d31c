"""
Error taxonomy shared by services and API handlers
"""


class EduTrackError(Exception):
    """Base class for failures reported back to the caller"""

    error_code = "edutrack_error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(EduTrackError):
    """Referenced progress, quiz or attempt record does not exist"""

    error_code = "not_found"
    status_code = 404


class PreconditionViolation(EduTrackError):
    """Operation is not allowed in the record's current state"""

    error_code = "precondition_violation"
    status_code = 409


class PermissionDenied(EduTrackError):
    error_code = "permission_denied"
    status_code = 403


class StorageError(EduTrackError):
    """The database call itself failed"""

    error_code = "storage_error"
    status_code = 503
