class WorkflowError(Exception):
    """Base class for failures the service reports to its callers."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(WorkflowError):
    status_code = 404


class PermissionDenied(WorkflowError):
    status_code = 403


class InvalidState(WorkflowError):
    status_code = 400


class ValidationError(WorkflowError):
    status_code = 400


class ConflictError(WorkflowError):
    status_code = 409


class StorageError(WorkflowError):
    status_code = 500
