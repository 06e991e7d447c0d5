"""Domain errors raised by the service layer.

Routers never translate these by hand; ``main.create_app`` registers one
exception handler that renders ``{"detail": code, "message": message}`` with
the class' HTTP status.
"""

from fastapi import status


class StudentNestError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "error"

    def __init__(self, message: str | None = None):
        self.message = message or self.code
        super().__init__(self.message)


class ValidationError(StudentNestError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "invalid_input"


class IllegalTransition(ValidationError):
    status_code = status.HTTP_409_CONFLICT
    code = "illegal_transition"

    def __init__(self, entity: str, current: str, target: str):
        self.entity = entity
        self.current = current
        self.target = target
        super().__init__(f"{entity} cannot move from {current} to {target}")


class NotFound(StudentNestError):
    """Missing row, or a row that belongs to someone else."""

    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"

    def __init__(self, entity: str = "Resource"):
        self.entity = entity
        super().__init__(f"{entity} not found")


class DatastoreError(StudentNestError):
    code = "datastore_error"

    def __init__(self, message: str | None = None):
        # Driver text stays in the logs.
        super().__init__(message or "Temporary failure, please try again")
