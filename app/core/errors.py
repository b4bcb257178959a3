from typing import Any


class ClinicQueueError(Exception):
    """Base de los errores de dominio; el handler HTTP usa status_code y context."""

    status_code = 400

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context = context


class ValidationError(ClinicQueueError):
    status_code = 400

    def __init__(self, message: str, index: int | None = None, **context: Any):
        if index is not None:
            context["index"] = index
        super().__init__(message, **context)
        self.index = index


class NotFoundError(ClinicQueueError):
    status_code = 404


class SlotUnavailableError(ClinicQueueError):
    status_code = 409


class DuplicateShiftError(ClinicQueueError):
    status_code = 409


class ConflictError(ClinicQueueError):
    status_code = 409


class InvalidTransitionError(ConflictError):
    pass
