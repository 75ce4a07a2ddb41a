from fastapi import status


class ServiceError(Exception):
    """Base exception for service layer errors."""

    code = "error"

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class StoreUnavailableError(ServiceError):
    """The timetable store could not be reached. Callers should show an offline state."""

    code = "offline"

    def __init__(self, message: str = "Timetable store is unreachable; the change was not saved") -> None:
        super().__init__(message, status.HTTP_503_SERVICE_UNAVAILABLE)


class ValidationFailedError(ServiceError):
    """Malformed input, rejected before any store I/O."""

    code = "validation"

    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_422_UNPROCESSABLE_ENTITY)


class StorePreconditionError(ServiceError):
    """The store cannot run a query as shaped. This is a deployment defect, not a transient failure."""

    code = "precondition"

    def __init__(self, message: str) -> None:
        super().__init__(
            f"{message}. An administrator must create the missing table or index; retrying will not help.",
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        )


class NotFoundError(ServiceError):
    code = "not_found"

    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_404_NOT_FOUND)
