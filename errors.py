"""Errors raised by the ordering services, each mapped to an HTTP status."""


class OrderingError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(OrderingError):
    """Malformed or missing input."""
    status_code = 400


class NotFoundError(OrderingError):
    """No record matches the given identifier."""
    status_code = 404


class StorageError(OrderingError):
    """The database failed underneath us."""
    status_code = 500
