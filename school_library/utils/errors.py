class LibraryError(ValueError):
    """Base for every failure a library operation reports to the caller."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(LibraryError):
    status_code = 400


class NotFoundError(LibraryError):
    status_code = 404


class ConflictError(LibraryError):
    status_code = 409


class BusinessRuleError(LibraryError):
    status_code = 400


class PermissionDeniedError(LibraryError):
    status_code = 403
