class RegistrationError(Exception):
    """Base class for failures scoped to a single registration request."""

    code = "registration_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(RegistrationError):
    code = "not_found"


class PreconditionError(RegistrationError):
    """A business rule rejected the request: not published, deadline passed, no seats."""

    code = "precondition_failed"


class ConflictError(RegistrationError):
    """Storage reported a uniqueness violation for the (event, student) pair."""

    code = "conflict"


class StorageError(RegistrationError):
    """Connectivity or lock-wait failure from the database, chained to the driver error."""

    code = "storage_unavailable"
