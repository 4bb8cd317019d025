"""Error taxonomy shared by the lifecycle engine, services, and API.

Each error carries the HTTP status the API answers with; the engine itself
never imports FastAPI.
"""


class FestError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(FestError):
    """Missing or malformed fields. The caller can correct and resubmit."""

    status_code = 422


class AuthorizationError(FestError):
    """The actor's role does not allow the requested transition."""

    status_code = 403


class NotFoundError(FestError):
    status_code = 404


class ConflictError(FestError):
    """Duplicate star or concurrent mutation. Refetch and retry."""

    status_code = 409


class InvalidStateError(FestError):
    """Transition not valid from the entity's current state."""

    status_code = 409


class UploadError(FestError):
    """The object store refused or failed the upload. Not retried."""

    status_code = 502
