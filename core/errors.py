"""
Error taxonomy for the GenUI server.

Every error raised by the core derives from GenUiError and carries the HTTP
status the API layer should answer with. None of them are retried internally.
"""


class GenUiError(Exception):
    """Base class for all GenUI server errors."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class RequestValidationError(GenUiError):
    """A StartSession request was malformed; no session was created."""

    status_code = 422


class InvalidSessionError(GenUiError):
    """A GenerateUi request referenced an unknown or expired session."""

    status_code = 404

    def __init__(self, session_id: str):
        super().__init__("Invalid session ID")
        self.session_id = session_id


class StorageError(GenUiError):
    """The session store failed to read or write."""

    status_code = 503


class ModelError(GenUiError):
    """The streaming model provider failed."""

    status_code = 502


class TranslationError(GenUiError):
    """Input could not be represented for the model at all."""

    status_code = 400
