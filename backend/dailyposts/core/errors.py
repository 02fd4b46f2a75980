"""Error hierarchy shared by the data-access, sandbox and session layers.

Every core function raises one of these instead of logging and carrying on.
Only the HTTP error handlers decide the status code and what gets logged.
"""


class DailyPostsError(Exception):
    """Base exception for all application errors."""

    code = "INTERNAL_ERROR"
    http_status = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_response(self) -> dict:
        return {"error": {"code": self.code, "message": self.public_message}}

    @property
    def public_message(self) -> str:
        """Message safe to show to the client."""
        return self.message


class ValidationError(DailyPostsError):
    """Missing or malformed query/body field."""

    code = "VALIDATION_ERROR"
    http_status = 400


class AuthError(DailyPostsError):
    """Missing, malformed, forged or expired session token."""

    code = "AUTH_ERROR"
    http_status = 401

    @property
    def public_message(self) -> str:
        return "Not authenticated"


class InvalidTokenError(AuthError):
    code = "TOKEN_INVALID"


class ExpiredTokenError(AuthError):
    code = "TOKEN_EXPIRED"


class WrongAlgorithmError(AuthError):
    code = "TOKEN_WRONG_ALGORITHM"


class AuthzError(DailyPostsError):
    """Authenticated, but not allowed to do this."""

    code = "FORBIDDEN"
    http_status = 403


class PathEscapeError(DailyPostsError):
    """A requested path resolves outside of the storage root."""

    code = "PATH_ESCAPE"
    http_status = 403

    @property
    def public_message(self) -> str:
        return "Path is outside of the storage root"


class NotFoundError(DailyPostsError):
    """Zero rows (or the wrong number of rows) where exactly one was required."""

    code = "NOT_FOUND"
    http_status = 404


class ConflictError(DailyPostsError):
    code = "CONFLICT"
    http_status = 409


class DataAccessError(DailyPostsError):
    """The database driver failed. Carries the original exception."""

    code = "DATA_ACCESS_ERROR"
    http_status = 500

    def __init__(self, message: str, original: BaseException | None = None):
        super().__init__(message)
        self.original = original

    @property
    def public_message(self) -> str:
        return "Database operation failed"


class RecordDefinitionError(TypeError):
    """A record type cannot be mapped onto columns."""
