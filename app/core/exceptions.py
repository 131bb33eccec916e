from app.constants.error_codes import ErrorCode


class AppException(Exception):
    """Typed business error. The HTTP layer maps ``error_code`` to a status."""

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        details: dict | None = None,
    ):
        super().__init__(message)
        self.error_code = error_code
        self.message = message
        self.details = details

    def __repr__(self):
        return f"<AppException {self.error_code.value}: {self.message}>"
