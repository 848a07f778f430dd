# studydesk/errors.py


class AppError(Exception):
    """Base error carrying the HTTP status and the message shown to clients."""

    status_code = 500
    message = "Internal server error."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        if message:
            self.message = message


class ValidationError(AppError):
    status_code = 400
    message = "Invalid request."


class AuthError(AppError):
    status_code = 401
    message = "Not authorized."


class NotFoundError(AppError):
    status_code = 404
    message = "Not found."


class ConflictError(AppError):
    status_code = 409
    message = "Already exists."


class StorageError(AppError):
    # detail stays in the server log; clients only get the generic message
    status_code = 500
    message = "Internal server error."
