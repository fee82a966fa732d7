"""
Error taxonomy shared by services and routes.

Services raise these; the app factory turns any ApiError into a
``{"message": ...}`` JSON body with the matching status code.
"""


class ApiError(Exception):
    status_code = 500
    default_message = "Server error"

    def __init__(self, message=None, status_code=None, error=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        self.error = error

    def to_dict(self, include_detail=False):
        body = {"message": self.message}
        if include_detail and self.error:
            body["error"] = self.error
        return body


class ValidationError(ApiError):
    status_code = 400
    default_message = "Invalid request"


class AuthError(ApiError):
    status_code = 401
    default_message = "Authentication required"


class MissingTokenError(AuthError):
    status_code = 401
    default_message = "Access token required"


class InvalidTokenError(AuthError):
    status_code = 403
    default_message = "Invalid token"


class InvalidCredentialsError(AuthError):
    status_code = 401
    default_message = "Invalid credentials"


class NotFoundError(ApiError):
    status_code = 404
    default_message = "Not found"


class ForbiddenError(ApiError):
    status_code = 403
    default_message = "Access denied"


class ConflictError(ApiError):
    status_code = 400
    default_message = "Conflict"


class StorageError(ApiError):
    status_code = 500
    default_message = "Failed to save data"
