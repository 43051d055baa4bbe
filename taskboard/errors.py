"""Service-layer error taxonomy.

Services raise these; the HTTP boundary maps ``status_code`` to the response
status and ``message`` to ``{"detail": ...}``.
"""


class ServiceError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    """Malformed or missing input."""
    status_code = 400


class AuthError(ServiceError):
    """Bad credentials or an invalid/expired token."""
    status_code = 401


class AuthorizationError(ServiceError):
    """Authenticated, but the role or ownership is insufficient."""
    status_code = 403


class NotFoundError(ServiceError):
    """Missing resource, or one outside the claimed parent scope."""
    status_code = 404


class ConflictError(ServiceError):
    """Uniqueness violation (duplicate email, duplicate membership)."""
    status_code = 409
