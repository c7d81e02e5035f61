from __future__ import annotations


class SantaError(RuntimeError):
    """Base for every error the service turns into an HTTP response."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(SantaError):
    status_code = 400


class StateError(SantaError):
    """Operation not permitted in the current event state. Nothing was changed."""

    status_code = 409


class AuthError(SantaError):
    status_code = 401

    def __init__(self, message: str = "Invalid admin password."):
        super().__init__(message)


class PersistenceError(SantaError):
    """The durable write failed; the in-memory state was left at its last committed version."""

    status_code = 500


class StartupError(SantaError):
    """Config or store could not be read on boot. The process must not serve traffic."""
