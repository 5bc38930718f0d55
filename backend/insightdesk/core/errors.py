"""Error taxonomy shared by services and the HTTP layer.

Every error carries a short ``error`` code and a user-safe ``message``; the
FastAPI handler in ``main.py`` renders them as ``{"error", "message"}``.
"""

from __future__ import annotations


class AppError(Exception):
    status_code: int = 500
    error: str = "internal_error"

    def __init__(self, message: str, *, error: str | None = None):
        super().__init__(message)
        self.message = message
        if error:
            self.error = error

    def to_payload(self) -> dict:
        return {"error": self.error, "message": self.message}


class StorageError(AppError):
    status_code = 500
    error = "storage_error"


class ExternalServiceError(AppError):
    status_code = 502
    error = "external_service_error"


class ValidationError(AppError):
    status_code = 400
    error = "validation_error"
