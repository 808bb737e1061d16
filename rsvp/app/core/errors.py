"""Domain errors.

Every failure is reduced to a human-readable message. The HTTP layer maps
`status_code` straight onto the response; there is no retry anywhere.
"""
# app/core/errors.py
from rsvp.app.core.config import settings


class RsvpError(Exception):
    status_code = 400

    def __init__(self, message: str | None = None):
        self.message = message or settings.DEFAULT_ERROR_MESSAGE
        super().__init__(self.message)


class StoreError(RsvpError):
    status_code = 503


class NotFoundError(RsvpError):
    status_code = 404


class ValidationFailed(RsvpError):
    status_code = 400

    def __init__(self, message: str | None = None, errors: dict[str, str] | None = None):
        self.errors = errors or {}
        if message is None and self.errors:
            message = next(iter(self.errors.values()))
        super().__init__(message)


class QuestionValidationError(ValidationFailed):
    pass


class EventHasResponses(RsvpError):
    status_code = 409


class ConflictError(RsvpError):
    status_code = 409


class SubmissionFailed(RsvpError):
    status_code = 503


class AnswerPersistenceFailed(RsvpError):
    status_code = 503


class CompensationFailed(RsvpError):
    status_code = 500


class AuthenticationFailed(RsvpError):
    status_code = 401


class PermissionDenied(RsvpError):
    status_code = 403
