"""
Application error taxonomy.

Every error carries an HTTP status, a machine readable code and a message that
is safe to show to the caller. The handlers in ``wander.main`` render them as
``{"error": message, "code": code}``.
"""

from typing import Optional


class WanderError(Exception):
    """Base class for errors surfaced to API callers"""

    status_code: int = 500
    code: str = "internal_error"
    message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.message
        super().__init__(self.message)


class UnauthenticatedError(WanderError):
    status_code = 401
    code = "unauthenticated"
    message = "Unauthorized"


class ForbiddenError(WanderError):
    status_code = 403
    code = "forbidden"
    message = "Forbidden"


class NotFoundError(WanderError):
    status_code = 404
    code = "not_found"
    message = "Not found"


class GoneError(WanderError):
    status_code = 410
    code = "gone"
    message = "Resource has expired"


# ===== INPUT VALIDATION =====

class InputValidationError(WanderError):
    status_code = 400
    code = "invalid_request"
    message = "Invalid request"


class InvalidPayloadError(InputValidationError):
    code = "invalid_payload"
    message = "Invalid request body. Expected a JSON object."


class InvalidTitleError(InputValidationError):
    code = "invalid_title"
    message = "Title is required"


class NoPinsError(InputValidationError):
    code = "no_pins"
    message = "At least one pin is required"


class InvalidCoordinatesError(InputValidationError):
    code = "invalid_coordinates"
    message = "Invalid pin coordinates"


class InvalidPinTitleError(InputValidationError):
    code = "invalid_pin_title"
    message = "All pins must have a title"


class InvalidPinFieldError(InputValidationError):
    code = "invalid_pin_field"
    message = "Invalid pin field"


class NoGeocodedLocationsError(InputValidationError):
    code = "no_geocoded_locations"
    message = "Could not find coordinates for any locations. Please be more specific with location names."


# ===== BACKEND FAILURES =====

class PersistenceError(WanderError):
    """Datastore read/write failure; message never includes driver details"""
    status_code = 500
    code = "persistence_error"
    message = "Failed to save data"


class ParseError(WanderError):
    status_code = 502
    code = "parse_error"
    message = "Failed to parse AI response. Please try rephrasing your request."


class UpstreamServiceError(WanderError):
    status_code = 502
    code = "upstream_error"
    message = "An upstream service failed. Please try again."


class ServiceNotConfiguredError(UpstreamServiceError):
    status_code = 503
    code = "service_not_configured"
    message = "Service is not configured"
