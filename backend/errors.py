class TimelineError(Exception):
    """Base class for errors raised while building or storing the timeline."""

    status_code = 500
    error_name = "InternalServerError"
    public_message = "An unexpected error occurred"


class EventValidationError(TimelineError):
    status_code = 400
    error_name = "ValidationError"
    public_message = "Provide both date and event."


class ExternalServiceError(TimelineError):
    """Upload or analysis call failed, or returned data that could not be used."""

    status_code = 502
    error_name = "BadGateway"
    public_message = "External service failed"


class PersistenceError(TimelineError):
    status_code = 500
    error_name = "PersistenceError"
    public_message = "Could not save the timeline. Please try again."


class LoadError(TimelineError):
    public_message = "Could not load the timeline"
