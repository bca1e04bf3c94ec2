"""
Rejections raised by the event and registration services.

Every expected rejection is a subclass of EventServiceError and carries the
HTTP status the routers translate it to.
"""


class EventServiceError(Exception):
    status_code = 400
    default_message = "Request rejected"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)


# ---------- creation-time ----------
class InvalidInputError(EventServiceError):
    default_message = "All fields are required"


class InvalidCapacityError(EventServiceError):
    default_message = "Capacity must be between 1 and 1000"


class PastDateError(EventServiceError):
    default_message = "Event date must be in the future"


# ---------- registration / cancellation-time ----------
class EventNotFoundError(EventServiceError):
    status_code = 404
    default_message = "Event not found"


class EventExpiredError(EventServiceError):
    default_message = "Cannot register for past events"


class AlreadyRegisteredError(EventServiceError):
    default_message = "User already registered for this event"


class EventFullError(EventServiceError):
    default_message = "Event is full"


class NotRegisteredError(EventServiceError):
    default_message = "User is not registered for this event"


# ---------- users ----------
class DuplicateIdentityError(EventServiceError):
    default_message = "Email already exists"


# ---------- storage ----------
class StorageFailureError(EventServiceError):
    status_code = 500
    default_message = "Storage failure"


class LockUnavailableError(StorageFailureError):
    status_code = 503
    default_message = "Could not acquire event lock, please try again."
