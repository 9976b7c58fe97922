"""Client-facing service errors and their HTTP status codes."""

from typing import Any, Optional


class ServiceError(Exception):
    """Expected business outcome that is reported back to the client."""

    status_code = 400
    message = "Request could not be processed"

    def __init__(self, message: Optional[str] = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class NotFoundError(ServiceError):
    """The entity addressed by the request does not exist."""

    status_code = 404

    def __init__(self, entity: str, entity_id: Any) -> None:
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found")


class ReferenceNotFoundError(NotFoundError):
    """An id carried inside a write payload does not resolve."""

    status_code = 400


class ValidationError(ServiceError):
    status_code = 400


class PastTimeError(ValidationError):
    message = "Cannot book in the past"


class InvalidTransitionError(ValidationError):
    message = "Appointment is already cancelled"


class ConflictError(ServiceError):
    status_code = 409


class SlotTakenError(ConflictError):
    message = "This time slot is already booked"


class DuplicateClinicError(ConflictError):
    message = "Clinic already exists at that location."
