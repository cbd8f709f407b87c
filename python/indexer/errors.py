"""Projection error definitions.

All projector errors are defined here together with the reaction the host
block pipeline is expected to take for each of them.
"""

from enum import Enum


class ProjectionErrorCode(str, Enum):
    """Standardized error codes for the projector.

    Format: E_CATEGORY_NAME
    """

    # Event decoding errors
    E_EVENT_TYPE_MISMATCH = "E_EVENT_TYPE_MISMATCH"
    E_EVENT_MALFORMED = "E_EVENT_MALFORMED"

    # Store contract errors
    E_NOT_FOUND = "E_NOT_FOUND"
    E_ALREADY_EXISTS = "E_ALREADY_EXISTS"
    E_OUT_OF_ORDER = "E_OUT_OF_ORDER"
    E_INVALID_PATCH = "E_INVALID_PATCH"


class Disposition(str, Enum):
    """What the host pipeline should do with an event that failed to project.

    skip: the event's effect is already in the store (replay); continue
    abort: stop processing the block and surface the failure
    """

    SKIP = "skip"
    ABORT = "abort"


# Error code to pipeline disposition mapping
ERROR_CODE_TO_DISPOSITION: dict[ProjectionErrorCode, Disposition] = {
    ProjectionErrorCode.E_EVENT_TYPE_MISMATCH: Disposition.ABORT,
    ProjectionErrorCode.E_EVENT_MALFORMED: Disposition.ABORT,
    ProjectionErrorCode.E_NOT_FOUND: Disposition.ABORT,
    ProjectionErrorCode.E_ALREADY_EXISTS: Disposition.SKIP,
    ProjectionErrorCode.E_OUT_OF_ORDER: Disposition.SKIP,
    ProjectionErrorCode.E_INVALID_PATCH: Disposition.ABORT,
}


class ProjectionError(Exception):
    """Base exception for projection errors.

    Attributes:
        code: The error code enum value
        message: Human-readable error message
        disposition: Recommended pipeline reaction (derived from code)
    """

    def __init__(self, code: ProjectionErrorCode, message: str):
        self.code = code
        self.message = message
        self.disposition = ERROR_CODE_TO_DISPOSITION.get(code, Disposition.ABORT)
        super().__init__(message)


class NotFoundError(ProjectionError):
    """No entity exists for the given key."""

    def __init__(self, message: str = "Not found"):
        super().__init__(ProjectionErrorCode.E_NOT_FOUND, message)


class AlreadyExistsError(ProjectionError):
    """An entity already exists for the key being created."""

    def __init__(self, message: str = "Already exists"):
        super().__init__(ProjectionErrorCode.E_ALREADY_EXISTS, message)


class OutOfOrderError(ProjectionError):
    """A merge is older than the stored record's last update height."""

    def __init__(self, message: str = "Event is older than stored state"):
        super().__init__(ProjectionErrorCode.E_OUT_OF_ORDER, message)


class InvalidPatchError(ProjectionError):
    """A patch does not describe any change."""

    def __init__(self, message: str = "Patch has no fields set"):
        super().__init__(ProjectionErrorCode.E_INVALID_PATCH, message)


class EventTypeMismatchError(ProjectionError):
    """Decoded event payload does not match its declared type tag.

    Attributes:
        event_type: The declared type tag
        payload_type: Name of the payload class actually received
    """

    def __init__(self, event_type: str, payload_type: str):
        self.event_type = event_type
        self.payload_type = payload_type
        super().__init__(
            ProjectionErrorCode.E_EVENT_TYPE_MISMATCH,
            f"{event_type} event assert error: got {payload_type}",
        )


class MalformedEventError(ProjectionError):
    """Raw event attributes could not be validated into a typed payload."""

    def __init__(self, event_type: str, message: str):
        self.event_type = event_type
        super().__init__(ProjectionErrorCode.E_EVENT_MALFORMED, f"{event_type}: {message}")
