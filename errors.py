from enum import Enum


class ErrorKind(Enum):
    UNSUPPORTED_TYPE = "unsupported_type"
    TOO_LARGE = "too_large"
    READ_FAILURE = "read_failure"
    DEVICE_UNAVAILABLE = "device_unavailable"
    CAPTURE_FAILURE = "capture_failure"
    REMOTE_CALL_FAILURE = "remote_call_failure"


class TutorError(Exception):
    """A recoverable failure with a message fit to show the student."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __repr__(self) -> str:
        return f"TutorError({self.kind.name}, {self.message!r})"
