from __future__ import annotations


class ProcessingError(Exception):
    """Base class for failures while building or replaying a step chain."""


class CapabilityUnavailableError(ProcessingError):
    """The image transform library is not loaded yet (or failed to load)."""


class UnsupportedOperationError(ProcessingError):
    def __init__(self, operation: object) -> None:
        super().__init__(f"Unsupported operation: {operation}")
        self.operation = operation


class InvalidParameterError(ProcessingError):
    def __init__(self, operation: str, field: str, message: str) -> None:
        super().__init__(f"{operation}: invalid {field}: {message}")
        self.operation = operation
        self.field = field


class DecodeFailureError(ProcessingError):
    """The uploaded bytes are not a decodable image."""


class StepFailedError(ProcessingError):
    """A step aborted the replay; the original error is chained as ``__cause__``."""

    def __init__(self, index: int, operation: str, reason: str) -> None:
        super().__init__(f"Step {index + 1} ({operation}) failed: {reason}")
        self.index = index
        self.operation = operation


class SessionNotFoundError(LookupError):
    def __init__(self, session_id: str) -> None:
        super().__init__(f"Session not found: {session_id}")
        self.session_id = session_id
