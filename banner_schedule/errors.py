from typing import Optional


class BannerScheduleError(Exception):
    """Base class for every error raised by the schedule client."""


class InvalidSemester(BannerScheduleError, ValueError):
    """Raised when a semester is not one of spring, summer, fall or winter."""

    def __init__(self, semester: object):
        self.semester = semester
        super().__init__(f"Unrecognized semester: {semester!r}")


class MalformedSubjectCode(BannerScheduleError, ValueError):
    """Raised when a combined code like "EECE 251" cannot be split into subject and number."""

    def __init__(self, subject_code: str):
        self.subject_code = subject_code
        super().__init__(
            f"Expected '<subject> <number>' or a separate course number, got {subject_code!r}"
        )


class TransportFailure(BannerScheduleError, RuntimeError):
    """Wraps a network or HTTP failure of the single outbound request.

    Args:
        message (str): Human readable description of what went wrong
        cause (Optional[Exception]): The underlying requests exception
    """

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(message)
        self.cause = cause
