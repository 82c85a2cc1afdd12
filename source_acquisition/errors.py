from typing import Optional


class SourceAcquisitionError(Exception):
    """Base class for failures while obtaining a request's source tree."""


class MissingSourceError(SourceAcquisitionError):
    """The request does not identify any usable source."""

    def __init__(self, message: str = "path or url is required.") -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(SourceAcquisitionError):
    """A local path given by the request does not exist or cannot be read."""


class CloneError(SourceAcquisitionError):
    def __init__(self, message: str, *, returncode: Optional[int] = None, stderr: str = "") -> None:
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class FetchError(SourceAcquisitionError):
    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ExtractionError(SourceAcquisitionError):
    pass
