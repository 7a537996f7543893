"""Uploaded files and request processing failures.

Multipart parsing itself happens outside this library; request adapters
hand over already parsed files and, when the upload limits were exceeded,
a RequestProcessingError that binding reports as a global message.
"""

from pydantic import BaseModel, ConfigDict


class UploadedFile(BaseModel):
    """A file submitted with the form."""

    model_config = ConfigDict(frozen=True)

    file_name: str
    content_type: str = "application/octet-stream"
    size: int = 0
    content: bytes = b""


class RequestProcessingError(BaseModel):
    """Failure detected while processing the request (not a bind failure)."""

    model_config = ConfigDict(frozen=True)

    message: str
    msg_template: str = "constraints.RequestProcessingError"


class MaxSizeExceededError(RequestProcessingError):
    """An upload size limit was exceeded."""

    max_size: int
    actual_size: int
    msg_template: str = "constraints.MaxSizeExceeded"


class MaxRequestSizeExceededError(MaxSizeExceededError):
    """The whole request is larger than allowed."""

    msg_template: str = "constraints.MaxRequestSizeExceeded"


class MaxFileSizeExceededError(MaxSizeExceededError):
    """A single uploaded file is larger than allowed."""

    field_name: str | None = None
    msg_template: str = "constraints.MaxFileSizeExceeded"
