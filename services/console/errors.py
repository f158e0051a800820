"""
Error taxonomy for the tailoring workflow.

Every failure the console can surface is one of a small, closed set of
kinds. Adapters raise them, the orchestrator records and re-raises them,
and routes translate them into HTTP responses.
"""

from typing import Literal, Optional

ErrorKind = Literal[
    "configuration_missing",
    "missing_input",
    "upload_failed",
    "tailor_failed",
    "export_failed",
]
Stage = Literal["upload", "tailor", "export"]


class TailorConsoleError(Exception):
    """Base class for all workflow errors."""

    kind: ErrorKind
    default_message: str = "Error"
    stage: Optional[Stage] = None

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ConfigurationMissing(TailorConsoleError):
    """The tailoring service base address is not set."""
    kind = "configuration_missing"
    default_message = "Missing CONSOLE_BACKEND_URL in .env"


class MissingInput(TailorConsoleError):
    """A required local input (the resume document) was not provided."""
    kind = "missing_input"
    default_message = "Select a resume .docx first"


class StageFailed(TailorConsoleError):
    """
    A remote stage did not produce a usable response.

    Covers non-2xx statuses, transport errors and undecodable bodies alike.
    The status code and detail are kept for logging only.
    """

    def __init__(
        self,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
        detail: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


class UploadFailed(StageFailed):
    kind = "upload_failed"
    default_message = "Upload failed"
    stage = "upload"


class TailorFailed(StageFailed):
    kind = "tailor_failed"
    default_message = "Tailor failed"
    stage = "tailor"


class ExportFailed(StageFailed):
    kind = "export_failed"
    default_message = "Export failed"
    stage = "export"
