"""Error taxonomy for migration jobs.

Every error a stage can raise derives from ``MigrationError``. ``retryable``
tells the engine whether the fetch/convert attempt budget applies; anything
not retryable fails the job on first occurrence.
"""
from __future__ import annotations


class MigrationError(Exception):
    retryable = False


class InvalidTicketError(MigrationError):
    """Ticket title carries no usable source URL."""


class FetchError(MigrationError):
    retryable = True


class ExtractionError(MigrationError):
    """Fetched page has no main content subtree."""


class ConversionError(MigrationError):
    retryable = True


class ConversionQualityError(ConversionError):
    """Model output still holds too much raw structural markup."""

    def __init__(self, message: str, raw_tag_count: int):
        super().__init__(message)
        self.raw_tag_count = raw_tag_count


class SlugResolutionError(MigrationError):
    pass


class BuildVerificationError(MigrationError):
    def __init__(
        self,
        message: str,
        *,
        returncode: int | None = None,
        stdout: str = "",
        stderr: str = "",
        launch_error: str | None = None,
    ):
        super().__init__(message)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.launch_error = launch_error


class PublishError(MigrationError):
    pass
