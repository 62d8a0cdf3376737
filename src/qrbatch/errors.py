"""
Exception types raised by qrbatch.

Only InvalidInputError, GeneratorBusyError and OutputFolderError ever reach
the caller of BatchGenerator.generate. The per-record errors are caught by
the workers and reported through BatchResult instead.
"""

from typing import Optional


class QRBatchError(Exception):
    """Base class for every qrbatch error."""


# =============================================================================
# RUN-LEVEL ERRORS
# =============================================================================
class InvalidInputError(QRBatchError, ValueError):
    def __init__(self, field: str):
        super().__init__(f"{field} is empty")
        self.field = field


class GeneratorBusyError(QRBatchError, RuntimeError):
    def __init__(self, message: str = "a batch is already running on this generator"):
        super().__init__(message)


class OutputFolderError(QRBatchError, OSError):
    def __init__(self, folder: str, reason: Optional[BaseException] = None):
        msg = f"cannot create output folder {folder!r}"
        if reason is not None:
            msg += f": {reason}"
        super().__init__(msg)
        self.folder = folder


# =============================================================================
# PER-RECORD ERRORS
# =============================================================================
class MalformedRecordError(QRBatchError, ValueError):
    def __init__(self, line: str, reason: str, token_count: Optional[int] = None):
        super().__init__(f"malformed record {line!r}: {reason}")
        self.line = line
        self.reason = reason
        self.token_count = token_count


class EncodeError(QRBatchError):
    """The encoder could not turn a payload into an image file."""
