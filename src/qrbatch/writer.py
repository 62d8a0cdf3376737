"""
Writes one record's QR image and checks the file that landed on disk.
"""

import logging
import os
from pathlib import Path
from typing import Callable, Union

from .dispatcher import JobOutcome, JobStatus
from .records import Record

logger = logging.getLogger(__name__)

# encoder(payload, error_correction, pixel_size, destination); raises on failure
Encoder = Callable[[str, str, int, Union[str, os.PathLike]], None]


class FileWriter:
    def __init__(self, encoder: Encoder, error_correction: str = "M", pixel_size: int = 256):
        self.encoder = encoder
        self.error_correction = error_correction
        self.pixel_size = pixel_size

    def write(self, record: Record, destination: Path, index: int = 0) -> JobOutcome:
        """Encode `record` into `destination`. Failures are returned, never raised."""
        try:
            self.encoder(record.payload, self.error_correction, self.pixel_size, destination)
        except Exception as e:
            logger.error(f"gen QR code failure {destination}: {e}")
            return JobOutcome(index=index, status=JobStatus.FAILED, path=destination, error=str(e))

        try:
            size = destination.stat().st_size
        except OSError as e:
            logger.error(f"get file size failure {destination}: {e}")
            return JobOutcome(index=index, status=JobStatus.FAILED, path=destination, error=str(e))

        if size <= 0:
            logger.error(f"empty file {destination}")
            return JobOutcome(index=index, status=JobStatus.FAILED, path=destination,
                              error="file is empty")
        if not os.access(destination, os.R_OK):
            logger.error(f"unreadable file {destination}")
            return JobOutcome(index=index, status=JobStatus.FAILED, path=destination,
                              error="file is not readable")

        logger.info(f"file: {destination}, file size: {size}")
        return JobOutcome(index=index, status=JobStatus.WRITTEN, path=destination, size=size)
