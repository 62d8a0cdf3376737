"""
qrbatch - batch QR code generator.

Turns a list of "name payload" lines into one QR image file per line,
using a pool of worker threads.
"""

from .config import Settings, get_settings
from .dispatcher import CancelToken, Job, JobDispatcher, JobOutcome, JobStatus
from .engine import QREngine, QRStyle
from .errors import (
    EncodeError,
    GeneratorBusyError,
    InvalidInputError,
    MalformedRecordError,
    OutputFolderError,
    QRBatchError,
)
from .generator import BatchGenerator, BatchRequest, BatchResult
from .records import Record, build_output_path, parse_record, split_lines
from .writer import FileWriter

__version__ = "0.1.0"
