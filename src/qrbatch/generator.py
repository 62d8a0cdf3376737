"""
BatchGenerator - the single entry point for turning a record list into
QR image files.

    gen = BatchGenerator()
    result = gen.generate("alice 123\nbob 456\ncarol", "out", ".png")
    print(result.summary)
    if result.failed_paths:
        ...

`generate` blocks until every line has been handled. One generator runs
one batch at a time; what a second concurrent call does depends on
`Settings.busy_policy` ("block" waits, "reject" raises GeneratorBusyError).
"""

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, List, Optional, Sequence

from .config import Settings, get_settings
from .dispatcher import CancelToken, Job, JobDispatcher, JobOutcome, JobStatus
from .engine import QREngine, QRStyle
from .errors import GeneratorBusyError, InvalidInputError, MalformedRecordError, OutputFolderError
from .records import build_output_path, is_blank, parse_record, split_lines
from .writer import Encoder, FileWriter

logger = logging.getLogger(__name__)


# =============================================================================
# REQUEST / RESULT
# =============================================================================
@dataclass(frozen=True)
class BatchRequest:
    record_list: str
    output_folder: str
    file_extension: str

    def validate(self) -> None:
        for name in ("record_list", "output_folder", "file_extension"):
            if not getattr(self, name):
                raise InvalidInputError(name)


@dataclass
class BatchResult:
    summary: str
    output_folder: Path
    total_lines: int = 0
    written: List[Path] = field(default_factory=list)
    failed_paths: List[Path] = field(default_factory=list)
    malformed: List[str] = field(default_factory=list)
    cancelled: int = 0
    crashed: int = 0

    @property
    def attempted(self) -> int:
        return len(self.written) + len(self.failed_paths)

    @property
    def ok(self) -> bool:
        return not (self.failed_paths or self.malformed or self.cancelled or self.crashed)

    def __str__(self) -> str:
        return self.summary


def summary_message(folder) -> str:
    return f"Done. Open the folder '{folder}' and check the file count and contents."


def find_duplicate_names(lines: Sequence[str]) -> FrozenSet[int]:
    """Indices of well-formed lines whose name was already taken by an earlier line."""
    seen = set()
    duplicates = set()
    for i, line in enumerate(lines):
        if is_blank(line):
            continue
        try:
            name = parse_record(line).name
        except MalformedRecordError:
            continue
        if name in seen:
            duplicates.add(i)
        else:
            seen.add(name)
    return frozenset(duplicates)


# =============================================================================
# GENERATOR
# =============================================================================
class BatchGenerator:
    """Batch QR generation facade. Safe to call from any thread."""

    def __init__(self, settings: Optional[Settings] = None, encoder: Optional[Encoder] = None):
        self.settings = settings or get_settings()
        self.encoder = encoder or QREngine(QRStyle.from_settings(self.settings))
        self._run_lock = threading.Lock()

        # per-run state, only touched while _run_lock is held
        self.record_list = ""
        self.output_folder = ""
        self.file_extension = ""
        self._cancel: Optional[CancelToken] = None

    @property
    def busy(self) -> bool:
        return self._run_lock.locked()

    def stop(self) -> None:
        """Cancel the batch in flight. Jobs not yet started are reported as cancelled."""
        cancel = self._cancel
        if cancel is not None:
            cancel.cancel()

    def generate(self, record_list: str, output_folder: str, file_extension: str,
                 cancel: Optional[CancelToken] = None) -> BatchResult:
        request = BatchRequest(record_list, str(output_folder or ""), file_extension)
        self._acquire()
        try:
            request.validate()
            self.record_list = request.record_list
            self.output_folder = request.output_folder
            self.file_extension = request.file_extension
            self._cancel = cancel or CancelToken()
            return self._process()
        finally:
            self.record_list = ""
            self.output_folder = ""
            self.file_extension = ""
            self._cancel = None
            self._run_lock.release()

    def _acquire(self) -> None:
        if self.settings.busy_policy == "reject":
            if not self._run_lock.acquire(blocking=False):
                raise GeneratorBusyError()
        else:
            self._run_lock.acquire()

    # -------------------------------------------------------------------------
    # run
    # -------------------------------------------------------------------------
    def _process(self) -> BatchResult:
        logger.info("--------------- start work ---------------")
        folder = Path(self.output_folder)
        try:
            folder.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            if self.settings.strict_output_folder:
                raise OutputFolderError(self.output_folder, e) from e
            logger.warning(f"Could not create output folder {folder}: {e}")

        lines = split_lines(self.record_list)
        writer = FileWriter(
            self.encoder,
            error_correction=self.settings.error_correction,
            pixel_size=self.settings.pixel_size,
        )
        folder_name, extension = self.output_folder, self.file_extension
        duplicates = find_duplicate_names(lines)

        def handle(job: Job) -> JobOutcome:
            if is_blank(job.line):
                return JobOutcome(index=job.index, status=JobStatus.BLANK)
            try:
                record = parse_record(job.line)
            except MalformedRecordError as e:
                logger.warning(f"line {job.index + 1}: {e}")
                return JobOutcome(index=job.index, status=JobStatus.MALFORMED, error=str(e))
            if job.index in duplicates:
                logger.warning(f"line {job.index + 1}: name {record.name!r} already used by an earlier line")
                return JobOutcome(index=job.index, status=JobStatus.MALFORMED,
                                  error=f"duplicate name {record.name!r}")
            destination = build_output_path(folder_name, record.name, extension)
            return writer.write(record, destination, index=job.index)

        dispatcher = JobDispatcher(self.settings.resolved_worker_count())
        outcomes = dispatcher.run(lines, handle, cancel=self._cancel)

        result = BatchResult(summary=summary_message(self.output_folder),
                             output_folder=folder, total_lines=len(lines))
        for o in outcomes:
            if o.status is JobStatus.WRITTEN:
                result.written.append(o.path)
            elif o.status is JobStatus.FAILED and o.path is not None:
                result.failed_paths.append(o.path)
            elif o.status is JobStatus.FAILED:
                result.crashed += 1
            elif o.status is JobStatus.MALFORMED:
                result.malformed.append(lines[o.index])
            elif o.status is JobStatus.CANCELLED:
                result.cancelled += 1

        if result.failed_paths:
            logger.error(f"error gen qr code failure list : {[str(p) for p in result.failed_paths]}")
        if result.crashed:
            logger.error(f"{result.crashed} jobs crashed before reaching the encoder")
        if result.cancelled:
            logger.warning(f"Batch cancelled, {result.cancelled} jobs not run")
        logger.info(f"{len(result.written)} written, {len(result.failed_paths)} failed, "
                    f"{len(result.malformed)} malformed")
        logger.info("--------------- finish work ---------------")
        return result
