"""
Job dispatcher: one job per input line, a fixed pool of worker threads,
one outcome per job.

Workers never share mutable state with each other. Each outcome travels
back to the calling thread through a result queue, and the calling thread
is the only one that reads it. The number of outcomes it waits for is the
number of jobs enqueued, fixed before the first worker starts.
"""

import enum
import logging
import os
import queue
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Sequence

logger = logging.getLogger(__name__)


# =============================================================================
# JOBS AND OUTCOMES
# =============================================================================
@dataclass(frozen=True)
class Job:
    index: int
    line: str


class JobStatus(str, enum.Enum):
    WRITTEN = "written"
    FAILED = "failed"
    BLANK = "blank"
    MALFORMED = "malformed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class JobOutcome:
    index: int
    status: JobStatus
    path: Optional[Path] = None
    size: int = 0
    error: Optional[str] = None


JobHandler = Callable[[Job], JobOutcome]


class CancelToken:
    """Set once to stop a batch; workers check it between jobs."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


# =============================================================================
# DISPATCHER
# =============================================================================
_STOP = object()


class JobDispatcher:
    def __init__(self, worker_count: Optional[int] = None):
        self.worker_count = max(1, worker_count or os.cpu_count() or 1)

    def run(self, lines: Sequence[str], handler: JobHandler,
            cancel: Optional[CancelToken] = None) -> List[JobOutcome]:
        """
        Process every line exactly once and block until all are done.

        Returns one JobOutcome per line, ordered by line index. Jobs left in
        the queue after `cancel` fires come back as CANCELLED.
        """
        total = len(lines)
        if total == 0:
            return []
        cancel = cancel or CancelToken()
        n_workers = min(self.worker_count, total)

        jobs: "queue.Queue" = queue.Queue()
        results: "queue.Queue[JobOutcome]" = queue.Queue()
        for i, line in enumerate(lines):
            jobs.put(Job(index=i, line=line))
        for _ in range(n_workers):
            jobs.put(_STOP)

        logger.debug(f"Dispatching {total} jobs to {n_workers} workers")
        workers = [
            threading.Thread(
                target=self._work,
                args=(jobs, results, handler, cancel),
                name=f"qrbatch-worker-{i}",
                daemon=True,
            )
            for i in range(1, n_workers + 1)
        ]
        outcomes: List[JobOutcome] = []
        try:
            for w in workers:
                w.start()
            for _ in range(total):
                outcomes.append(results.get())
        except BaseException:
            # Caller interrupted: drain the queue as cancelled before unwinding
            cancel.cancel()
            for w in workers:
                if w.ident is not None:
                    w.join()
            raise
        for w in workers:
            w.join()

        outcomes.sort(key=lambda o: o.index)
        return outcomes

    @staticmethod
    def _work(jobs: "queue.Queue", results: "queue.Queue[JobOutcome]",
              handler: JobHandler, cancel: CancelToken) -> None:
        while True:
            job = jobs.get()
            if job is _STOP:
                return
            if cancel.cancelled:
                results.put(JobOutcome(index=job.index, status=JobStatus.CANCELLED))
                continue
            try:
                outcome = handler(job)
            except Exception as e:
                logger.exception(f"Job {job.index} crashed: {e}")
                outcome = JobOutcome(index=job.index, status=JobStatus.FAILED, error=str(e))
            results.put(outcome)
