"""Batch executors running naming jobs off the request path."""

from abc import ABC, abstractmethod
from collections import deque
from collections.abc import Callable

Job = Callable[[], None]


class BatchExecutor(ABC):
    @abstractmethod
    def submit(self, job: Job) -> None:
        pass


class InlineBatchExecutor(BatchExecutor):
    """Runs each job as soon as it is submitted."""

    def submit(self, job: Job) -> None:
        job()


class DeferredBatchExecutor(BatchExecutor):
    """Queues jobs until ``drain()`` is called.

    Jobs submitted while draining run in the same drain.
    """

    def __init__(self) -> None:
        self._queue: deque[Job] = deque()

    def submit(self, job: Job) -> None:
        self._queue.append(job)

    @property
    def pending(self) -> int:
        return len(self._queue)

    def drain(self) -> int:
        ran = 0
        while self._queue:
            job = self._queue.popleft()
            job()
            ran += 1
        return ran
