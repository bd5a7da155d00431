"""Asynchronous and bulk recomputation of household names.

Each job runs in its own execution context inside its own checkpoint, so a
failing chunk rolls back alone and never leaves the re-trigger guard set.
Failures are reported and swallowed; the caller that queued the job is not
affected.
"""

from __future__ import annotations

import contextlib
from collections.abc import Callable, Iterable, Iterator
from contextlib import AbstractContextManager
from dataclasses import dataclass
from functools import partial
from uuid import UUID

from household_names.domain.households import Member
from household_names.logging_config import LogContext, get_logger
from household_names.repositories.interfaces import MemberRepository
from household_names.services.context import ExecutionContext
from household_names.services.error_reporting import ErrorContext, ErrorReporter
from household_names.services.executors import BatchExecutor
from household_names.services.name_updater import NameUpdater

logger = get_logger(__name__)

Checkpoint = Callable[[str], AbstractContextManager]

DEFAULT_BATCH_SIZE = 200


class AsyncNameUpdater:
    """Queues name updates requested by triggers."""

    def __init__(
        self,
        updater: NameUpdater,
        executor: BatchExecutor,
        error_reporter: ErrorReporter,
        checkpoint: Checkpoint | None = None,
    ) -> None:
        self._updater = updater
        self._executor = executor
        self._error_reporter = error_reporter
        self._checkpoint = checkpoint or contextlib.nullcontext

    def schedule(self, household_ids: Iterable[UUID]) -> None:
        ids = list(dict.fromkeys(household_ids))
        if not ids:
            return
        self._executor.submit(partial(self.run, ids))
        logger.debug("name_update_scheduled", household_count=len(ids))

    def run(self, household_ids: list[UUID]) -> bool:
        context = ExecutionContext()
        with LogContext(job=ErrorContext.HOUSEHOLD_NAMING.value):
            try:
                with context.suppressing_retrigger(), self._checkpoint("household_naming"):
                    self._updater.update_names(household_ids, context)
            except Exception as e:
                logger.error(
                    "async_name_update_failed",
                    household_count=len(household_ids),
                    error_type=type(e).__name__,
                    error=str(e),
                )
                self._error_reporter.report(e, ErrorContext.HOUSEHOLD_NAMING)
                return False
        return True


@dataclass
class BulkRefreshSummary:
    is_activation: bool
    chunks_submitted: int = 0
    chunks_completed: int = 0
    chunks_failed: int = 0
    households_updated: int = 0

    @property
    def is_complete(self) -> bool:
        return self.chunks_completed + self.chunks_failed == self.chunks_submitted


class BulkRefreshDriver:
    def __init__(
        self,
        member_repo: MemberRepository,
        updater: NameUpdater,
        executor: BatchExecutor,
        error_reporter: ErrorReporter,
        batch_size: int = DEFAULT_BATCH_SIZE,
        checkpoint: Checkpoint | None = None,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self._member_repo = member_repo
        self._updater = updater
        self._executor = executor
        self._error_reporter = error_reporter
        self._batch_size = batch_size
        self._checkpoint = checkpoint or contextlib.nullcontext

    def refresh_all(self, is_activation: bool = False) -> BulkRefreshSummary:
        """Recompute every household that has members, one job per chunk.

        Chunks hold up to ``batch_size`` members and never split a household;
        a household larger than ``batch_size`` gets a chunk of its own. With
        ``is_activation`` each chunk first marks hand-typed names as overrides
        so turning naming on keeps them.
        """
        members = list(self._member_repo.list_with_household())
        summary = BulkRefreshSummary(is_activation=is_activation)

        for chunk_number, household_ids in enumerate(self._household_chunks(members), 1):
            summary.chunks_submitted += 1
            self._executor.submit(
                partial(self._run_chunk, chunk_number, household_ids, summary)
            )

        logger.info(
            "bulk_refresh_submitted",
            member_count=len(members),
            chunk_count=summary.chunks_submitted,
            is_activation=is_activation,
        )
        return summary

    def _household_chunks(self, members: list[Member]) -> Iterator[list[UUID]]:
        sizes: dict[UUID, int] = {}
        for member in members:
            if member.household_id is not None:
                sizes[member.household_id] = sizes.get(member.household_id, 0) + 1

        chunk: list[UUID] = []
        chunk_members = 0
        for household_id, size in sizes.items():
            if chunk and chunk_members + size > self._batch_size:
                yield chunk
                chunk, chunk_members = [], 0
            chunk.append(household_id)
            chunk_members += size
        if chunk:
            yield chunk

    def _run_chunk(
        self,
        chunk_number: int,
        household_ids: list[UUID],
        summary: BulkRefreshSummary,
    ) -> None:
        context = ExecutionContext()
        with LogContext(job=ErrorContext.BULK_REFRESH.value, chunk=chunk_number):
            try:
                with context.suppressing_retrigger(), self._checkpoint("bulk_refresh"):
                    if summary.is_activation:
                        self._updater.mark_custom_names(household_ids, context)
                    updated = self._updater.update_names(household_ids, context)
            except Exception as e:
                summary.chunks_failed += 1
                logger.error(
                    "bulk_refresh_chunk_failed",
                    household_count=len(household_ids),
                    error_type=type(e).__name__,
                    error=str(e),
                )
                self._error_reporter.report(e, ErrorContext.BULK_REFRESH)
                return
        summary.chunks_completed += 1
        summary.households_updated += len(updated)
