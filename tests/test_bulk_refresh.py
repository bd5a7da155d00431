from unittest.mock import MagicMock

import pytest

from household_names.domain.households import Household, Member
from household_names.domain.value_objects import NameField
from household_names.services.bulk_refresh import AsyncNameUpdater, BulkRefreshDriver
from household_names.services.error_reporting import ErrorContext, SQLiteErrorReporter
from household_names.services.executors import DeferredBatchExecutor, InlineBatchExecutor
from household_names.services.name_updater import NameUpdater


@pytest.fixture
def updater(member_repo, household_repo, settings_provider) -> NameUpdater:
    return NameUpdater(member_repo, household_repo, settings_provider)


@pytest.fixture
def error_reporter(db) -> SQLiteErrorReporter:
    return SQLiteErrorReporter(db)


@pytest.fixture
def jones_household(household_repo, member_repo) -> Household:
    household = Household()
    household_repo.add(household)
    for first_name in ("Sam", "Alex"):
        member_repo.add(Member(last_name="Jones", first_name=first_name, household_id=household.id))
    return household


class TestDeferredBatchExecutor:
    def test_jobs_wait_for_drain(self):
        executor = DeferredBatchExecutor()
        ran = []

        executor.submit(lambda: ran.append(1))

        assert ran == []
        assert executor.pending == 1
        assert executor.drain() == 1
        assert ran == [1]
        assert executor.pending == 0

    def test_jobs_queued_while_draining_run_in_same_drain(self):
        executor = DeferredBatchExecutor()
        ran = []

        executor.submit(lambda: executor.submit(lambda: ran.append("second")))

        assert executor.drain() == 2
        assert ran == ["second"]


class TestAsyncNameUpdater:
    def test_scheduled_update_runs_on_executor(
        self, updater, error_reporter, household_repo, smith_household, smith_members
    ):
        executor = DeferredBatchExecutor()
        async_updater = AsyncNameUpdater(updater, executor, error_reporter)

        async_updater.schedule([smith_household.id, smith_household.id])

        assert household_repo.get(smith_household.id).name == ""
        assert executor.drain() == 1
        assert household_repo.get(smith_household.id).name == "Smith Household"

    def test_empty_schedule_submits_nothing(self, updater, error_reporter):
        executor = DeferredBatchExecutor()

        AsyncNameUpdater(updater, executor, error_reporter).schedule([])

        assert executor.pending == 0

    def test_failure_is_reported_and_swallowed(self, error_reporter, smith_household):
        failing = MagicMock()
        failing.update_names.side_effect = RuntimeError("store unavailable")
        async_updater = AsyncNameUpdater(failing, InlineBatchExecutor(), error_reporter)

        assert async_updater.run([smith_household.id]) is False

        errors = error_reporter.list_errors(ErrorContext.HOUSEHOLD_NAMING)
        assert len(errors) == 1
        assert errors[0]["error_type"] == "RuntimeError"
        assert errors[0]["message"] == "store unavailable"

    def test_each_run_gets_fresh_suppressed_context(self, error_reporter, smith_household):
        seen = []
        recording = MagicMock()
        recording.update_names.side_effect = lambda ids, context: seen.append(
            (context, context.suppress_retrigger)
        )
        async_updater = AsyncNameUpdater(recording, InlineBatchExecutor(), error_reporter)

        async_updater.schedule([smith_household.id])
        async_updater.schedule([smith_household.id])

        assert len(seen) == 2
        assert seen[0][0] is not seen[1][0]
        assert [suppressed for _, suppressed in seen] == [True, True]
        assert all(context.suppress_retrigger is False for context, _ in seen)

    def test_checkpoint_wraps_update(self, updater, error_reporter, smith_household):
        checkpoint = MagicMock()
        async_updater = AsyncNameUpdater(
            updater, InlineBatchExecutor(), error_reporter, checkpoint=checkpoint
        )

        async_updater.run([smith_household.id])

        checkpoint.assert_called_once_with("household_naming")


class TestBulkRefreshDriver:
    def test_refreshes_every_household_with_members(
        self,
        member_repo,
        household_repo,
        updater,
        error_reporter,
        smith_household,
        smith_members,
        jones_household,
    ):
        executor = DeferredBatchExecutor()
        driver = BulkRefreshDriver(member_repo, updater, executor, error_reporter, batch_size=2)

        summary = driver.refresh_all()

        assert summary.chunks_submitted == 2
        assert not summary.is_complete
        executor.drain()
        assert summary.is_complete
        assert summary.chunks_failed == 0
        assert household_repo.get(smith_household.id).name == "Smith Household"
        assert household_repo.get(jones_household.id).name == "Jones Household"
        assert household_repo.get(jones_household.id).member_count == 2

    def test_household_larger_than_batch_gets_one_chunk(
        self, member_repo, household_repo, updater, error_reporter, smith_household, smith_members
    ):
        driver = BulkRefreshDriver(
            member_repo, updater, InlineBatchExecutor(), error_reporter, batch_size=1
        )

        summary = driver.refresh_all()

        assert summary.chunks_submitted == 1
        assert summary.households_updated == 1
        assert household_repo.get(smith_household.id).member_count == 3

    def test_whole_households_share_a_chunk_up_to_batch_size(
        self, member_repo, updater, error_reporter, smith_members, jones_household
    ):
        recording = MagicMock(wraps=updater)
        driver = BulkRefreshDriver(
            member_repo, recording, InlineBatchExecutor(), error_reporter, batch_size=5
        )

        summary = driver.refresh_all()

        assert summary.chunks_submitted == 1
        assert summary.households_updated == 2
        recording.update_names.assert_called_once()

    def test_activation_does_not_mark_values_computed_in_the_same_run(
        self, member_repo, household_repo, updater, error_reporter
    ):
        household = Household()
        household_repo.add(household)
        for member in (
            Member(household_id=household.id, salutation="Mr.", first_name="John",
                   last_name="Smith", is_primary=True),
            Member(household_id=household.id, salutation="Mrs.", first_name="Jane",
                   last_name="Smith", naming_order=1),
            Member(household_id=household.id, first_name="Sam", last_name="Jones",
                   naming_order=2),
        ):
            member_repo.add(member)
        driver = BulkRefreshDriver(
            member_repo, updater, InlineBatchExecutor(), error_reporter, batch_size=2
        )

        summary = driver.refresh_all(is_activation=True)

        stored = household_repo.get(household.id)
        assert summary.chunks_submitted == 1
        assert summary.households_updated == 1
        assert not stored.overrides
        assert stored.formal_greeting == "Mr. John and Mrs. Jane Smith and Sam Jones"

    def test_no_members_submits_nothing(self, member_repo, updater, error_reporter):
        executor = DeferredBatchExecutor()
        driver = BulkRefreshDriver(member_repo, updater, executor, error_reporter)

        summary = driver.refresh_all()

        assert summary.chunks_submitted == 0
        assert executor.pending == 0
        assert summary.is_complete

    def test_invalid_batch_size(self, member_repo, updater, error_reporter):
        with pytest.raises(ValueError):
            BulkRefreshDriver(
                member_repo, updater, InlineBatchExecutor(), error_reporter, batch_size=0
            )

    def test_failed_chunk_does_not_stop_others(
        self, member_repo, error_reporter, smith_household, smith_members, jones_household
    ):
        flaky = MagicMock()
        flaky.update_names.side_effect = [RuntimeError("boom"), [jones_household]]
        driver = BulkRefreshDriver(
            member_repo, flaky, InlineBatchExecutor(), error_reporter, batch_size=3
        )

        summary = driver.refresh_all()

        assert summary.chunks_submitted == 2
        assert summary.chunks_failed == 1
        assert summary.chunks_completed == 1
        assert summary.households_updated == 1
        assert len(error_reporter.list_errors(ErrorContext.BULK_REFRESH)) == 1

    def test_activation_marks_custom_names_first(
        self, member_repo, household_repo, updater, error_reporter, smith_household, smith_members
    ):
        household_repo.update_all([smith_household.with_field(NameField.NAME, "The Smiths")])
        driver = BulkRefreshDriver(member_repo, updater, InlineBatchExecutor(), error_reporter)

        summary = driver.refresh_all(is_activation=True)

        stored = household_repo.get(smith_household.id)
        assert summary.is_activation
        assert stored.name == "The Smiths"
        assert NameField.NAME in stored.overrides
        assert stored.informal_greeting == "John, Jane and Timmy"

    def test_failed_chunk_rolls_back_to_checkpoint(
        self,
        db,
        member_repo,
        household_repo,
        updater,
        error_reporter,
        smith_household,
        smith_members,
        monkeypatch,
    ):
        household_repo.update_all([smith_household.with_field(NameField.NAME, "The Smiths")])
        monkeypatch.setattr(updater, "update_names", MagicMock(side_effect=RuntimeError("boom")))
        driver = BulkRefreshDriver(
            member_repo,
            updater,
            InlineBatchExecutor(),
            error_reporter,
            checkpoint=db.savepoint,
        )

        summary = driver.refresh_all(is_activation=True)

        assert summary.chunks_failed == 1
        assert not household_repo.get(smith_household.id).overrides
        assert len(error_reporter.list_errors(ErrorContext.BULK_REFRESH)) == 1
