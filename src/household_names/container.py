"""Dependency injection container for Household Names.

Wires the SQLite record store, settings provider, trigger dispatcher, name
updater and batch jobs together. Services are created lazily on first
access and cached for reuse.

Usage:
    from household_names.container import Container

    with Container() as container:
        container.dispatcher.add_member(member)
        container.executor.drain()
"""

from functools import cached_property
from pathlib import Path

from household_names.config import Settings, get_settings
from household_names.logging_config import get_logger
from household_names.repositories.sqlite import (
    SQLiteDatabase,
    SQLiteHouseholdRepository,
    SQLiteMemberRepository,
)
from household_names.services.bulk_refresh import AsyncNameUpdater, BulkRefreshDriver
from household_names.services.dispatcher import TriggerDispatcher
from household_names.services.error_reporting import SQLiteErrorReporter
from household_names.services.executors import DeferredBatchExecutor
from household_names.services.name_updater import NameUpdater
from household_names.services.settings_provider import EnvironmentSettingsProvider

logger = get_logger(__name__)


class Container:
    """Dependency injection container.

    The container can be configured with custom settings for testing:

        test_settings = Settings(sqlite_path=":memory:")
        container = Container(settings=test_settings)
    """

    def __init__(
        self, settings: Settings | None = None, database_path: str | Path | None = None
    ) -> None:
        self._settings = settings or get_settings()
        self._database_path = database_path or self._settings.sqlite_path
        logger.debug(
            "container_created",
            database_path=str(self._database_path),
            environment=self._settings.environment.value,
        )

    @property
    def settings(self) -> Settings:
        return self._settings

    @cached_property
    def database(self) -> SQLiteDatabase:
        """The SQLite database, initialized on first access."""
        path = str(self._database_path)
        if path != ":memory:":
            Path(path).parent.mkdir(parents=True, exist_ok=True)
        logger.info("initializing_sqlite_database", path=path)
        db = SQLiteDatabase(path)
        db.initialize()
        return db

    @cached_property
    def member_repository(self) -> SQLiteMemberRepository:
        return SQLiteMemberRepository(self.database)

    @cached_property
    def household_repository(self) -> SQLiteHouseholdRepository:
        return SQLiteHouseholdRepository(self.database)

    @cached_property
    def settings_provider(self) -> EnvironmentSettingsProvider:
        return EnvironmentSettingsProvider(self._settings)

    @cached_property
    def error_reporter(self) -> SQLiteErrorReporter:
        return SQLiteErrorReporter(self.database)

    @cached_property
    def executor(self) -> DeferredBatchExecutor:
        return DeferredBatchExecutor()

    @cached_property
    def dispatcher(self) -> TriggerDispatcher:
        dispatcher = TriggerDispatcher(
            self.member_repository,
            self.household_repository,
            self.settings_provider,
        )
        dispatcher.set_scheduler(
            AsyncNameUpdater(
                NameUpdater(
                    self.member_repository,
                    self.household_repository,
                    self.settings_provider,
                    writer=dispatcher,
                ),
                self.executor,
                self.error_reporter,
                checkpoint=self.database.savepoint,
            )
        )
        return dispatcher

    @cached_property
    def name_updater(self) -> NameUpdater:
        """Name updater writing through the trigger dispatcher."""
        return NameUpdater(
            self.member_repository,
            self.household_repository,
            self.settings_provider,
            writer=self.dispatcher,
        )

    @cached_property
    def bulk_refresh_driver(self) -> BulkRefreshDriver:
        return BulkRefreshDriver(
            self.member_repository,
            self.name_updater,
            self.executor,
            self.error_reporter,
            batch_size=self._settings.batch_size,
            checkpoint=self.database.savepoint,
        )

    def close(self) -> None:
        """Run outstanding jobs and close the database."""
        if "executor" in self.__dict__:
            self.executor.drain()
        if "database" in self.__dict__:
            logger.debug("closing_database_connection")
            self.database.close()

    def __enter__(self) -> "Container":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

