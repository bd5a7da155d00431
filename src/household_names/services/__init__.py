from household_names.services.bulk_refresh import (
    AsyncNameUpdater,
    BulkRefreshDriver,
    BulkRefreshSummary,
)
from household_names.services.context import ExecutionContext
from household_names.services.dispatcher import TriggerDispatcher
from household_names.services.error_reporting import (
    ErrorContext,
    ErrorReporter,
    LoggingErrorReporter,
    SQLiteErrorReporter,
)
from household_names.services.exclusions import filter_members, members_by_field
from household_names.services.executors import (
    BatchExecutor,
    DeferredBatchExecutor,
    InlineBatchExecutor,
)
from household_names.services.name_updater import NameUpdater
from household_names.services.naming import (
    NAMING_STRATEGIES,
    FormatNamingStrategy,
    LegacyNamingStrategy,
    NamingStrategy,
    get_naming_strategy,
)
from household_names.services.reconciler import ChangeReconciler
from household_names.services.settings_provider import (
    EnvironmentSettingsProvider,
    NamingSettings,
    SettingsProvider,
    StaticSettingsProvider,
)

__all__ = [
    "NAMING_STRATEGIES",
    "AsyncNameUpdater",
    "BatchExecutor",
    "BulkRefreshDriver",
    "BulkRefreshSummary",
    "ChangeReconciler",
    "DeferredBatchExecutor",
    "EnvironmentSettingsProvider",
    "ErrorContext",
    "ErrorReporter",
    "ExecutionContext",
    "FormatNamingStrategy",
    "InlineBatchExecutor",
    "LegacyNamingStrategy",
    "LoggingErrorReporter",
    "NameUpdater",
    "NamingSettings",
    "NamingStrategy",
    "SQLiteErrorReporter",
    "SettingsProvider",
    "StaticSettingsProvider",
    "TriggerDispatcher",
    "filter_members",
    "get_naming_strategy",
    "members_by_field",
]
