from unittest.mock import patch
from uuid import uuid4

from household_names.exceptions import HouseholdNotFoundError, PersistenceError
from household_names.services.error_reporting import (
    ErrorContext,
    LoggingErrorReporter,
    SQLiteErrorReporter,
)


class TestSQLiteErrorReporter:
    def test_report_persists_error(self, db):
        reporter = SQLiteErrorReporter(db)

        reporter.report(RuntimeError("boom"), ErrorContext.BULK_REFRESH)

        errors = reporter.list_errors()
        assert len(errors) == 1
        assert errors[0]["context_tag"] == "bulk_refresh"
        assert errors[0]["error_type"] == "RuntimeError"
        assert errors[0]["details"] == {
            "error": "RuntimeError",
            "message": "boom",
            "context": {},
        }

    def test_application_errors_keep_their_context(self, db):
        reporter = SQLiteErrorReporter(db)
        household_id = uuid4()

        reporter.report(HouseholdNotFoundError(household_id), ErrorContext.HOUSEHOLD_NAMING)

        details = reporter.list_errors()[0]["details"]
        assert details["error"] == "HOUSEHOLD_NOT_FOUND"
        assert details["context"] == {"household_id": str(household_id)}

    def test_list_errors_filters_by_context(self, db):
        reporter = SQLiteErrorReporter(db)
        reporter.report(RuntimeError("a"), ErrorContext.BULK_REFRESH)
        reporter.report(PersistenceError("b", record_count=3), "household_naming")

        naming_errors = reporter.list_errors(ErrorContext.HOUSEHOLD_NAMING)

        assert [e["message"] for e in naming_errors] == ["b"]
        assert naming_errors[0]["details"]["context"] == {"record_count": 3}

    def test_table_creation_is_repeatable(self, db):
        SQLiteErrorReporter(db).report(RuntimeError("kept"), ErrorContext.BULK_REFRESH)

        assert len(SQLiteErrorReporter(db).list_errors()) == 1


class TestLoggingErrorReporter:
    def test_report_logs_error(self):
        with patch("household_names.services.error_reporting.logger") as mock_logger:
            LoggingErrorReporter().report(ValueError("bad"), ErrorContext.HOUSEHOLD_NAMING)

        mock_logger.error.assert_called_once_with(
            "error_reported",
            context_tag="household_naming",
            error_type="ValueError",
            error="bad",
        )
