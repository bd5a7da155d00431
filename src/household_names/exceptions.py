"""Exception hierarchy for Household Names.

All package exceptions inherit from HouseholdNamesError so callers can catch
every application error with a single base class while keeping specific
types for individual failures.
"""

from typing import Any
from uuid import UUID


class HouseholdNamesError(Exception):
    """Base exception for all Household Names errors.

    Includes an error_code for reporting and extra structured context.
    """

    error_code: str = "HHN_ERROR"

    def __init__(
        self,
        message: str,
        *,
        error_code: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if error_code:
            self.error_code = error_code
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for error reports."""
        return {
            "error": self.error_code,
            "message": self.message,
            "context": self.context,
        }


# =============================================================================
# Record Errors
# =============================================================================


class HouseholdNotFoundError(HouseholdNamesError):
    """Raised when a household record cannot be found."""

    error_code = "HOUSEHOLD_NOT_FOUND"

    def __init__(self, household_id: UUID | str) -> None:
        super().__init__(
            f"Household not found: {household_id}",
            context={"household_id": str(household_id)},
        )


class MemberNotFoundError(HouseholdNamesError):
    """Raised when a member record cannot be found."""

    error_code = "MEMBER_NOT_FOUND"

    def __init__(self, member_id: UUID | str) -> None:
        super().__init__(
            f"Member not found: {member_id}",
            context={"member_id": str(member_id)},
        )


class PersistenceError(HouseholdNamesError):
    """Raised when a batch write is rejected by the record store.

    The whole batch is rolled back before this is raised.
    """

    error_code = "PERSISTENCE_ERROR"

    def __init__(self, message: str, *, record_count: int = 0) -> None:
        super().__init__(message, context={"record_count": record_count})


# =============================================================================
# Naming Errors
# =============================================================================


class NamingStrategyError(HouseholdNamesError):
    """Base exception for naming strategy problems."""

    error_code = "NAMING_STRATEGY_ERROR"


class UnknownNamingStrategyError(NamingStrategyError):
    """Raised when a configured strategy identifier is not registered."""

    error_code = "UNKNOWN_NAMING_STRATEGY"

    def __init__(self, strategy_id: str) -> None:
        super().__init__(
            f"Unknown naming strategy: {strategy_id}",
            context={"strategy_id": strategy_id},
        )


class InvalidNameFormatError(NamingStrategyError):
    """Raised when a name format string cannot be parsed."""

    error_code = "INVALID_NAME_FORMAT"

    def __init__(self, name_format: str, reason: str) -> None:
        super().__init__(
            f"Invalid name format {name_format!r}: {reason}",
            context={"name_format": name_format, "reason": reason},
        )
