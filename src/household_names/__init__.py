from household_names.domain.households import Household, Member
from household_names.domain.value_objects import HouseholdKind, NameField, OverrideMarker

__all__ = [
    "Household",
    "HouseholdKind",
    "Member",
    "NameField",
    "OverrideMarker",
]

__version__ = "0.1.0"
