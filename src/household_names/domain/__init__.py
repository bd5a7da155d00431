from household_names.domain.households import Household, Member
from household_names.domain.value_objects import (
    HouseholdKind,
    NameField,
    OverrideMarker,
    parse_name_fields,
    serialize_name_fields,
)

__all__ = [
    "Household",
    "HouseholdKind",
    "Member",
    "NameField",
    "OverrideMarker",
    "parse_name_fields",
    "serialize_name_fields",
]
