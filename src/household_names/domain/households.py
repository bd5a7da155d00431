"""Household and member domain models for household naming."""

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from uuid import UUID, uuid4

from household_names.domain.value_objects import HouseholdKind, NameField, OverrideMarker


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass
class Member:
    """A person belonging to at most one household.

    naming_exclusions lists the derived household fields this member must
    not contribute to.
    """

    last_name: str
    first_name: str = ""
    id: UUID = field(default_factory=uuid4)
    household_id: UUID | None = None
    salutation: str = ""
    suffix: str = ""
    naming_exclusions: frozenset[NameField] = field(default_factory=frozenset)
    naming_order: int | None = None
    is_primary: bool = False
    created_at: datetime = field(default_factory=_utc_now)

    def is_excluded_from(self, name_field: NameField) -> bool:
        return name_field in self.naming_exclusions


@dataclass
class Household:
    """Aggregate over members, backed by either a household or an account record."""

    name: str = ""
    id: UUID = field(default_factory=uuid4)
    kind: HouseholdKind = HouseholdKind.HOUSEHOLD
    formal_greeting: str = ""
    informal_greeting: str = ""
    member_count: int = 0
    overrides: OverrideMarker = field(default_factory=OverrideMarker)
    primary_member_id: UUID | None = None
    created_at: datetime = field(default_factory=_utc_now)
    updated_at: datetime = field(default_factory=_utc_now)

    def get_field(self, name_field: NameField) -> str:
        return getattr(self, name_field.value)

    def with_field(self, name_field: NameField, value: str) -> "Household":
        return replace(self, **{name_field.value: value})

    def has_same_values(self, other: "Household") -> bool:
        return (
            self.name == other.name
            and self.formal_greeting == other.formal_greeting
            and self.informal_greeting == other.informal_greeting
            and self.member_count == other.member_count
            and self.overrides == other.overrides
            and self.primary_member_id == other.primary_member_id
        )

    def touched(self) -> "Household":
        return replace(self, updated_at=_utc_now())
