from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum

MARKER_DELIMITER = ";"


class NameField(str, Enum):
    NAME = "name"
    FORMAL_GREETING = "formal_greeting"
    INFORMAL_GREETING = "informal_greeting"


class HouseholdKind(str, Enum):
    HOUSEHOLD = "household"
    ACCOUNT = "account"


def parse_name_fields(raw: str | None) -> frozenset[NameField]:
    """Parse a delimited list of field identifiers.

    Empty entries, unknown identifiers and duplicates are dropped.
    """
    if not raw:
        return frozenset()
    values = {f.value: f for f in NameField}
    parsed = set()
    for token in raw.split(MARKER_DELIMITER):
        token = token.strip()
        if token in values:
            parsed.add(values[token])
    return frozenset(parsed)


def serialize_name_fields(fields: Iterable[NameField]) -> str:
    present = set(fields)
    return MARKER_DELIMITER.join(f.value for f in NameField if f in present)


@dataclass(frozen=True)
class OverrideMarker:
    """Fields of a household that a user edited by hand.

    The system never recomputes a field while it is in the marker.
    """

    fields: frozenset[NameField] = field(default_factory=frozenset)

    @classmethod
    def parse(cls, raw: str | None) -> "OverrideMarker":
        return cls(parse_name_fields(raw))

    def serialize(self) -> str:
        return serialize_name_fields(self.fields)

    def with_field(self, name_field: NameField) -> "OverrideMarker":
        return OverrideMarker(self.fields | {name_field})

    def without_field(self, name_field: NameField) -> "OverrideMarker":
        return OverrideMarker(self.fields - {name_field})

    def __contains__(self, name_field: object) -> bool:
        return name_field in self.fields

    def __iter__(self) -> Iterator[NameField]:
        return (f for f in NameField if f in self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def __bool__(self) -> bool:
        return bool(self.fields)
