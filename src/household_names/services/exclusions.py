"""Per-field member filtering ahead of name rendering."""

from collections.abc import Sequence
from uuid import UUID

from household_names.domain.households import Member
from household_names.domain.value_objects import NameField


def filter_members(members: Sequence[Member], name_field: NameField) -> list[Member]:
    """Members allowed to contribute to ``name_field``, order preserved."""
    return [m for m in members if not m.is_excluded_from(name_field)]


def members_by_field(members: Sequence[Member]) -> dict[NameField, list[Member]]:
    return {f: filter_members(members, f) for f in NameField}


def primary_first(members: Sequence[Member], primary_member_id: UUID | None) -> list[Member]:
    """Move the household's designated primary member to the front."""
    if primary_member_id is None:
        return list(members)
    primary = [m for m in members if m.id == primary_member_id]
    return primary + [m for m in members if m.id != primary_member_id]
