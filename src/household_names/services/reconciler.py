"""Change reconciliation for household name fields.

Each of Name, Formal Greeting and Informal Greeting is either system-owned
or user-overridden. The override marker on the household records the
overridden ones. On a before-update event, for each field:

1. An empty or placeholder value clears the override and stores the
   placeholder, which asks for a recompute.
2. Otherwise a changed value on a system-owned field marks it overridden.
3. Otherwise nothing happens.

The reset check runs before the change check.
"""

from __future__ import annotations

from dataclasses import replace
from uuid import UUID

from household_names.domain.households import Household, Member
from household_names.domain.value_objects import HouseholdKind, NameField
from household_names.services.settings_provider import NamingSettings

_MEMBER_NAMING_ATTRIBUTES = ("naming_exclusions", "naming_order", "is_primary")


class ChangeReconciler:
    def before_update(
        self, old: Household, new: Household, settings: NamingSettings
    ) -> Household:
        """Return ``new`` with its override marker and placeholders reconciled."""
        reconciled = new
        marker = new.overrides
        for name_field in NameField:
            new_value = new.get_field(name_field)
            if settings.is_reset_value(new_value):
                marker = marker.without_field(name_field)
                reconciled = reconciled.with_field(name_field, settings.reset_placeholder)
            elif new_value != old.get_field(name_field) and name_field not in marker:
                marker = marker.with_field(name_field)
        if marker != reconciled.overrides:
            reconciled = replace(reconciled, overrides=marker)
        return reconciled

    def needs_refresh(
        self, old: Household, new: Household, settings: NamingSettings
    ) -> bool:
        """After-update check: should the household be queued for recompute?"""
        if any(
            new.get_field(name_field) == settings.reset_placeholder
            for name_field in NameField
        ):
            return True
        if old.overrides != new.overrides:
            return True
        return (
            new.kind is HouseholdKind.ACCOUNT
            and old.primary_member_id != new.primary_member_id
        )

    def member_needs_refresh(
        self,
        old: Member | None,
        new: Member | None,
        fields_in_use: frozenset[str],
    ) -> set[UUID]:
        """Households affected by a member insert, update or delete.

        Pass ``old=None`` for inserts and ``new=None`` for deletes.
        """
        if old is None or new is None:
            member = new or old
            return {member.household_id} if member and member.household_id else set()

        if old.household_id != new.household_id:
            return {h for h in (old.household_id, new.household_id) if h is not None}

        if new.household_id is None:
            return set()
        watched = set(fields_in_use) | set(_MEMBER_NAMING_ATTRIBUTES)
        if any(getattr(old, attr) != getattr(new, attr) for attr in watched):
            return {new.household_id}
        return set()
