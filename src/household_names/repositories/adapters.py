"""Row adapters translating the two household record kinds.

Household records live in ``households``; account-backed households live in
``household_accounts`` with their own column names. Both translate into the
single Household value type here and nowhere else.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime
from typing import Any
from uuid import UUID

from household_names.domain.households import Household
from household_names.domain.value_objects import HouseholdKind, OverrideMarker


class HouseholdRowAdapter:
    kind = HouseholdKind.HOUSEHOLD
    table = "households"

    insert_sql = """
        INSERT INTO households (id, name, formal_greeting, informal_greeting,
                                member_count, naming_overrides, created_at, updated_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?)
    """
    update_sql = """
        UPDATE households SET
            name = ?,
            formal_greeting = ?,
            informal_greeting = ?,
            member_count = ?,
            naming_overrides = ?,
            updated_at = ?
        WHERE id = ?
    """

    def to_insert_params(self, household: Household) -> tuple[Any, ...]:
        return (
            str(household.id),
            household.name,
            household.formal_greeting,
            household.informal_greeting,
            household.member_count,
            household.overrides.serialize(),
            household.created_at.isoformat(),
            household.updated_at.isoformat(),
        )

    def to_update_params(self, household: Household) -> tuple[Any, ...]:
        return (
            household.name,
            household.formal_greeting,
            household.informal_greeting,
            household.member_count,
            household.overrides.serialize(),
            household.updated_at.isoformat(),
            str(household.id),
        )

    def to_household(self, row: sqlite3.Row) -> Household:
        return Household(
            id=UUID(row["id"]),
            kind=self.kind,
            name=row["name"],
            formal_greeting=row["formal_greeting"],
            informal_greeting=row["informal_greeting"],
            member_count=row["member_count"],
            overrides=OverrideMarker.parse(row["naming_overrides"]),
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )


class HouseholdAccountRowAdapter:
    kind = HouseholdKind.ACCOUNT
    table = "household_accounts"

    insert_sql = """
        INSERT INTO household_accounts (id, account_name, greeting_formal, greeting_informal,
                                        number_of_members, custom_naming, primary_contact_id,
                                        created_at, last_modified_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
    """
    update_sql = """
        UPDATE household_accounts SET
            account_name = ?,
            greeting_formal = ?,
            greeting_informal = ?,
            number_of_members = ?,
            custom_naming = ?,
            primary_contact_id = ?,
            last_modified_at = ?
        WHERE id = ?
    """

    def to_insert_params(self, household: Household) -> tuple[Any, ...]:
        return (
            str(household.id),
            household.name,
            household.formal_greeting,
            household.informal_greeting,
            household.member_count,
            household.overrides.serialize(),
            str(household.primary_member_id) if household.primary_member_id else None,
            household.created_at.isoformat(),
            household.updated_at.isoformat(),
        )

    def to_update_params(self, household: Household) -> tuple[Any, ...]:
        return (
            household.name,
            household.formal_greeting,
            household.informal_greeting,
            household.member_count,
            household.overrides.serialize(),
            str(household.primary_member_id) if household.primary_member_id else None,
            household.updated_at.isoformat(),
            str(household.id),
        )

    def to_household(self, row: sqlite3.Row) -> Household:
        return Household(
            id=UUID(row["id"]),
            kind=self.kind,
            name=row["account_name"],
            formal_greeting=row["greeting_formal"] or "",
            informal_greeting=row["greeting_informal"] or "",
            member_count=row["number_of_members"] or 0,
            overrides=OverrideMarker.parse(row["custom_naming"]),
            primary_member_id=UUID(row["primary_contact_id"])
            if row["primary_contact_id"]
            else None,
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["last_modified_at"]),
        )


HouseholdAdapter = HouseholdRowAdapter | HouseholdAccountRowAdapter

ADAPTERS: dict[HouseholdKind, HouseholdAdapter] = {
    HouseholdKind.HOUSEHOLD: HouseholdRowAdapter(),
    HouseholdKind.ACCOUNT: HouseholdAccountRowAdapter(),
}
