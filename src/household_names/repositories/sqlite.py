"""SQLite implementations of repository interfaces."""

from __future__ import annotations

import contextlib
import sqlite3
from collections.abc import Iterable, Iterator, Sequence
from datetime import datetime
from pathlib import Path
from uuid import UUID

from household_names.domain.households import Household, Member
from household_names.domain.value_objects import parse_name_fields, serialize_name_fields
from household_names.exceptions import HouseholdNotFoundError, PersistenceError
from household_names.repositories.adapters import ADAPTERS
from household_names.repositories.interfaces import HouseholdRepository, MemberRepository

# Stay well below SQLITE_MAX_VARIABLE_NUMBER on older builds
_MAX_IN_PARAMS = 500


def _chunked(ids: Sequence[str], size: int = _MAX_IN_PARAMS) -> Iterator[Sequence[str]]:
    for start in range(0, len(ids), size):
        yield ids[start : start + size]


def _placeholders(count: int) -> str:
    return ", ".join("?" for _ in range(count))


class SQLiteDatabase:
    """SQLite database connection manager.

    The connection runs in autocommit mode; multi-statement writes are
    grouped with ``savepoint()``, which nests.
    """

    def __init__(self, path: str | Path = ":memory:") -> None:
        self._path = str(path)
        self._connection: sqlite3.Connection | None = None
        self._savepoint_seq = 0

    def get_connection(self) -> sqlite3.Connection:
        """Get or create the database connection."""
        if self._connection is None:
            self._connection = sqlite3.connect(self._path, isolation_level=None)
            self._connection.row_factory = sqlite3.Row
            self._connection.execute("PRAGMA foreign_keys = ON")
        return self._connection

    @contextlib.contextmanager
    def savepoint(self, name: str = "sp") -> Iterator[sqlite3.Connection]:
        """Checkpoint that is released on success and rolled back on any error."""
        conn = self.get_connection()
        self._savepoint_seq += 1
        savepoint_name = f"{name}_{self._savepoint_seq}"
        conn.execute(f"SAVEPOINT {savepoint_name}")
        try:
            yield conn
        except BaseException:
            conn.execute(f"ROLLBACK TO {savepoint_name}")
            conn.execute(f"RELEASE {savepoint_name}")
            raise
        conn.execute(f"RELEASE {savepoint_name}")

    def close(self) -> None:
        if self._connection is not None:
            self._connection.close()
            self._connection = None

    def initialize(self) -> None:
        """Create all database tables."""
        conn = self.get_connection()
        conn.executescript(
            """
            -- Household records
            CREATE TABLE IF NOT EXISTS households (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL DEFAULT '',
                formal_greeting TEXT NOT NULL DEFAULT '',
                informal_greeting TEXT NOT NULL DEFAULT '',
                member_count INTEGER NOT NULL DEFAULT 0 CHECK (member_count >= 0),
                naming_overrides TEXT NOT NULL DEFAULT '',
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );

            -- Account records acting as households
            CREATE TABLE IF NOT EXISTS household_accounts (
                id TEXT PRIMARY KEY,
                account_name TEXT NOT NULL DEFAULT '',
                greeting_formal TEXT,
                greeting_informal TEXT,
                number_of_members INTEGER CHECK (number_of_members >= 0),
                custom_naming TEXT,
                primary_contact_id TEXT,
                created_at TEXT NOT NULL,
                last_modified_at TEXT NOT NULL
            );

            -- Members (contacts)
            CREATE TABLE IF NOT EXISTS members (
                id TEXT PRIMARY KEY,
                household_id TEXT,
                first_name TEXT NOT NULL DEFAULT '',
                last_name TEXT NOT NULL,
                salutation TEXT NOT NULL DEFAULT '',
                suffix TEXT NOT NULL DEFAULT '',
                naming_exclusions TEXT NOT NULL DEFAULT '',
                naming_order INTEGER,
                is_primary INTEGER NOT NULL DEFAULT 0,
                created_at TEXT NOT NULL
            );
            CREATE INDEX IF NOT EXISTS idx_members_household ON members(household_id);
            """
        )


class SQLiteMemberRepository(MemberRepository):
    def __init__(self, database: SQLiteDatabase) -> None:
        self._db = database

    def add(self, member: Member) -> None:
        conn = self._db.get_connection()
        conn.execute(
            """
            INSERT INTO members (id, household_id, first_name, last_name, salutation, suffix,
                                 naming_exclusions, naming_order, is_primary, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                str(member.id),
                str(member.household_id) if member.household_id else None,
                member.first_name,
                member.last_name,
                member.salutation,
                member.suffix,
                serialize_name_fields(member.naming_exclusions),
                member.naming_order,
                1 if member.is_primary else 0,
                member.created_at.isoformat(),
            ),
        )

    def get(self, member_id: UUID) -> Member | None:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT * FROM members WHERE id = ?", (str(member_id),)
        ).fetchone()
        if row is None:
            return None
        return self._row_to_member(row)

    def list_for_households(self, household_ids: Iterable[UUID]) -> list[Member]:
        ids = list(dict.fromkeys(str(h) for h in household_ids))
        conn = self._db.get_connection()
        members: list[Member] = []
        for chunk in _chunked(ids):
            rows = conn.execute(
                f"""
                SELECT * FROM members
                WHERE household_id IN ({_placeholders(len(chunk))})
                ORDER BY household_id,
                         is_primary DESC,
                         naming_order IS NULL,
                         naming_order ASC,
                         created_at ASC,
                         rowid ASC
                """,
                tuple(chunk),
            ).fetchall()
            members.extend(self._row_to_member(row) for row in rows)
        return members

    def list_with_household(self) -> Iterable[Member]:
        conn = self._db.get_connection()
        rows = conn.execute(
            "SELECT * FROM members WHERE household_id IS NOT NULL ORDER BY household_id, rowid"
        ).fetchall()
        return [self._row_to_member(row) for row in rows]

    def update(self, member: Member) -> None:
        conn = self._db.get_connection()
        conn.execute(
            """
            UPDATE members SET
                household_id = ?,
                first_name = ?,
                last_name = ?,
                salutation = ?,
                suffix = ?,
                naming_exclusions = ?,
                naming_order = ?,
                is_primary = ?
            WHERE id = ?
            """,
            (
                str(member.household_id) if member.household_id else None,
                member.first_name,
                member.last_name,
                member.salutation,
                member.suffix,
                serialize_name_fields(member.naming_exclusions),
                member.naming_order,
                1 if member.is_primary else 0,
                str(member.id),
            ),
        )

    def delete(self, member_id: UUID) -> None:
        conn = self._db.get_connection()
        conn.execute("DELETE FROM members WHERE id = ?", (str(member_id),))

    def _row_to_member(self, row: sqlite3.Row) -> Member:
        return Member(
            id=UUID(row["id"]),
            household_id=UUID(row["household_id"]) if row["household_id"] else None,
            first_name=row["first_name"],
            last_name=row["last_name"],
            salutation=row["salutation"],
            suffix=row["suffix"],
            naming_exclusions=parse_name_fields(row["naming_exclusions"]),
            naming_order=row["naming_order"],
            is_primary=bool(row["is_primary"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )


class SQLiteHouseholdRepository(HouseholdRepository):
    """Unified access to household and account records."""

    def __init__(self, database: SQLiteDatabase) -> None:
        self._db = database

    def add(self, household: Household) -> None:
        adapter = ADAPTERS[household.kind]
        conn = self._db.get_connection()
        conn.execute(adapter.insert_sql, adapter.to_insert_params(household))

    def get(self, household_id: UUID) -> Household | None:
        found = self.get_many([household_id])
        return found[0] if found else None

    def get_many(self, household_ids: Iterable[UUID]) -> list[Household]:
        ids = list(dict.fromkeys(str(h) for h in household_ids))
        conn = self._db.get_connection()
        by_id: dict[str, Household] = {}
        for adapter in ADAPTERS.values():
            for chunk in _chunked(ids):
                rows = conn.execute(
                    f"SELECT * FROM {adapter.table} WHERE id IN ({_placeholders(len(chunk))})",
                    tuple(chunk),
                ).fetchall()
                for row in rows:
                    by_id[row["id"]] = adapter.to_household(row)
        return [by_id[i] for i in ids if i in by_id]

    def list_all(self) -> Iterable[Household]:
        conn = self._db.get_connection()
        households: list[Household] = []
        for adapter in ADAPTERS.values():
            rows = conn.execute(
                f"SELECT * FROM {adapter.table} ORDER BY created_at"
            ).fetchall()
            households.extend(adapter.to_household(row) for row in rows)
        return households

    def update_all(self, households: Sequence[Household]) -> None:
        if not households:
            return
        try:
            with self._db.savepoint("update_households") as conn:
                for household in households:
                    adapter = ADAPTERS[household.kind]
                    cursor = conn.execute(
                        adapter.update_sql, adapter.to_update_params(household)
                    )
                    if cursor.rowcount == 0:
                        raise HouseholdNotFoundError(household.id)
        except sqlite3.Error as e:
            raise PersistenceError(
                f"Household batch update failed: {e}", record_count=len(households)
            ) from e
