from household_names.repositories.interfaces import HouseholdRepository, MemberRepository
from household_names.repositories.sqlite import (
    SQLiteDatabase,
    SQLiteHouseholdRepository,
    SQLiteMemberRepository,
)

__all__ = [
    "HouseholdRepository",
    "MemberRepository",
    "SQLiteDatabase",
    "SQLiteHouseholdRepository",
    "SQLiteMemberRepository",
]
