import pytest

from household_names.domain.households import Household, Member
from household_names.domain.value_objects import HouseholdKind
from household_names.repositories.sqlite import (
    SQLiteDatabase,
    SQLiteHouseholdRepository,
    SQLiteMemberRepository,
)
from household_names.services.settings_provider import NamingSettings, StaticSettingsProvider


@pytest.fixture
def db() -> SQLiteDatabase:
    database = SQLiteDatabase(":memory:")
    database.initialize()
    return database


@pytest.fixture
def member_repo(db: SQLiteDatabase) -> SQLiteMemberRepository:
    return SQLiteMemberRepository(db)


@pytest.fixture
def household_repo(db: SQLiteDatabase) -> SQLiteHouseholdRepository:
    return SQLiteHouseholdRepository(db)


@pytest.fixture
def naming_settings() -> NamingSettings:
    return NamingSettings()


@pytest.fixture
def settings_provider(naming_settings: NamingSettings) -> StaticSettingsProvider:
    return StaticSettingsProvider(naming_settings)


@pytest.fixture
def smith_household(household_repo: SQLiteHouseholdRepository) -> Household:
    household = Household()
    household_repo.add(household)
    return household


@pytest.fixture
def smith_account(household_repo: SQLiteHouseholdRepository) -> Household:
    household = Household(kind=HouseholdKind.ACCOUNT)
    household_repo.add(household)
    return household


@pytest.fixture
def smith_members(
    member_repo: SQLiteMemberRepository, smith_household: Household
) -> list[Member]:
    members = [
        Member(
            household_id=smith_household.id,
            salutation="Mr.",
            first_name="John",
            last_name="Smith",
            is_primary=True,
        ),
        Member(
            household_id=smith_household.id,
            salutation="Mrs.",
            first_name="Jane",
            last_name="Smith",
            naming_order=1,
        ),
        Member(
            household_id=smith_household.id,
            first_name="Timmy",
            last_name="Smith",
            naming_order=2,
        ),
    ]
    for member in members:
        member_repo.add(member)
    return members
