"""Recompute household names, greetings and member counts."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import replace
from typing import Protocol
from uuid import UUID

from household_names.domain.households import Household, Member
from household_names.domain.value_objects import NameField
from household_names.logging_config import get_logger
from household_names.repositories.interfaces import HouseholdRepository, MemberRepository
from household_names.services.context import ExecutionContext
from household_names.services.exclusions import filter_members, primary_first
from household_names.services.naming import (
    LegacyNamingStrategy,
    NamingStrategy,
    get_naming_strategy,
)
from household_names.services.settings_provider import SettingsProvider

logger = get_logger(__name__)


class HouseholdWriter(Protocol):
    def update_households(
        self, households: Sequence[Household], context: ExecutionContext
    ) -> None: ...


class RepositoryHouseholdWriter:
    """Writes straight to the repository without dispatching events."""

    def __init__(self, household_repo: HouseholdRepository) -> None:
        self._household_repo = household_repo

    def update_households(
        self, households: Sequence[Household], context: ExecutionContext
    ) -> None:
        self._household_repo.update_all(households)


def group_members(members: Iterable[Member]) -> dict[UUID, list[Member]]:
    grouped: dict[UUID, list[Member]] = {}
    for member in members:
        if member.household_id is not None:
            grouped.setdefault(member.household_id, []).append(member)
    return grouped


class NameUpdater:
    def __init__(
        self,
        member_repo: MemberRepository,
        household_repo: HouseholdRepository,
        settings_provider: SettingsProvider,
        writer: HouseholdWriter | None = None,
    ) -> None:
        self._member_repo = member_repo
        self._household_repo = household_repo
        self._settings_provider = settings_provider
        self._writer = writer or RepositoryHouseholdWriter(household_repo)

    def update_names(
        self,
        household_ids: Iterable[UUID],
        context: ExecutionContext | None = None,
    ) -> list[Household]:
        """Recompute and persist every household in ``household_ids``.

        Fields in a household's override marker are left alone. Member
        count is always recomputed. All writes succeed or none do.
        """
        ids = list(dict.fromkeys(household_ids))
        if not ids:
            return []
        context = context or ExecutionContext()

        with context.suppressing_retrigger():
            settings = self._settings_provider.load()
            strategy = get_naming_strategy(settings) if settings.advanced_naming_enabled else None
            households, grouped = self._load(ids)

            updated = [
                self._recompute(household, grouped.get(household.id, []), strategy)
                for household in households
            ]
            self._writer.update_households(updated, context)

            changed = sum(
                1 for before, after in zip(households, updated) if not before.has_same_values(after)
            )
            logger.info(
                "household_names_updated",
                household_count=len(updated),
                changed_count=changed,
                advanced_naming=settings.advanced_naming_enabled,
            )
            return updated

    def mark_custom_names(
        self,
        household_ids: Iterable[UUID],
        context: ExecutionContext | None = None,
    ) -> list[Household]:
        """Flag hand-typed names as overrides before naming is switched on.

        A non-empty field that differs from the legacy rules' output is
        treated as user-entered and added to the override marker.
        """
        ids = list(dict.fromkeys(household_ids))
        if not ids:
            return []
        context = context or ExecutionContext()

        with context.suppressing_retrigger():
            settings = self._settings_provider.load()
            legacy = LegacyNamingStrategy(settings)
            households, grouped = self._load(ids)

            marked: list[Household] = []
            for household in households:
                members = primary_first(grouped.get(household.id, []), household.primary_member_id)
                marker = household.overrides
                for name_field in NameField:
                    current = household.get_field(name_field)
                    if settings.is_reset_value(current):
                        continue
                    if current != legacy.render(name_field, filter_members(members, name_field)):
                        marker = marker.with_field(name_field)
                if marker != household.overrides:
                    marked.append(replace(household, overrides=marker).touched())

            if marked:
                self._writer.update_households(marked, context)
            logger.info("custom_household_names_marked", household_count=len(marked))
            return marked

    def _load(
        self, ids: list[UUID]
    ) -> tuple[list[Household], dict[UUID, list[Member]]]:
        members = self._member_repo.list_for_households(ids)
        households = self._household_repo.get_many(ids)
        missing = set(ids) - {h.id for h in households}
        if missing:
            logger.debug("households_not_found", household_ids=missing)
        return households, group_members(members)

    def _recompute(
        self,
        household: Household,
        members: list[Member],
        strategy: NamingStrategy | None,
    ) -> Household:
        changes: dict[str, object] = {"member_count": len(members)}
        if strategy is not None:
            ordered = primary_first(members, household.primary_member_id)
            for name_field in NameField:
                if name_field in household.overrides:
                    continue
                changes[name_field.value] = strategy.render(
                    name_field, filter_members(ordered, name_field)
                )
        recomputed = replace(household, **changes)
        if recomputed.has_same_values(household):
            return household
        return recomputed.touched()

