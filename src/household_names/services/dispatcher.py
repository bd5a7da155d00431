"""In-process trigger dispatch around record store writes.

Household updates pass through the change reconciler before they are
written and are checked for staleness afterwards. Member inserts, updates
and deletes queue their households for recomputation. Nothing is dispatched
while the execution context suppresses re-triggering.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Protocol
from uuid import UUID

from household_names.domain.households import Household, Member
from household_names.exceptions import MemberNotFoundError
from household_names.logging_config import get_logger
from household_names.repositories.interfaces import HouseholdRepository, MemberRepository
from household_names.services.context import ExecutionContext
from household_names.services.naming import get_naming_strategy
from household_names.services.reconciler import ChangeReconciler
from household_names.services.settings_provider import NamingSettings, SettingsProvider

logger = get_logger(__name__)


class RefreshScheduler(Protocol):
    def schedule(self, household_ids: Iterable[UUID]) -> None: ...


class TriggerDispatcher:
    def __init__(
        self,
        member_repo: MemberRepository,
        household_repo: HouseholdRepository,
        settings_provider: SettingsProvider,
        reconciler: ChangeReconciler | None = None,
        scheduler: RefreshScheduler | None = None,
    ) -> None:
        self._member_repo = member_repo
        self._household_repo = household_repo
        self._settings_provider = settings_provider
        self._reconciler = reconciler or ChangeReconciler()
        self._scheduler = scheduler

    def set_scheduler(self, scheduler: RefreshScheduler) -> None:
        self._scheduler = scheduler

    # Households

    def add_household(self, household: Household) -> None:
        self._household_repo.add(household)

    def update_household(
        self, household: Household, context: ExecutionContext | None = None
    ) -> Household:
        return self.update_households([household], context)[0]

    def update_households(
        self,
        households: Sequence[Household],
        context: ExecutionContext | None = None,
    ) -> list[Household]:
        context = context or ExecutionContext()
        settings = self._settings_provider.load()
        dispatch = not context.suppress_retrigger and settings.advanced_naming_enabled

        if not dispatch:
            self._household_repo.update_all(households)
            return list(households)

        old_by_id = {h.id: h for h in self._household_repo.get_many(h.id for h in households)}
        reconciled = [
            self._reconciler.before_update(old_by_id[h.id], h, settings)
            if h.id in old_by_id
            else h
            for h in households
        ]
        self._household_repo.update_all(reconciled)

        stale = [
            h.id
            for h in reconciled
            if h.id in old_by_id
            and self._reconciler.needs_refresh(old_by_id[h.id], h, settings)
        ]
        self._schedule(stale, reason="household_updated")
        return reconciled

    # Members

    def add_member(self, member: Member, context: ExecutionContext | None = None) -> None:
        self._member_repo.add(member)
        self._after_member_change(None, member, context)

    def update_member(self, member: Member, context: ExecutionContext | None = None) -> None:
        old = self._member_repo.get(member.id)
        if old is None:
            raise MemberNotFoundError(member.id)
        self._member_repo.update(member)
        self._after_member_change(old, member, context)

    def remove_member(self, member_id: UUID, context: ExecutionContext | None = None) -> None:
        old = self._member_repo.get(member_id)
        if old is None:
            raise MemberNotFoundError(member_id)
        self._member_repo.delete(member_id)
        self._after_member_change(old, None, context)

    def _after_member_change(
        self,
        old: Member | None,
        new: Member | None,
        context: ExecutionContext | None,
    ) -> None:
        if context is not None and context.suppress_retrigger:
            return
        settings = self._settings_provider.load()
        household_ids = self._reconciler.member_needs_refresh(
            old, new, self._fields_in_use(settings)
        )
        self._schedule(sorted(household_ids, key=str), reason="member_changed")

    def _fields_in_use(self, settings: NamingSettings) -> frozenset[str]:
        if not settings.advanced_naming_enabled:
            return frozenset()
        return get_naming_strategy(settings).fields_in_use()

    def _schedule(self, household_ids: list[UUID], reason: str) -> None:
        if not household_ids:
            return
        if self._scheduler is None:
            logger.warning(
                "name_update_not_scheduled",
                reason=reason,
                household_count=len(household_ids),
            )
            return
        logger.debug("name_update_requested", reason=reason, household_count=len(household_ids))
        self._scheduler.schedule(household_ids)
