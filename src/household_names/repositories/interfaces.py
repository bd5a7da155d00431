from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from uuid import UUID

from household_names.domain.households import Household, Member


class MemberRepository(ABC):
    @abstractmethod
    def add(self, member: Member) -> None:
        pass

    @abstractmethod
    def get(self, member_id: UUID) -> Member | None:
        pass

    @abstractmethod
    def list_for_households(self, household_ids: Iterable[UUID]) -> list[Member]:
        """Members of the given households in naming order.

        Ordered by household, primary flag descending, naming order ascending
        with nulls last, then creation time ascending.
        """

    @abstractmethod
    def list_with_household(self) -> Iterable[Member]:
        pass

    @abstractmethod
    def update(self, member: Member) -> None:
        pass

    @abstractmethod
    def delete(self, member_id: UUID) -> None:
        pass


class HouseholdRepository(ABC):
    @abstractmethod
    def add(self, household: Household) -> None:
        pass

    @abstractmethod
    def get(self, household_id: UUID) -> Household | None:
        pass

    @abstractmethod
    def get_many(self, household_ids: Iterable[UUID]) -> list[Household]:
        pass

    @abstractmethod
    def list_all(self) -> Iterable[Household]:
        pass

    @abstractmethod
    def update_all(self, households: Sequence[Household]) -> None:
        """Write every household or none of them."""
