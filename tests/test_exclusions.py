from household_names.domain.households import Member
from household_names.domain.value_objects import NameField
from household_names.services.exclusions import filter_members, members_by_field, primary_first


def _member(first_name: str, *excluded: NameField) -> Member:
    return Member(first_name=first_name, last_name="Smith", naming_exclusions=frozenset(excluded))


class TestFilterMembers:
    def test_keeps_members_without_exclusions(self):
        members = [_member("John"), _member("Jane")]

        assert filter_members(members, NameField.NAME) == members

    def test_removes_only_members_excluded_from_that_field(self):
        john = _member("John")
        jane = _member("Jane", NameField.FORMAL_GREETING)

        assert filter_members([john, jane], NameField.FORMAL_GREETING) == [john]
        assert filter_members([john, jane], NameField.NAME) == [john, jane]
        assert filter_members([john, jane], NameField.INFORMAL_GREETING) == [john, jane]

    def test_preserves_order(self):
        members = [_member("C"), _member("B", NameField.NAME), _member("A")]

        result = filter_members(members, NameField.NAME)

        assert [m.first_name for m in result] == ["C", "A"]


class TestMembersByField:
    def test_builds_one_list_per_field(self):
        john = _member("John", NameField.NAME, NameField.INFORMAL_GREETING)
        jane = _member("Jane")

        result = members_by_field([john, jane])

        assert result[NameField.NAME] == [jane]
        assert result[NameField.FORMAL_GREETING] == [john, jane]
        assert result[NameField.INFORMAL_GREETING] == [jane]


class TestPrimaryFirst:
    def test_moves_primary_member_to_front(self):
        john, jane, timmy = _member("John"), _member("Jane"), _member("Timmy")

        result = primary_first([john, jane, timmy], timmy.id)

        assert result == [timmy, john, jane]

    def test_no_primary_keeps_order(self):
        members = [_member("John"), _member("Jane")]

        assert primary_first(members, None) == members
