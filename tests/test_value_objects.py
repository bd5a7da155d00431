from household_names.domain.households import Household, Member
from household_names.domain.value_objects import (
    NameField,
    OverrideMarker,
    parse_name_fields,
    serialize_name_fields,
)


class TestOverrideMarker:
    def test_empty_marker_serializes_to_empty_string(self):
        assert OverrideMarker().serialize() == ""
        assert not OverrideMarker()

    def test_serializes_in_canonical_order(self):
        marker = OverrideMarker(
            frozenset({NameField.INFORMAL_GREETING, NameField.NAME})
        )

        assert marker.serialize() == "name;informal_greeting"

    def test_adding_same_field_twice_is_idempotent(self):
        marker = OverrideMarker().with_field(NameField.NAME)

        again = marker.with_field(NameField.NAME)

        assert again == marker
        assert again.serialize() == "name"

    def test_without_field_removes_entry(self):
        marker = OverrideMarker.parse("name;formal_greeting")

        assert marker.without_field(NameField.NAME).serialize() == "formal_greeting"

    def test_without_missing_field_is_noop(self):
        marker = OverrideMarker.parse("name")

        assert marker.without_field(NameField.INFORMAL_GREETING) == marker

    def test_parse_drops_duplicates_blanks_and_unknown_entries(self):
        marker = OverrideMarker.parse(" name;;name;nickname;formal_greeting ")

        assert list(marker) == [NameField.NAME, NameField.FORMAL_GREETING]
        assert len(marker) == 2

    def test_parse_none(self):
        assert OverrideMarker.parse(None) == OverrideMarker()

    def test_contains(self):
        marker = OverrideMarker.parse("formal_greeting")

        assert NameField.FORMAL_GREETING in marker
        assert NameField.NAME not in marker


class TestNameFieldSerialization:
    def test_round_trip_through_storage_format(self):
        fields = frozenset({NameField.NAME, NameField.INFORMAL_GREETING})

        assert parse_name_fields(serialize_name_fields(fields)) == fields


class TestHousehold:
    def test_field_access_by_name_field(self):
        household = Household(name="Smith Household", formal_greeting="Mr. John Smith")

        assert household.get_field(NameField.NAME) == "Smith Household"
        assert household.get_field(NameField.FORMAL_GREETING) == "Mr. John Smith"

    def test_with_field_returns_copy(self):
        household = Household(name="Smith Household")

        renamed = household.with_field(NameField.NAME, "The Smiths")

        assert renamed.name == "The Smiths"
        assert household.name == "Smith Household"
        assert renamed.id == household.id

    def test_has_same_values_ignores_timestamps(self):
        household = Household(name="Smith Household", member_count=2)

        assert household.has_same_values(household.touched())
        assert not household.has_same_values(household.with_field(NameField.NAME, "x"))


class TestMember:
    def test_exclusion_is_per_field(self):
        member = Member(
            last_name="Smith",
            naming_exclusions=frozenset({NameField.FORMAL_GREETING}),
        )

        assert member.is_excluded_from(NameField.FORMAL_GREETING)
        assert not member.is_excluded_from(NameField.NAME)
        assert not member.is_excluded_from(NameField.INFORMAL_GREETING)
