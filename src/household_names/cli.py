"""Command-line interface for Household Names."""

import argparse
import sys
from dataclasses import replace
from pathlib import Path
from uuid import UUID

from household_names import __version__
from household_names.config import get_settings
from household_names.container import Container
from household_names.domain.households import Household, Member
from household_names.domain.value_objects import HouseholdKind, NameField, parse_name_fields
from household_names.exceptions import HouseholdNamesError
from household_names.logging_config import configure_logging
from household_names.services.exclusions import members_by_field
from household_names.services.naming import NAMING_STRATEGIES, get_naming_strategy
from household_names.services.settings_provider import NamingSettings

FIELD_LABELS = {
    NameField.NAME: "Name",
    NameField.FORMAL_GREETING: "Formal Greeting",
    NameField.INFORMAL_GREETING: "Informal Greeting",
}


def get_default_db_path() -> Path:
    """Get the default database path from settings."""
    return Path(get_settings().sqlite_path)


def _db_path(args: argparse.Namespace) -> Path:
    return Path(args.database) if args.database else get_default_db_path()


def _open_container(args: argparse.Namespace) -> Container | None:
    db_path = _db_path(args)
    if not db_path.exists():
        print(f"Error: Database not found at {db_path}")
        print("Run 'household-names init' first")
        return None
    return Container(database_path=db_path)


def _print_household(household: Household) -> None:
    print(f"  {household.id}")
    print(f"    Kind: {household.kind.value}")
    for name_field, label in FIELD_LABELS.items():
        flag = " (custom)" if name_field in household.overrides else ""
        print(f"    {label}: {household.get_field(name_field)}{flag}")
    print(f"    Members: {household.member_count}")
    if household.primary_member_id:
        print(f"    Primary Member: {household.primary_member_id}")


def cmd_init(args: argparse.Namespace) -> int:
    """Initialize a new database."""
    db_path = _db_path(args)

    if db_path.exists() and not args.force:
        print(f"Database already exists at {db_path}")
        print("Use --force to reinitialize (WARNING: will delete existing data)")
        return 1

    if db_path.exists() and args.force:
        db_path.unlink()

    with Container(database_path=db_path) as container:
        container.database.initialize()

    print(f"Initialized database at {db_path}")
    return 0


def cmd_version(args: argparse.Namespace) -> int:
    """Show version."""
    print(f"household-names {__version__}")
    return 0


def cmd_household_create(args: argparse.Namespace) -> int:
    """Create a household or household account."""
    container = _open_container(args)
    if container is None:
        return 1

    with container:
        household = Household(name=args.name or "", kind=HouseholdKind(args.kind))
        container.dispatcher.add_household(household)
        print(f"Created {household.kind.value}: {household.id}")
    return 0


def cmd_household_list(args: argparse.Namespace) -> int:
    """List all households."""
    container = _open_container(args)
    if container is None:
        return 1

    with container:
        households = list(container.household_repository.list_all())
        if not households:
            print("No households found.")
            return 0

        print("Households:")
        print("=" * 70)
        for household in households:
            _print_household(household)
            print()
    return 0


def cmd_household_show(args: argparse.Namespace) -> int:
    """Show a household, its members and what each field is built from."""
    container = _open_container(args)
    if container is None:
        return 1

    try:
        household_id = UUID(args.household_id)
    except ValueError:
        print(f"Error: Invalid household ID: {args.household_id}")
        return 1

    with container:
        household = container.household_repository.get(household_id)
        if household is None:
            print(f"Error: Household {args.household_id} not found")
            return 1

        _print_household(household)
        members = container.member_repository.list_for_households([household.id])
        print()
        print("  Members (naming order):")
        for member in members:
            primary = " [primary]" if member.is_primary else ""
            print(f"    {member.id}  {member.first_name} {member.last_name}{primary}")

        print()
        print("  Contributing members:")
        for name_field, contributors in members_by_field(members).items():
            names = ", ".join(f"{m.first_name} {m.last_name}".strip() for m in contributors)
            print(f"    {FIELD_LABELS[name_field]}: {names or '-'}")
    return 0


def cmd_household_set_field(args: argparse.Namespace) -> int:
    """Edit a name field by hand; an empty value asks for a recompute."""
    container = _open_container(args)
    if container is None:
        return 1

    try:
        household_id = UUID(args.household_id)
    except ValueError:
        print(f"Error: Invalid household ID: {args.household_id}")
        return 1

    try:
        with container:
            household = container.household_repository.get(household_id)
            if household is None:
                print(f"Error: Household {args.household_id} not found")
                return 1

            name_field = NameField(args.field)
            saved = container.dispatcher.update_household(
                household.with_field(name_field, args.value)
            )
            custom = "custom" if name_field in saved.overrides else "automatic"
            print(f"Set {FIELD_LABELS[name_field]} ({custom}): {saved.get_field(name_field)}")
        return 0

    except HouseholdNamesError as e:
        print(f"Error: {e}")
        return 1


def cmd_member_add(args: argparse.Namespace) -> int:
    """Add a member to a household."""
    container = _open_container(args)
    if container is None:
        return 1

    try:
        household_id = UUID(args.household_id)
    except ValueError:
        print(f"Error: Invalid household ID: {args.household_id}")
        return 1

    with container:
        household = container.household_repository.get(household_id)
        if household is None:
            print(f"Error: Household {args.household_id} not found")
            return 1

        member = Member(
            household_id=household.id,
            first_name=args.first_name or "",
            last_name=args.last_name,
            salutation=args.salutation or "",
            suffix=args.suffix or "",
            naming_exclusions=parse_name_fields(
                ";".join((args.exclude or "").split(","))
            ),
            naming_order=args.order,
            is_primary=args.primary,
        )
        container.dispatcher.add_member(member)
        print(f"Added member {member.id} to household {household.id}")
    return 0


def cmd_member_remove(args: argparse.Namespace) -> int:
    """Remove a member."""
    container = _open_container(args)
    if container is None:
        return 1

    try:
        member_id = UUID(args.member_id)
    except ValueError:
        print(f"Error: Invalid member ID: {args.member_id}")
        return 1

    try:
        with container:
            container.dispatcher.remove_member(member_id)
            print(f"Removed member {args.member_id}")
        return 0

    except HouseholdNamesError as e:
        print(f"Error: {e}")
        return 1


def cmd_names_update(args: argparse.Namespace) -> int:
    """Recompute names for specific households."""
    container = _open_container(args)
    if container is None:
        return 1

    household_ids = []
    for raw_id in args.household_ids:
        try:
            household_ids.append(UUID(raw_id))
        except ValueError:
            print(f"Error: Invalid household ID: {raw_id}")
            return 1

    try:
        with container:
            updated = container.name_updater.update_names(household_ids)
            print(f"Updated {len(updated)} household(s)")
            for household in updated:
                _print_household(household)
        return 0

    except HouseholdNamesError as e:
        print(f"Error: {e}")
        return 1


def cmd_names_refresh(args: argparse.Namespace) -> int:
    """Recompute names for every household with members."""
    container = _open_container(args)
    if container is None:
        return 1

    with container:
        summary = container.bulk_refresh_driver.refresh_all(is_activation=args.activation)
        container.executor.drain()

    print("Refresh complete" if summary.chunks_failed == 0 else "Refresh finished with errors")
    print(f"  Chunks: {summary.chunks_completed}/{summary.chunks_submitted}")
    print(f"  Failed chunks: {summary.chunks_failed}")
    print(f"  Households updated: {summary.households_updated}")
    return 0 if summary.chunks_failed == 0 else 1


def cmd_names_preview(args: argparse.Namespace) -> int:
    """Show example names for the configured naming strategy."""
    naming_settings = NamingSettings.from_settings(get_settings())
    if args.strategy:
        naming_settings = replace(naming_settings, strategy=args.strategy)

    examples = get_naming_strategy(naming_settings).example_names()
    print(f"Strategy: {naming_settings.strategy}")
    print("Sample members: Mr. John Smith, Mrs. Jane Smith, Sam Jones")
    for name_field, label in FIELD_LABELS.items():
        print(f"  {label}: {examples[name_field]}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="household-names",
        description="Household Names - Household naming and greeting maintenance",
    )
    parser.add_argument(
        "--database",
        "-d",
        help="Path to SQLite database file",
        default=None,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # init command
    init_parser = subparsers.add_parser("init", help="Initialize a new database")
    init_parser.add_argument(
        "--force",
        "-f",
        action="store_true",
        help="Force reinitialization (deletes existing data)",
    )
    init_parser.set_defaults(func=cmd_init)

    # version command
    version_parser = subparsers.add_parser("version", help="Show version")
    version_parser.set_defaults(func=cmd_version)

    # household command group
    household_parser = subparsers.add_parser("household", help="Household commands")
    household_subparsers = household_parser.add_subparsers(
        dest="household_command", help="Household subcommands"
    )

    household_create_parser = household_subparsers.add_parser(
        "create", help="Create a household"
    )
    household_create_parser.add_argument("--name", default=None, help="Initial name")
    household_create_parser.add_argument(
        "--kind",
        choices=[k.value for k in HouseholdKind],
        default=HouseholdKind.HOUSEHOLD.value,
        help="Record kind backing the household (default: household)",
    )
    household_create_parser.set_defaults(func=cmd_household_create)

    household_list_parser = household_subparsers.add_parser(
        "list", help="List households"
    )
    household_list_parser.set_defaults(func=cmd_household_list)

    household_show_parser = household_subparsers.add_parser(
        "show", help="Show a household"
    )
    household_show_parser.add_argument("household_id", help="Household ID")
    household_show_parser.set_defaults(func=cmd_household_show)

    household_set_parser = household_subparsers.add_parser(
        "set-field", help="Edit a name field (empty value resets it)"
    )
    household_set_parser.add_argument("household_id", help="Household ID")
    household_set_parser.add_argument(
        "field", choices=[f.value for f in NameField], help="Field to edit"
    )
    household_set_parser.add_argument("value", help="New value")
    household_set_parser.set_defaults(func=cmd_household_set_field)

    # member command group
    member_parser = subparsers.add_parser("member", help="Member commands")
    member_subparsers = member_parser.add_subparsers(
        dest="member_command", help="Member subcommands"
    )

    member_add_parser = member_subparsers.add_parser("add", help="Add a member")
    member_add_parser.add_argument("household_id", help="Household ID")
    member_add_parser.add_argument("--last-name", required=True, help="Last name")
    member_add_parser.add_argument("--first-name", default=None, help="First name")
    member_add_parser.add_argument("--salutation", default=None, help="Salutation")
    member_add_parser.add_argument("--suffix", default=None, help="Suffix")
    member_add_parser.add_argument(
        "--primary", action="store_true", help="Mark as the primary member"
    )
    member_add_parser.add_argument(
        "--order", type=int, default=None, help="Household naming order"
    )
    member_add_parser.add_argument(
        "--exclude",
        default=None,
        help="Comma-separated fields to exclude this member from "
        "(name, formal_greeting, informal_greeting)",
    )
    member_add_parser.set_defaults(func=cmd_member_add)

    member_remove_parser = member_subparsers.add_parser(
        "remove", help="Remove a member"
    )
    member_remove_parser.add_argument("member_id", help="Member ID")
    member_remove_parser.set_defaults(func=cmd_member_remove)

    # names command group
    names_parser = subparsers.add_parser("names", help="Naming commands")
    names_subparsers = names_parser.add_subparsers(
        dest="names_command", help="Naming subcommands"
    )

    names_update_parser = names_subparsers.add_parser(
        "update", help="Recompute names for households"
    )
    names_update_parser.add_argument("household_ids", nargs="+", help="Household IDs")
    names_update_parser.set_defaults(func=cmd_names_update)

    names_refresh_parser = names_subparsers.add_parser(
        "refresh", help="Recompute names for all households"
    )
    names_refresh_parser.add_argument(
        "--activation",
        action="store_true",
        help="Naming was just switched on: keep hand-typed names as custom",
    )
    names_refresh_parser.set_defaults(func=cmd_names_refresh)

    names_preview_parser = names_subparsers.add_parser(
        "preview", help="Show example names"
    )
    names_preview_parser.add_argument(
        "--strategy",
        choices=sorted(NAMING_STRATEGIES),
        default=None,
        help="Strategy to preview (default: configured strategy)",
    )
    names_preview_parser.set_defaults(func=cmd_names_preview)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "household" and (
        not hasattr(args, "household_command") or args.household_command is None
    ):
        household_parser.print_help()
        return 0

    if args.command == "member" and (
        not hasattr(args, "member_command") or args.member_command is None
    ):
        member_parser.print_help()
        return 0

    if args.command == "names" and (
        not hasattr(args, "names_command") or args.names_command is None
    ):
        names_parser.print_help()
        return 0

    configure_logging()
    result: int = args.func(args)
    return result


if __name__ == "__main__":
    sys.exit(main())
