"""Naming strategies producing household names and greetings.

A strategy renders one field at a time from an ordered member sequence; the
caller filters exclusions per field before invoking it. Strategies are looked
up in a static registry keyed by the configured identifier.

Format strings use ``{!Token}`` placeholders. Text before the first
placeholder and after the last closing brace is emitted once; the section in
between is rendered per last-name group, and an optional nested
``{!{!...}}`` chunk is rendered per member of the group::

    "{!LastName} Household"                     -> "Smith and Jones Household"
    "{!{!Salutation} {!FirstName}} {!LastName}" -> "Mr. John and Mrs. Jane Smith"
    "{!{!FirstName}}"                           -> "John, Jane and Sam"
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace

from household_names.config import (
    DEFAULT_FORMAL_GREETING_FORMAT,
    DEFAULT_INFORMAL_GREETING_FORMAT,
    DEFAULT_NAME_FORMAT,
)
from household_names.domain.households import Member
from household_names.domain.value_objects import NameField
from household_names.exceptions import (
    InvalidNameFormatError,
    NamingStrategyError,
    UnknownNamingStrategyError,
)
from household_names.logging_config import get_logger
from household_names.services.settings_provider import NamingSettings

logger = get_logger(__name__)

TOKEN_ATTRIBUTES = {
    "Salutation": "salutation",
    "FirstName": "first_name",
    "LastName": "last_name",
    "Suffix": "suffix",
}

_TOKEN_RE = re.compile(r"\{!(\w+)\}")
_CHUNK_OPEN = "{!{!"


def _collapse(text: str) -> str:
    return " ".join(text.split())


def join_with_connector(parts: Sequence[str], connector: str) -> str:
    """``["a", "b", "c"]`` -> ``"a, b and c"``."""
    if not parts:
        return ""
    if len(parts) == 1:
        return parts[0]
    return f"{', '.join(parts[:-1])} {connector} {parts[-1]}"


def _substitute(template: str, member: Member) -> str:
    return _TOKEN_RE.sub(
        lambda m: getattr(member, TOKEN_ATTRIBUTES[m.group(1)]) or "", template
    )


def sample_members() -> list[Member]:
    return [
        Member(salutation="Mr.", first_name="John", last_name="Smith", is_primary=True),
        Member(salutation="Mrs.", first_name="Jane", last_name="Smith"),
        Member(first_name="Sam", last_name="Jones"),
    ]


class NamingStrategy(ABC):
    def __init__(self, settings: NamingSettings) -> None:
        self._settings = settings

    @abstractmethod
    def render(self, name_field: NameField, members: Sequence[Member]) -> str:
        """Render one field; an empty member sequence renders as ``""``."""

    @abstractmethod
    def fields_in_use(self) -> frozenset[str]:
        """Member attributes whose changes affect rendered names."""

    def example_names(
        self, members: Sequence[Member] | None = None
    ) -> dict[NameField, str]:
        members = sample_members() if members is None else list(members)
        return {f: self.render(f, members) for f in NameField}


@dataclass(frozen=True)
class ParsedFormat:
    source: str
    prefix: str
    body_before: str
    member_chunk: str | None
    body_after: str
    suffix: str

    @property
    def tokens(self) -> frozenset[str]:
        text = self.body_before + (self.member_chunk or "") + self.body_after
        return frozenset(_TOKEN_RE.findall(text))

    @property
    def groups_by_last_name(self) -> bool:
        return bool(_TOKEN_RE.search(self.body_before + self.body_after))


def parse_name_format(name_format: str) -> ParsedFormat:
    start = name_format.find("{!")
    if start == -1:
        return ParsedFormat(name_format, name_format, "", None, "", "")

    end = name_format.rfind("}")
    if end < start:
        raise InvalidNameFormatError(name_format, "unclosed placeholder")
    prefix = name_format[:start]
    middle = name_format[start : end + 1]
    suffix = name_format[end + 1 :]

    chunk_start = middle.find(_CHUNK_OPEN)
    member_chunk = None
    body_before, body_after = middle, ""
    if chunk_start != -1:
        depth = 1
        i = chunk_start + 2
        close = -1
        while i < len(middle):
            if middle.startswith("{!", i):
                depth += 1
                i += 2
                continue
            if middle[i] == "}":
                depth -= 1
                if depth == 0:
                    close = i
                    break
            i += 1
        if close == -1:
            raise InvalidNameFormatError(name_format, "unbalanced braces")
        member_chunk = middle[chunk_start + 2 : close]
        body_before = middle[:chunk_start]
        body_after = middle[close + 1 :]
        if _CHUNK_OPEN in member_chunk or _CHUNK_OPEN in body_after:
            raise InvalidNameFormatError(name_format, "only one member chunk is allowed")

    for text in (body_before, member_chunk or "", body_after):
        for token in _TOKEN_RE.findall(text):
            if token not in TOKEN_ATTRIBUTES:
                raise InvalidNameFormatError(name_format, f"unknown token {token!r}")
        leftover = _TOKEN_RE.sub("", text)
        if "{" in leftover or "}" in leftover:
            raise InvalidNameFormatError(name_format, "unbalanced braces")

    return ParsedFormat(name_format, prefix, body_before, member_chunk, body_after, suffix)


class FormatNamingStrategy(NamingStrategy):
    """Renders names from the configured format strings."""

    def __init__(self, settings: NamingSettings) -> None:
        super().__init__(settings)
        self._formats = {f: parse_name_format(settings.format_for(f)) for f in NameField}

    def fields_in_use(self) -> frozenset[str]:
        tokens = set()
        for parsed in self._formats.values():
            tokens |= parsed.tokens
        return frozenset(TOKEN_ATTRIBUTES[t] for t in tokens)

    def render(self, name_field: NameField, members: Sequence[Member]) -> str:
        if not members:
            return ""
        parsed = self._formats[name_field]
        connector = self._settings.name_connector
        overrun = len(members) > self._settings.contact_overrun_count
        if overrun:
            members = members[: self._settings.contact_overrun_count]

        if parsed.groups_by_last_name:
            groups: dict[str, list[Member]] = {}
            for member in members:
                groups.setdefault(member.last_name, []).append(member)
            grouped = list(groups.values())
        else:
            grouped = [list(members)]

        rendered = [self._render_group(parsed, group) for group in grouped]
        rendered = [r for r in rendered if r]
        if overrun:
            body = f"{', '.join(rendered)} {connector} {self._settings.name_overrun}"
        else:
            body = join_with_connector(rendered, connector)
        return _collapse(parsed.prefix + body + parsed.suffix)

    def _render_group(self, parsed: ParsedFormat, group: list[Member]) -> str:
        chunk_text = ""
        if parsed.member_chunk is not None:
            chunks = [_collapse(_substitute(parsed.member_chunk, m)) for m in group]
            chunk_text = join_with_connector(
                [c for c in chunks if c], self._settings.name_connector
            )
        before = _substitute(parsed.body_before, group[0])
        after = _substitute(parsed.body_after, group[0])
        return _collapse(before + chunk_text + after)


class LegacyNamingStrategy(NamingStrategy):
    """Fixed naming rules that predate configurable formats.

    Name is the distinct last names plus "Household"; the formal greeting
    factors a shared last name out of the member list; the informal
    greeting lists first names.
    """

    def fields_in_use(self) -> frozenset[str]:
        return frozenset({"salutation", "first_name", "last_name"})

    def render(self, name_field: NameField, members: Sequence[Member]) -> str:
        if not members:
            return ""
        connector = self._settings.name_connector
        last_names = list(dict.fromkeys(m.last_name for m in members if m.last_name))

        if name_field is NameField.NAME:
            if not last_names:
                return ""
            return f"{join_with_connector(last_names, connector)} Household"

        if name_field is NameField.INFORMAL_GREETING:
            return join_with_connector(
                [m.first_name for m in members if m.first_name], connector
            )

        if len(last_names) == 1:
            given = [_collapse(f"{m.salutation} {m.first_name}") for m in members]
            return _collapse(
                f"{join_with_connector([g for g in given if g], connector)} {last_names[0]}"
            )
        full = [_collapse(f"{m.salutation} {m.first_name} {m.last_name}") for m in members]
        return join_with_connector([f for f in full if f], connector)


DEFAULT_STRATEGY = "format"

NAMING_STRATEGIES: dict[str, Callable[[NamingSettings], NamingStrategy]] = {
    "format": FormatNamingStrategy,
    "legacy": LegacyNamingStrategy,
}


def create_naming_strategy(settings: NamingSettings) -> NamingStrategy:
    """Build the configured strategy, raising on misconfiguration."""
    factory = NAMING_STRATEGIES.get(settings.strategy)
    if factory is None:
        raise UnknownNamingStrategyError(settings.strategy)
    return factory(settings)


def get_naming_strategy(settings: NamingSettings) -> NamingStrategy:
    """Build the configured strategy, falling back to the default formats."""
    try:
        return create_naming_strategy(settings)
    except NamingStrategyError as e:
        logger.warning(
            "naming_strategy_fallback",
            strategy=settings.strategy,
            error_code=e.error_code,
            error=e.message,
        )
        return FormatNamingStrategy(
            replace(
                settings,
                strategy=DEFAULT_STRATEGY,
                name_format=DEFAULT_NAME_FORMAT,
                formal_greeting_format=DEFAULT_FORMAL_GREETING_FORMAT,
                informal_greeting_format=DEFAULT_INFORMAL_GREETING_FORMAT,
            )
        )
