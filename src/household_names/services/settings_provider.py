"""Naming settings snapshots handed to a single unit of work."""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from household_names.config import (
    DEFAULT_FORMAL_GREETING_FORMAT,
    DEFAULT_INFORMAL_GREETING_FORMAT,
    DEFAULT_NAME_FORMAT,
    DEFAULT_RESET_PLACEHOLDER,
    Settings,
    get_settings,
)
from household_names.domain.value_objects import NameField


@dataclass(frozen=True)
class NamingSettings:
    advanced_naming_enabled: bool = True
    strategy: str = "format"
    name_format: str = DEFAULT_NAME_FORMAT
    formal_greeting_format: str = DEFAULT_FORMAL_GREETING_FORMAT
    informal_greeting_format: str = DEFAULT_INFORMAL_GREETING_FORMAT
    name_connector: str = "and"
    name_overrun: str = "Family"
    contact_overrun_count: int = 9
    reset_placeholder: str = DEFAULT_RESET_PLACEHOLDER

    def format_for(self, name_field: NameField) -> str:
        return {
            NameField.NAME: self.name_format,
            NameField.FORMAL_GREETING: self.formal_greeting_format,
            NameField.INFORMAL_GREETING: self.informal_greeting_format,
        }[name_field]

    def is_reset_value(self, value: str | None) -> bool:
        return not value or not value.strip() or value == self.reset_placeholder

    @classmethod
    def from_settings(cls, settings: Settings) -> "NamingSettings":
        return cls(
            advanced_naming_enabled=settings.advanced_naming_enabled,
            strategy=settings.naming_strategy,
            name_format=settings.name_format,
            formal_greeting_format=settings.formal_greeting_format,
            informal_greeting_format=settings.informal_greeting_format,
            name_connector=settings.name_connector,
            name_overrun=settings.name_overrun,
            contact_overrun_count=settings.contact_overrun_count,
            reset_placeholder=settings.reset_placeholder,
        )


class SettingsProvider(ABC):
    @abstractmethod
    def load(self) -> NamingSettings:
        """Return the settings snapshot for one unit of work."""


class StaticSettingsProvider(SettingsProvider):
    def __init__(self, settings: NamingSettings | None = None) -> None:
        self._settings = settings or NamingSettings()

    def load(self) -> NamingSettings:
        return self._settings


class EnvironmentSettingsProvider(SettingsProvider):
    """Reads naming settings from the pydantic application settings."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings

    def load(self) -> NamingSettings:
        return NamingSettings.from_settings(self._settings or get_settings())
