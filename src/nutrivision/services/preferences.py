"""User preference service."""

from dataclasses import dataclass
from typing import Protocol


class PreferencesRepository(Protocol):
    """Persistence interface for display preferences."""

    def get_dark_mode(self) -> bool | None:
        """Return the stored theme preference if set."""

    def set_dark_mode(self, enabled: bool) -> None:
        """Update the theme preference."""


@dataclass
class PreferencesService:
    """Service for display preferences."""

    repository: PreferencesRepository

    def is_dark_mode(self) -> bool:
        """Return the theme preference, dark by default."""
        stored = self.repository.get_dark_mode()
        return True if stored is None else stored

    def set_dark_mode(self, enabled: bool) -> None:
        """Persist the theme preference."""
        self.repository.set_dark_mode(enabled)
