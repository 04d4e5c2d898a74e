"""
Migration Models

Data structures describing one migration listing.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator, List

# Returned when no migration qualifies; "0" is also the EF target that
# reverts every migration, which is why rollback treats it as "nothing to undo".
NO_BASELINE = "0"


class MigrationStatus(Enum):
    """Status of a migration in a single listing."""

    APPLIED = "applied"
    PENDING = "pending"


@dataclass(frozen=True)
class MigrationEntry:
    """A migration name paired with the status it was listed with."""

    name: str
    status: MigrationStatus

    @property
    def is_applied(self) -> bool:
        return self.status == MigrationStatus.APPLIED

    @property
    def is_pending(self) -> bool:
        return self.status == MigrationStatus.PENDING


@dataclass(frozen=True)
class MigrationSnapshot:
    """Migrations in the order the tool listed them, oldest first."""

    entries: tuple = field(default_factory=tuple)

    @classmethod
    def from_entries(cls, entries: List[MigrationEntry]) -> "MigrationSnapshot":
        return cls(entries=tuple(entries))

    def __iter__(self) -> Iterator[MigrationEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def names(self) -> List[str]:
        return [entry.name for entry in self.entries]

    @property
    def applied(self) -> List[MigrationEntry]:
        return [entry for entry in self.entries if entry.is_applied]

    @property
    def pending(self) -> List[MigrationEntry]:
        return [entry for entry in self.entries if entry.is_pending]

    @property
    def has_pending(self) -> bool:
        return any(entry.is_pending for entry in self.entries)

    def last_non_pending(self) -> str:
        """Name of the last entry that is not pending, or NO_BASELINE."""
        for entry in reversed(self.entries):
            if not entry.is_pending:
                return entry.name
        return NO_BASELINE

    def current_applied(self) -> str:
        """Name of the last applied entry, or NO_BASELINE."""
        for entry in reversed(self.entries):
            if entry.is_applied:
                return entry.name
        return NO_BASELINE

    def contains(self, name: str) -> bool:
        return any(entry.name == name for entry in self.entries)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "migrations": [
                {"name": entry.name, "status": entry.status.value}
                for entry in self.entries
            ],
            "last_non_pending": self.last_non_pending(),
            "current_applied": self.current_applied(),
        }
