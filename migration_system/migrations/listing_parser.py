"""
Migration Listing Parser

Turns the text printed by ``dotnet ef migrations list`` into a
MigrationSnapshot. This is the only place that knows the marker format.
"""

import re
from typing import Optional

from .models import MigrationEntry, MigrationSnapshot, MigrationStatus

APPLIED_MARKER = re.compile(r"\[applied\]", re.IGNORECASE)
PENDING_MARKER = re.compile(r"\(pending\)", re.IGNORECASE)

# Progress lines printed while dotnet-ef builds the project
BUILD_PROGRESS = re.compile(r"^build (started|succeeded)\b", re.IGNORECASE)


def classify_line(line: str) -> Optional[MigrationEntry]:
    """Classify one output line; blank and build progress lines return None.

    Lines carrying neither marker are treated as pending so they can never
    be chosen as a rollback target.
    """
    text = line.strip()
    if not text or BUILD_PROGRESS.match(text):
        return None

    if APPLIED_MARKER.search(text):
        return MigrationEntry(
            name=APPLIED_MARKER.sub("", text).strip(),
            status=MigrationStatus.APPLIED,
        )

    if PENDING_MARKER.search(text):
        return MigrationEntry(
            name=PENDING_MARKER.sub("", text).strip(),
            status=MigrationStatus.PENDING,
        )

    return MigrationEntry(name=text, status=MigrationStatus.PENDING)


def parse_migration_listing(output: str) -> MigrationSnapshot:
    """Parse a full listing, preserving the tool's order."""
    entries = []
    for line in output.splitlines():
        entry = classify_line(line)
        if entry is not None:
            entries.append(entry)
    return MigrationSnapshot.from_entries(entries)
