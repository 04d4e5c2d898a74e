"""
Migrations Module

Inspection, application and rollback of EF Core migrations.
"""

from .applier import MigrationApplier
from .ef_tool import EfTool
from .inspector import MigrationInspector
from .listing_parser import classify_line, parse_migration_listing
from .models import NO_BASELINE, MigrationEntry, MigrationSnapshot, MigrationStatus
from .reverter import MigrationReverter

__all__ = [
    "EfTool",
    "MigrationInspector",
    "MigrationApplier",
    "MigrationReverter",
    "MigrationEntry",
    "MigrationSnapshot",
    "MigrationStatus",
    "NO_BASELINE",
    "classify_line",
    "parse_migration_listing",
]
