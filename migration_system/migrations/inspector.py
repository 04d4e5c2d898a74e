"""
Migration Inspector

Lists the migrations known to the EF tool and classifies them.
"""

import logging

from ..error_handling import MigrationInspectionFailed, MigrationSystemError
from .ef_tool import EfTool
from .listing_parser import parse_migration_listing
from .models import MigrationSnapshot

logger = logging.getLogger(__name__)


class MigrationInspector:
    """Reads migration state from the database through dotnet-ef."""

    def __init__(self, ef_tool: EfTool):
        self.ef_tool = ef_tool

    def list_migrations(
        self, env_name: str, home: str, migrations_folder: str, use_global_tool: bool
    ) -> MigrationSnapshot:
        """List all migrations with their applied/pending status."""
        logger.info(f"Listing migrations for {migrations_folder} ({env_name})...")
        try:
            output = self.ef_tool.list_migrations(
                env_name, home, migrations_folder, use_global_tool
            )
        except MigrationSystemError as e:
            raise MigrationInspectionFailed(env_name, cause=e) from e

        logger.debug(f"Full migration output:\n{output}")
        snapshot = parse_migration_listing(output)
        logger.info(
            f"Found {len(snapshot)} migrations "
            f"({len(snapshot.applied)} applied, {len(snapshot.pending)} pending)"
        )
        return snapshot

    def get_last_non_pending_migration(
        self, env_name: str, home: str, migrations_folder: str, use_global_tool: bool
    ) -> str:
        snapshot = self.list_migrations(
            env_name, home, migrations_folder, use_global_tool
        )
        last_migration = snapshot.last_non_pending()
        logger.info(f"Last non-pending migration: {last_migration}")
        return last_migration

    def get_current_applied_migration(
        self, env_name: str, home: str, migrations_folder: str, use_global_tool: bool
    ) -> str:
        snapshot = self.list_migrations(
            env_name, home, migrations_folder, use_global_tool
        )
        last_applied = snapshot.current_applied()
        logger.info(f"Current applied migration: {last_applied}")
        return last_applied
