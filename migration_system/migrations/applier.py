"""
Migration Applier

Brings the database up to the latest migration.
"""

import logging

from ..error_handling import MigrationApplyFailed, MigrationSystemError
from .ef_tool import EfTool
from .inspector import MigrationInspector
from .models import NO_BASELINE

logger = logging.getLogger(__name__)


class MigrationApplier:
    """Applies pending migrations and reports what became current."""

    def __init__(self, ef_tool: EfTool, inspector: MigrationInspector):
        self.ef_tool = ef_tool
        self.inspector = inspector

    def apply_pending(
        self, env_name: str, home: str, migrations_folder: str, use_global_tool: bool
    ) -> str:
        """Apply every pending migration.

        Returns the migration that is current after the update, or
        NO_BASELINE when the update left the applied migration unchanged.
        The before/after listings make the result independent of whether
        the tool call itself was a no-op.
        """
        try:
            before = self.inspector.list_migrations(
                env_name, home, migrations_folder, use_global_tool
            )
            if not before.has_pending:
                logger.info("No pending migrations detected.")
                return NO_BASELINE

            logger.info(
                f"Applying {len(before.pending)} pending migrations "
                f"(latest: {before.pending[-1].name})..."
            )
            self.ef_tool.update_database(
                env_name, home, migrations_folder, use_global_tool
            )

            after = self.inspector.list_migrations(
                env_name, home, migrations_folder, use_global_tool
            )
        except MigrationSystemError as e:
            raise MigrationApplyFailed(env_name, cause=e) from e

        current = after.current_applied()
        if current == before.current_applied():
            logger.info("Database update did not change the applied migration.")
            return NO_BASELINE

        logger.info(f"Migrations applied successfully. Current migration: {current}")
        return current
