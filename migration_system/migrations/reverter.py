"""
Migration Reverter

Moves the database to an explicitly named migration.
"""

import logging

from ..error_handling import MigrationRollbackFailed, MigrationSystemError
from .ef_tool import EfTool

logger = logging.getLogger(__name__)


class MigrationReverter:
    """Runs ``database update <target>`` in either direction."""

    def __init__(self, ef_tool: EfTool):
        self.ef_tool = ef_tool

    def revert_to(
        self,
        env_name: str,
        home: str,
        migrations_folder: str,
        use_global_tool: bool,
        target: str,
    ) -> None:
        # Unknown targets are rejected by dotnet-ef itself.
        logger.info(f"Rolling back to migration: {target}...")
        try:
            self.ef_tool.update_database(
                env_name, home, migrations_folder, use_global_tool, target=target
            )
        except MigrationSystemError as e:
            raise MigrationRollbackFailed(env_name, target, cause=e) from e

        logger.info("Rollback completed successfully.")
