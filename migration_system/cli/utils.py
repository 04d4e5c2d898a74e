"""
CLI Utilities

Utility functions for the command-line interface.
"""

import json
import logging
import os
from typing import Any, Mapping, Optional

logger = logging.getLogger(__name__)


class CLIUtils:
    """Utility functions for CLI operations."""

    @staticmethod
    def format_json(data: Any, indent: int = 2) -> str:
        """Format data as JSON string."""
        return json.dumps(data, indent=indent, default=str)

    @staticmethod
    def print_table(headers: list, rows: list) -> None:
        """Print data in table format."""
        if not rows:
            print("No data to display")
            return

        widths = [len(str(header)) for header in headers]
        for row in rows:
            for i, cell in enumerate(row):
                if i < len(widths):
                    widths[i] = max(widths[i], len(str(cell)))

        header_row = " | ".join(
            str(headers[i]).ljust(widths[i]) for i in range(len(headers))
        )
        print(header_row)
        print("-" * len(header_row))

        for row in rows:
            print(" | ".join(str(row[i]).ljust(widths[i]) for i in range(len(row))))

    @staticmethod
    def write_outputs(
        outputs: Mapping[str, Any], output_file: Optional[str] = None
    ) -> bool:
        """Append ``key=value`` step outputs to the GITHUB_OUTPUT file.

        Returns False when no output file is configured.
        """
        path = output_file or os.environ.get("GITHUB_OUTPUT")
        if not path:
            return False

        with open(path, "a", encoding="utf-8") as f:
            for key, value in outputs.items():
                f.write(f"{key}={CLIUtils.format_output_value(value)}\n")

        logger.debug(f"Wrote {len(outputs)} step outputs to {path}")
        return True

    @staticmethod
    def format_output_value(value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)
