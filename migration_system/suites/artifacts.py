"""
Test Result Artifacts

Publishes test result files after a run.
"""

import logging
import shutil
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List

from ..error_handling import ArtifactUploadError, ErrorContext

logger = logging.getLogger(__name__)


class ArtifactUploader(ABC):
    """Abstract base class for artifact publishers."""

    @abstractmethod
    def upload(self, artifact_name: str, files: List[str], root_directory: str) -> List[str]:
        """Publish ``files`` under ``artifact_name`` and return their new locations."""
        pass


class DirectoryArtifactUploader(ArtifactUploader):
    """Copies artifacts into a local directory, keeping paths relative to the root."""

    def __init__(self, artifacts_dir: str):
        self.artifacts_dir = Path(artifacts_dir)

    def upload(self, artifact_name: str, files: List[str], root_directory: str) -> List[str]:
        destination = self.artifacts_dir / artifact_name
        root = Path(root_directory).resolve()
        uploaded = []

        for file_name in files:
            source = Path(file_name).resolve()
            if not source.is_file():
                raise ArtifactUploadError(
                    f"Artifact file not found: {source}",
                    context=ErrorContext(file_path=str(source), operation="upload"),
                )

            try:
                relative = source.relative_to(root)
            except ValueError:
                relative = Path(source.name)

            target = destination / relative
            try:
                target.parent.mkdir(parents=True, exist_ok=True)
                shutil.copy2(source, target)
            except OSError as e:
                raise ArtifactUploadError(
                    f"Failed to copy {source} to {target}: {e}",
                    context=ErrorContext(file_path=str(source), operation="upload"),
                    cause=e,
                ) from e

            uploaded.append(str(target))

        logger.info(f"Uploaded {len(uploaded)} files to artifact '{artifact_name}'")
        return uploaded
