"""
Test Suites Module

Test suite execution and result artifact publishing.
"""

from .artifacts import ArtifactUploader, DirectoryArtifactUploader
from .dotnet_suite import DotnetTestRunner, TestRunResult

__all__ = [
    "DotnetTestRunner",
    "TestRunResult",
    "ArtifactUploader",
    "DirectoryArtifactUploader",
]
