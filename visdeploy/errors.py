"""Error types for visualizer deployment.

Every failure the deployer can hit is mapped to one of these, so callers
can decide per type whether to log and continue or stop.
"""

from typing import Optional


class DeployError(Exception):
    """Base exception for deployment errors."""
    pass


class FileDeployError(DeployError):
    """Error tied to a single file on disk."""

    def __init__(self, path, message: Optional[str] = None):
        self.path = str(path)
        super().__init__(message or f"{self.__class__.__name__}: {self.path}")


class SourceMissingOrUnreadable(FileDeployError):
    """Source file is absent or its version info cannot be read."""
    pass


class DestinationUnwritable(FileDeployError):
    """Destination directory missing, or write denied."""
    pass


class VersionMetadataAbsent(FileDeployError):
    """File exists but carries no version resource."""
    pass


class HostError(DeployError):
    """Visual Studio directory could not be obtained from the host."""
    pass


class DeploymentFailed(DeployError):
    """Raised when a batch finished with failed files."""

    def __init__(self, report):
        self.report = report
        failed = ', '.join(r.file_name for r in report.failed)
        super().__init__(f"{len(report.failed)} file(s) failed to deploy: {failed}")
