"""File version metadata for deployed assemblies.

Reads the fixed file info block (VS_FIXEDFILEINFO) of a PE file's version
resource. Only major and minor take part in the version gate; build and
revision are kept for reporting.
"""

import logging
from pathlib import Path
from typing import Callable, NamedTuple, Optional

import win32api

from .errors import SourceMissingOrUnreadable, VersionMetadataAbsent

logger = logging.getLogger(__name__)

# Win32 error codes returned when a file has no version resource
# ERROR_RESOURCE_DATA_NOT_FOUND, ERROR_RESOURCE_TYPE_NOT_FOUND, ERROR_RESOURCE_NAME_NOT_FOUND
NO_VERSION_RESOURCE_ERRORS = {1812, 1813, 1814}


class FileVersion(NamedTuple):
    """Four-part file version (major.minor.build.revision)."""
    major: int
    minor: int
    build: int = 0
    revision: int = 0

    @property
    def gate_key(self):
        """The (major, minor) pair compared by the version gate."""
        return (self.major, self.minor)

    @classmethod
    def from_fixed_info(cls, info):
        """Build from the dict returned by GetFileVersionInfo(path, '\\')."""
        ms = info['FileVersionMS']
        ls = info['FileVersionLS']
        return cls(
            (ms >> 16) & 0xFFFF,
            ms & 0xFFFF,
            (ls >> 16) & 0xFFFF,
            ls & 0xFFFF,
        )

    def __str__(self):
        return f"{self.major}.{self.minor}.{self.build}.{self.revision}"


def _winerror(exc):
    """Extract the Win32 error code from a pywintypes.error, if any."""
    code = getattr(exc, 'winerror', None)
    if code is None and exc.args and isinstance(exc.args[0], int):
        code = exc.args[0]
    return code


def read_file_version(path) -> FileVersion:
    """Read the file version of a PE file.

    Args:
        path: Path to the file

    Returns:
        FileVersion of the file

    Raises:
        SourceMissingOrUnreadable: File is missing or cannot be read
        VersionMetadataAbsent: File has no version resource
    """
    path = Path(path)
    try:
        exists = path.is_file()
    except OSError as e:
        raise SourceMissingOrUnreadable(path, f"Cannot access {path}: {e}") from e
    if not exists:
        raise SourceMissingOrUnreadable(path, f"File not found: {path}")

    try:
        info = win32api.GetFileVersionInfo(str(path), '\\')
    except Exception as e:
        if _winerror(e) in NO_VERSION_RESOURCE_ERRORS:
            raise VersionMetadataAbsent(path, f"No version resource in {path}") from e
        raise SourceMissingOrUnreadable(path, f"Cannot read version of {path}: {e}") from e

    try:
        version = FileVersion.from_fixed_info(info)
    except (KeyError, TypeError) as e:
        raise VersionMetadataAbsent(path, f"Malformed version resource in {path}") from e

    logger.debug(f"{path.name}: file version {version}")
    return version


class FileDescriptor:
    """A file path plus its lazily read version.

    Descriptors are built fresh for every deployment; the version is read at
    most once per descriptor.
    """

    def __init__(self, path, version_reader: Optional[Callable] = None):
        self.path = Path(path)
        self._version_reader = version_reader or read_file_version
        self._version: Optional[FileVersion] = None

    def exists(self) -> bool:
        return self.path.is_file()

    @property
    def version(self) -> FileVersion:
        if self._version is None:
            self._version = self._version_reader(self.path)
        return self._version

    @property
    def major_version(self) -> int:
        return self.version.major

    @property
    def minor_version(self) -> int:
        return self.version.minor

    def __repr__(self):
        return f"FileDescriptor(path='{self.path}')"
