"""Version-gated deployment of visualizer assemblies.

A file is copied into the destination only when no file of that name exists
there yet, or when the source's file version is strictly newer. Versions are
compared on (major, minor) only: major first, minor only when majors are
equal. Destinations are never downgraded.

Copies go through a temporary file in the destination folder which is then
renamed over the target, so a reader never sees a half-written assembly.
"""

import logging
import os
import shutil
import tempfile
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from .errors import (
    DeployError,
    DeploymentFailed,
    DestinationUnwritable,
    SourceMissingOrUnreadable,
)
from .version import FileDescriptor, FileVersion, read_file_version

logger = logging.getLogger(__name__)


class DeployOutcome(Enum):
    """Outcome of a single version-gated copy."""
    COPIED = "copied"
    SKIPPED_UP_TO_DATE = "skipped"
    FAILED = "failed"


class DeployResult:
    """Result of deploying one file."""

    def __init__(self, file_name: str, source: Path, destination: Path,
                 outcome: DeployOutcome,
                 source_version: Optional[FileVersion] = None,
                 destination_version: Optional[FileVersion] = None,
                 error: Optional[DeployError] = None,
                 dry_run: bool = False):
        self.file_name = file_name
        self.source = source
        self.destination = destination
        self.outcome = outcome
        self.source_version = source_version
        self.destination_version = destination_version
        self.error = error
        self.dry_run = dry_run

    @property
    def succeeded(self) -> bool:
        return self.outcome is not DeployOutcome.FAILED

    @property
    def reason(self) -> Optional[str]:
        """Failure reason, None for successful outcomes."""
        return str(self.error) if self.error else None

    @property
    def label(self) -> str:
        """Outcome as shown to users; dry runs report what would happen."""
        if self.dry_run and self.outcome is DeployOutcome.COPIED:
            return "would copy"
        return self.outcome.value

    def __repr__(self):
        return (f"DeployResult(file_name='{self.file_name}', "
                f"outcome={self.outcome.name}, reason={self.reason!r})")


class DeploymentTarget:
    """Source descriptor paired with a destination path.

    The destination descriptor only exists when a file is already deployed.
    Nothing touches the disk until a descriptor is asked for.
    """

    def __init__(self, source_path, destination_path, version_reader: Optional[Callable] = None):
        self.source = FileDescriptor(source_path, version_reader)
        self.destination_path = Path(destination_path)
        self._version_reader = version_reader
        self._destination = None

    @property
    def destination(self) -> Optional[FileDescriptor]:
        if self._destination is None and self.destination_path.is_file():
            self._destination = FileDescriptor(self.destination_path, self._version_reader)
        return self._destination

    @property
    def file_name(self) -> str:
        return self.destination_path.name


class DeploymentReport:
    """Aggregate result of a batch deployment."""

    def __init__(self, expected: int = 0):
        self.expected = expected
        self.results: List[DeployResult] = []

    def add(self, result: DeployResult):
        self.results.append(result)

    def _with_outcome(self, outcome):
        return [r for r in self.results if r.outcome is outcome]

    @property
    def copied(self) -> List[DeployResult]:
        return self._with_outcome(DeployOutcome.COPIED)

    @property
    def skipped(self) -> List[DeployResult]:
        return self._with_outcome(DeployOutcome.SKIPPED_UP_TO_DATE)

    @property
    def failed(self) -> List[DeployResult]:
        return self._with_outcome(DeployOutcome.FAILED)

    @property
    def ok(self) -> bool:
        """True only if every expected file was evaluated and none failed."""
        return not self.failed and len(self.results) >= self.expected

    def summary(self) -> dict:
        """Get outcome counts and failure reasons.

        Returns:
            Dictionary with counts and a list of failures
        """
        return {
            'total': self.expected,
            'evaluated': len(self.results),
            'copied': len(self.copied),
            'skipped': len(self.skipped),
            'failed': len(self.failed),
            'errors': [
                {'file': r.file_name, 'error': type(r.error).__name__, 'reason': r.reason}
                for r in self.failed
            ],
        }

    def raise_for_failures(self):
        """Raise DeploymentFailed if any file failed."""
        if self.failed:
            raise DeploymentFailed(self)

    def __repr__(self):
        s = self.summary()
        return (f"DeploymentReport(copied={s['copied']}, skipped={s['skipped']}, "
                f"failed={s['failed']}, evaluated={s['evaluated']}/{s['total']})")


def should_copy(source_version: FileVersion, destination_version: Optional[FileVersion]) -> bool:
    """Decide whether the source replaces the destination.

    Args:
        source_version: Version of the source file
        destination_version: Version of the deployed file, None if absent

    Returns:
        True if the file should be copied
    """
    if destination_version is None:
        return True
    if source_version.major > destination_version.major:
        return True
    if (source_version.major == destination_version.major
            and source_version.minor > destination_version.minor):
        return True
    return False


def _atomic_copy(source: Path, destination: Path):
    """Copy source over destination via a temp file in the destination folder."""
    try:
        src = open(source, 'rb')
    except OSError as e:
        raise SourceMissingOrUnreadable(source, f"Cannot read {source}: {e}") from e

    tmp_path = None
    with src:
        try:
            fd, tmp_path = tempfile.mkstemp(
                prefix=f".{destination.name}.",
                suffix='.tmp',
                dir=str(destination.parent),
            )
            with os.fdopen(fd, 'wb') as dst:
                shutil.copyfileobj(src, dst)
            shutil.copystat(str(source), tmp_path)
            os.replace(tmp_path, str(destination))
            tmp_path = None
        except OSError as e:
            raise DestinationUnwritable(destination, f"Cannot write {destination}: {e}") from e
        finally:
            if tmp_path and os.path.exists(tmp_path):
                try:
                    os.remove(tmp_path)
                except OSError as cleanup_err:
                    logger.warning(f"Could not remove temp file {tmp_path}: {cleanup_err}")


class VersionGatedDeployer:
    """Copies files into a destination folder when the source is newer."""

    def __init__(self, version_reader: Optional[Callable] = None, dry_run: bool = False):
        """Initialize deployer.

        Args:
            version_reader: Callable returning a FileVersion for a path
            dry_run: Evaluate the version gate without writing anything
        """
        self.version_reader = version_reader or read_file_version
        self.dry_run = dry_run

    def _source_version(self, target: DeploymentTarget) -> FileVersion:
        try:
            return target.source.version
        except OSError as e:
            raise SourceMissingOrUnreadable(
                target.source.path, f"Cannot read {target.source.path}: {e}"
            ) from e

    def _check_destination_folder(self, destination_path: Path):
        try:
            exists = destination_path.parent.is_dir()
        except OSError as e:
            raise DestinationUnwritable(
                destination_path, f"Cannot access {destination_path.parent}: {e}"
            ) from e
        if not exists:
            raise DestinationUnwritable(
                destination_path,
                f"Destination folder does not exist: {destination_path.parent}"
            )

    def _destination_version(self, target: DeploymentTarget) -> Optional[FileVersion]:
        try:
            if target.destination is None:
                return None
            return target.destination.version
        except (SourceMissingOrUnreadable, OSError) as e:
            raise DestinationUnwritable(
                target.destination_path,
                f"Cannot read deployed file {target.destination_path}: {e}"
            ) from e

    def deploy_if_newer(self, source_path, destination_path) -> DeployResult:
        """Copy source to destination if the destination is absent or older.

        Args:
            source_path: Path of the file to deploy
            destination_path: Path the file is deployed to

        Returns:
            DeployResult with outcome COPIED, SKIPPED_UP_TO_DATE or FAILED
        """
        source_path = Path(source_path)
        destination_path = Path(destination_path)
        result = DeployResult(
            destination_path.name, source_path, destination_path,
            DeployOutcome.FAILED, dry_run=self.dry_run
        )

        try:
            target = DeploymentTarget(source_path, destination_path, self.version_reader)
            # Read the source first: a source without a version never deploys
            result.source_version = self._source_version(target)
            self._check_destination_folder(destination_path)
            result.destination_version = self._destination_version(target)

            if not should_copy(result.source_version, result.destination_version):
                result.outcome = DeployOutcome.SKIPPED_UP_TO_DATE
                logger.debug(
                    f"{result.file_name}: up to date "
                    f"(source {result.source_version}, deployed {result.destination_version})"
                )
                return result

            if self.dry_run:
                logger.info(f"{result.file_name}: would copy (dry run)")
            else:
                _atomic_copy(source_path, destination_path)
                if result.destination_version is None:
                    logger.info(f"{result.file_name}: deployed {result.source_version}")
                else:
                    logger.info(
                        f"{result.file_name}: updated "
                        f"{result.destination_version} -> {result.source_version}"
                    )
            result.outcome = DeployOutcome.COPIED

        except DeployError as e:
            result.outcome = DeployOutcome.FAILED
            result.error = e
            logger.error(f"{result.file_name}: {e}")

        return result

    def deploy_all(self, file_names: Iterable[str], source_dir, destination_dir,
                   isolate_failures: bool = True) -> DeploymentReport:
        """Deploy a list of files from one folder into another, in list order.

        Args:
            file_names: Names of the files to deploy
            source_dir: Folder holding the files to deploy
            destination_dir: Folder the files are deployed to
            isolate_failures: Keep going after a failed file. When False, the
                first failure raises its error and the rest of the batch is
                abandoned.

        Returns:
            DeploymentReport with one result per evaluated file
        """
        file_names = list(file_names)
        source_dir = Path(source_dir)
        destination_dir = Path(destination_dir)
        report = DeploymentReport(expected=len(file_names))

        logger.info(
            f"Deploying {len(file_names)} file(s) from {source_dir} to {destination_dir}"
        )

        for name in file_names:
            result = self.deploy_if_newer(source_dir / name, destination_dir / name)
            report.add(result)
            if not result.succeeded and not isolate_failures:
                logger.warning(
                    f"Batch abandoned after {name}; "
                    f"{len(file_names) - len(report.results)} file(s) not evaluated"
                )
                raise result.error

        logger.info(
            f"Deployment complete: {len(report.copied)} copied, "
            f"{len(report.skipped)} up to date, {len(report.failed)} failed"
        )
        return report


def deploy_if_newer(source_path, destination_path, version_reader: Optional[Callable] = None) -> DeployResult:
    """Deploy a single file with a default deployer."""
    return VersionGatedDeployer(version_reader).deploy_if_newer(source_path, destination_path)


def deploy_all(file_names, source_dir, destination_dir,
               isolate_failures: bool = True,
               version_reader: Optional[Callable] = None) -> DeploymentReport:
    """Deploy a list of files with a default deployer."""
    return VersionGatedDeployer(version_reader).deploy_all(
        file_names, source_dir, destination_dir, isolate_failures=isolate_failures
    )
