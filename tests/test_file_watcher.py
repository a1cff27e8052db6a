"""Tests for redeploy-on-rebuild watching."""

import pytest
from unittest.mock import MagicMock

from visdeploy.deployer import DeployOutcome, VersionGatedDeployer
from visdeploy.file_watcher import AssemblyFileHandler, AssemblyWatcher
from visdeploy.version import FileVersion, read_file_version


def make_event(path, is_directory=False, dest_path=None):
    event = MagicMock()
    event.src_path = str(path)
    event.dest_path = str(dest_path) if dest_path else None
    event.is_directory = is_directory
    return event


def wait_for(handler, name):
    handler.pending[name].join(timeout=5)


@pytest.fixture
def watcher(source_dir, visualizers):
    return AssemblyWatcher(source_dir, visualizers, ['Foo.dll'], VersionGatedDeployer())


def test_modified_listed_file_is_redeployed(watcher, source_dir, visualizers, make_assembly):
    make_assembly(visualizers / 'Foo.dll', '1.0')
    make_assembly(source_dir / 'Foo.dll', '1.1')
    handler = AssemblyFileHandler(watcher, debounce=0.05)

    handler.on_modified(make_event(source_dir / 'Foo.dll'))
    wait_for(handler, 'Foo.dll')

    assert watcher.results['Foo.dll'].outcome is DeployOutcome.COPIED


def test_unlisted_files_are_ignored(watcher, source_dir):
    watcher.redeploy = MagicMock()
    handler = AssemblyFileHandler(watcher, debounce=0.05)

    handler.on_created(make_event(source_dir / 'Foo.pdb'))
    handler.on_modified(make_event(source_dir, is_directory=True))

    assert handler.pending == {}
    watcher.redeploy.assert_not_called()


def test_last_write_in_burst_is_deployed(watcher, source_dir, visualizers, make_assembly):
    """A build writes the file in several steps; only the final bytes deploy."""
    handler = AssemblyFileHandler(watcher, debounce=0.2)
    source = source_dir / 'Foo.dll'

    source.write_bytes(b'MZ')
    handler.on_created(make_event(source))
    make_assembly(source, '2.3', payload=b'final build')
    handler.on_modified(make_event(source))
    wait_for(handler, 'Foo.dll')

    assert watcher.results['Foo.dll'].outcome is DeployOutcome.COPIED
    assert read_file_version(visualizers / 'Foo.dll') == FileVersion(2, 3)
    assert (visualizers / 'Foo.dll').read_bytes() == source.read_bytes()


def test_burst_deploys_once(watcher, source_dir, make_assembly):
    make_assembly(source_dir / 'Foo.dll', '1.0')
    watcher.redeploy = MagicMock()
    handler = AssemblyFileHandler(watcher, debounce=0.2)

    handler.on_created(make_event(source_dir / 'Foo.dll'))
    handler.on_modified(make_event(source_dir / 'Foo.dll'))
    wait_for(handler, 'Foo.dll')

    watcher.redeploy.assert_called_once_with('Foo.dll')


def test_tiny_files_are_skipped(watcher, source_dir):
    (source_dir / 'Foo.dll').write_bytes(b'MZ')
    watcher.redeploy = MagicMock()
    handler = AssemblyFileHandler(watcher, debounce=0.05)

    handler.on_modified(make_event(source_dir / 'Foo.dll'))
    wait_for(handler, 'Foo.dll')

    watcher.redeploy.assert_not_called()


def test_moved_into_place(watcher, source_dir, make_assembly):
    make_assembly(source_dir / 'Foo.dll', '1.0')
    watcher.redeploy = MagicMock()
    handler = AssemblyFileHandler(watcher, debounce=0.05)

    handler.on_moved(make_event(source_dir / 'Foo.dll.tmp', dest_path=source_dir / 'Foo.dll'))
    wait_for(handler, 'Foo.dll')

    watcher.redeploy.assert_called_once_with('Foo.dll')


def test_cancel_pending(watcher, source_dir, make_assembly):
    make_assembly(source_dir / 'Foo.dll', '1.0')
    watcher.redeploy = MagicMock()
    handler = AssemblyFileHandler(watcher, debounce=5)

    handler.on_modified(make_event(source_dir / 'Foo.dll'))
    timer = handler.pending['Foo.dll']
    handler.cancel_pending()
    timer.join(timeout=1)

    assert handler.pending == {}
    watcher.redeploy.assert_not_called()


def test_results_keep_last_per_file(watcher, source_dir, make_assembly):
    make_assembly(source_dir / 'Foo.dll', '1.0')

    first = watcher.redeploy('Foo.dll')
    second = watcher.redeploy('Foo.dll')

    assert first.outcome is DeployOutcome.COPIED
    assert list(watcher.results) == ['Foo.dll']
    assert watcher.results['Foo.dll'] is second
    assert second.outcome is DeployOutcome.SKIPPED_UP_TO_DATE


def test_failed_redeploy_is_reported(watcher, capsys):
    result = watcher.redeploy('Foo.dll')

    assert result.outcome is DeployOutcome.FAILED
    assert 'Foo.dll' in capsys.readouterr().out
