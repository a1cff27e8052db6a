import sys
from unittest.mock import MagicMock

# Mock pywin32 modules before any visdeploy modules are imported
sys.modules["win32com"] = MagicMock()
sys.modules["win32com.client"] = MagicMock()
sys.modules["pythoncom"] = MagicMock()
sys.modules["win32api"] = MagicMock()

import pytest
import win32api

VERSION_PREFIX = b"VERSION="


class FakeWinError(Exception):
    """Stand-in for pywintypes.error"""

    def __init__(self, winerror, funcname, strerror):
        super().__init__(winerror, funcname, strerror)
        self.winerror = winerror


def fake_get_file_version_info(path, block):
    """Read a version from files written by write_assembly()"""
    with open(path, 'rb') as f:
        header = f.readline().strip()
    if not header.startswith(VERSION_PREFIX):
        raise FakeWinError(1813, 'GetFileVersionInfo', 'The specified resource type cannot be found.')
    major, minor, build, revision = (int(p) for p in header[len(VERSION_PREFIX):].split(b'.'))
    return {
        'FileVersionMS': (major << 16) | minor,
        'FileVersionLS': (build << 16) | revision,
    }


def write_assembly(path, version, payload=b''):
    """Write a fake assembly carrying the given 'major.minor[.build.revision]' version"""
    parts = version.split('.')
    parts += ['0'] * (4 - len(parts))
    path.write_bytes(VERSION_PREFIX + '.'.join(parts).encode() + b'\n' + payload)
    return path


@pytest.fixture(autouse=True)
def fake_version_resources(monkeypatch):
    monkeypatch.setattr(win32api, 'GetFileVersionInfo', fake_get_file_version_info)


@pytest.fixture
def source_dir(tmp_path):
    path = tmp_path / 'extension'
    path.mkdir()
    return path


@pytest.fixture
def vs_dir(tmp_path):
    """Visual Studio user folder with an empty Visualizers subfolder"""
    path = tmp_path / 'Visual Studio 2019'
    (path / 'Visualizers').mkdir(parents=True)
    return path


@pytest.fixture
def visualizers(vs_dir):
    return vs_dir / 'Visualizers'


@pytest.fixture
def make_assembly():
    return write_assembly
