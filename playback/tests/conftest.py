"""
Shared fixtures: temporary alias/playlist tables and a patched HTTP session
"""

import logging
from unittest.mock import Mock, patch

import pytest

from sonos_remote.config import RemoteConfig

SPEAKERS = """\
# Speaker aliases
kitchen|Kitchen
office|Office
living|Living Room

all|__PRESET__:whole_home
upstairs|__PRESET__:upstairs
office|Back Office
"""

PLAYLISTS = """\
# name|uri|description
chill|spotify:user:spotify:playlist:abc123|Chill Hits
focus|spotify:user:spotify:playlist:def456|Deep Focus | no lyrics
"""


@pytest.fixture(autouse=True)
def restore_root_logger():
    """setup_logging replaces the root handlers; put them back after each test"""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def speakers_file(tmp_path):
    path = tmp_path / "speakers.conf"
    path.write_text(SPEAKERS, encoding="utf-8")
    return path


@pytest.fixture
def playlists_file(tmp_path):
    path = tmp_path / "playlists.conf"
    path.write_text(PLAYLISTS, encoding="utf-8")
    return path


@pytest.fixture
def cfg(speakers_file, playlists_file):
    return RemoteConfig(
        speakers_file=str(speakers_file),
        playlists_file=str(playlists_file),
        preset_settle_s=0,
    )


@pytest.fixture
def session():
    """Replace the shared requests session; yields the mock"""
    mock_session = Mock()
    with patch("sonos_remote.client._http_session", return_value=mock_session):
        yield mock_session


def requested_urls(session):
    return [c.args[0] for c in session.get.call_args_list]
