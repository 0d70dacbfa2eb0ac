#!/usr/bin/env python3
"""
Integration tests for sonos-remote
"""

import io
import json
import logging
import os
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch, MagicMock

from click.testing import CliRunner

# Add package directory to path (use relative paths)
project_root = Path(__file__).parent.parent
sys.path.append(str(project_root / 'playback'))

SPEAKERS = "kitchen|Kitchen\nden|TV Room\nall|__PRESET__:whole_home\n"
PLAYLISTS = "jazz|spotify:user:spotify:playlist:jazz01|Jazz Classics\n"


class TestRemoteIntegration(unittest.TestCase):
    """Run both entry points against real tables with the HTTP layer mocked"""

    def setUp(self):
        """Set up test environment"""
        self.tmp = tempfile.TemporaryDirectory()
        base = Path(self.tmp.name)
        (base / "speakers.conf").write_text(SPEAKERS, encoding="utf-8")
        (base / "playlists.conf").write_text(PLAYLISTS, encoding="utf-8")

        self.env = patch.dict(os.environ, {
            'SONOS_REMOTE_DIR': str(base),
            'SONOS_API_URL': 'http://sonos-api.local:5005',
            'SONOS_PRESET_SETTLE_S': '0',
        })
        self.env.start()
        for name in ('SONOS_SPEAKERS_FILE', 'SONOS_PLAYLISTS_FILE', 'SONOS_STRICT'):
            os.environ.pop(name, None)

        self.root_handlers = logging.getLogger().handlers[:]
        self.runner = CliRunner()

    def tearDown(self):
        logging.getLogger().handlers[:] = self.root_handlers
        self.env.stop()
        self.tmp.cleanup()

    def test_config_loading(self):
        """Test configuration loading"""
        from sonos_remote.config import RemoteConfig

        config = RemoteConfig.from_env()

        self.assertEqual(config.api_url, 'http://sonos-api.local:5005')
        self.assertEqual(config.speakers_file, os.path.join(self.tmp.name, 'speakers.conf'))
        self.assertEqual(config.preset_settle_s, 0)
        self.assertEqual(config.default_target, 'kitchen')
        self.assertFalse(config.strict)

    def test_config_is_immutable(self):
        """Test that configuration cannot be changed in place"""
        from pydantic import ValidationError
        from sonos_remote.config import RemoteConfig

        config = RemoteConfig.from_env()

        with self.assertRaises(ValidationError):
            config.api_url = 'http://elsewhere:5005'
        self.assertEqual(config.with_overrides(coordinator='Den').coordinator, 'Den')
        self.assertEqual(config.coordinator, 'Kitchen')

    def test_invalid_config_exits(self):
        """Test that a bad environment value is reported, not raised"""
        from sonos_remote.cli import sonos

        with patch.dict(os.environ, {'SONOS_PRESET_SETTLE_S': 'soon'}):
            result = self.runner.invoke(sonos, ['play'])

        self.assertEqual(result.exit_code, 1)
        self.assertIn('Invalid configuration', result.output)

    @patch('requests.Session.get')
    def test_sonos_round_trip(self, mock_get):
        """Test a room command from the command line to the HTTP call"""
        from sonos_remote.cli import sonos
        mock_get.return_value = MagicMock(status_code=200)

        result = self.runner.invoke(sonos, ['say', 'Movie starts now', 'den'])

        self.assertEqual(result.exit_code, 0, result.output)
        mock_get.assert_called_once()
        self.assertEqual(mock_get.call_args.args[0],
                         'http://sonos-api.local:5005/TV%20Room/say/Movie%20starts%20now')
        self.assertIn('Announcing on TV Room: Movie starts now', result.output)

    @patch('requests.Session.get')
    def test_play_music_whole_home(self, mock_get):
        """Test playlist playback on a preset"""
        from sonos_remote.cli import play_music
        mock_get.return_value = MagicMock(status_code=200)

        result = self.runner.invoke(play_music, ['-p', 'jazz', '-t', 'all', '--no-repeat'])

        self.assertEqual(result.exit_code, 0, result.output)
        urls = [c.args[0] for c in mock_get.call_args_list]
        self.assertEqual(urls, [
            'http://sonos-api.local:5005/preset/whole_home',
            'http://sonos-api.local:5005/Kitchen/spotify/now/spotify:user:spotify:playlist:jazz01',
            'http://sonos-api.local:5005/Kitchen/repeat/none',
            'http://sonos-api.local:5005/Kitchen/shuffle/off',
        ])
        self.assertIn('Target: Whole home (preset: whole_home)', result.output)

    @patch('requests.Session.get')
    def test_missing_tables_fall_back(self, mock_get):
        """Test that missing tables leave names unresolved instead of failing"""
        from sonos_remote.cli import sonos
        os.remove(os.path.join(self.tmp.name, 'speakers.conf'))

        result = self.runner.invoke(sonos, ['pause', 'all'])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(mock_get.call_args.args[0], 'http://sonos-api.local:5005/all/pause')

    def test_json_logging(self):
        """Test JSON log formatting with extra fields"""
        from sonos_remote.logging_utils import setup_logging, get_logger, log_request

        stream = io.StringIO()
        setup_logging(log_level='DEBUG', log_format='json', stream=stream)
        log_request(get_logger('sonos_remote.client'), 'http://sonos-api.local:5005/pauseall')

        record = json.loads(stream.getvalue().splitlines()[-1])
        self.assertEqual(record['level'], 'DEBUG')
        self.assertEqual(record['url'], 'http://sonos-api.local:5005/pauseall')
        self.assertEqual(record['event_type'], 'request')
        self.assertFalse(record['dry_run'])


if __name__ == "__main__":
    unittest.main()
