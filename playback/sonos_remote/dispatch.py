"""
Dispatcher that turns resolved commands into speaker API requests
"""

import time
from typing import Callable, Optional

import click

from .client import SonosHttpApi, encode_segment
from .config import RemoteConfig
from .logging_utils import get_logger
from .models import (
    Command, Invocation, PlaylistEntry, PlaylistRequest, PresetTarget, Target
)
from .tables import load_aliases, resolve_target

logger = get_logger(__name__)


class CommandDispatcher:
    """Runs one `sonos` or `play-music` invocation against the speaker API"""

    def __init__(self, cfg: RemoteConfig, api: Optional[SonosHttpApi] = None,
                 echo: Callable[[str], None] = click.echo):
        """
        Initialize the dispatcher.

        Args:
            cfg: Remote configuration
            api: HTTP client; built from cfg when omitted
            echo: Sink for the confirmation lines
        """
        self.cfg = cfg
        self.echo = echo
        self.api = api or SonosHttpApi(cfg, echo=echo)
        self.aliases = load_aliases(cfg.speakers_file)

        self._handlers = {
            Command.VOLUME: self._volume,
            Command.PLAY: self._play,
            Command.PAUSE: self._pause,
            Command.STOP: self._stop,
            Command.NEXT: self._next,
            Command.PREVIOUS: self._previous,
            Command.SHUFFLE: self._shuffle,
            Command.REPEAT: self._repeat,
            Command.GROUP: self._group,
            Command.UNGROUP: self._ungroup,
            Command.SAY: self._say,
        }

    def resolve(self, name: str) -> Target:
        return resolve_target(self.aliases, name)

    def _room_for(self, target: Target) -> str:
        """Room that receives single-room requests for this target"""
        if isinstance(target, PresetTarget):
            return self.cfg.coordinator
        return target.name

    def _form_group(self, target: PresetTarget) -> None:
        """Apply a preset and give the speakers time to join before the next request"""
        self.echo("Grouping speakers...")
        self.api.apply_preset(target.name)
        if self.cfg.preset_settle_s and not self.cfg.dry_run:
            time.sleep(self.cfg.preset_settle_s)

    def run(self, invocation: Invocation) -> None:
        """Dispatch a parsed `sonos` command line"""
        target = self.resolve(invocation.target)
        logger.info(f"Dispatching {invocation.command.value} to {target}",
                    extra={"command": invocation.command.value, "value": invocation.value})
        self._handlers[invocation.command](target, invocation.value)
        self.echo("Done!")

    def _volume(self, target: Target, value: str) -> None:
        if isinstance(target, PresetTarget):
            self.echo(f"Setting group volume to {value}...")
            self.api.room(self.cfg.coordinator, "groupVolume", value)
        else:
            self.echo(f"Setting volume to {value} on {target.name}...")
            self.api.room(target.name, "volume", value)

    def _play(self, target: Target, value: Optional[str]) -> None:
        if isinstance(target, PresetTarget):
            self._form_group(target)
        room = self._room_for(target)
        self.echo(f"Resuming playback on {room}...")
        self.api.room(room, "play")

    def _pause(self, target: Target, value: Optional[str]) -> None:
        if isinstance(target, PresetTarget):
            self.echo("Pausing all speakers...")
            self.api.pause_all()
        else:
            self.echo(f"Pausing {target.name}...")
            self.api.room(target.name, "pause")

    def _stop(self, target: Target, value: Optional[str]) -> None:
        room = self._room_for(target)
        self.echo(f"Stopping {room}...")
        self.api.room(room, "stop")

    def _next(self, target: Target, value: Optional[str]) -> None:
        self.echo("Skipping to next track...")
        self.api.room(self._room_for(target), "next")

    def _previous(self, target: Target, value: Optional[str]) -> None:
        self.echo("Going to previous track...")
        self.api.room(self._room_for(target), "previous")

    def _shuffle(self, target: Target, value: str) -> None:
        self.echo(f"Setting shuffle {value}...")
        self.api.room(self._room_for(target), "shuffle", value)

    def _repeat(self, target: Target, value: str) -> None:
        self.echo(f"Setting repeat {value}...")
        self.api.room(self._room_for(target), "repeat", value)

    def _group(self, target: Target, value: str) -> None:
        # The preset comes from the value, never from --target
        preset = self.resolve(value)
        name = preset.name if isinstance(preset, PresetTarget) else value
        self.echo(f"Applying preset {name}...")
        self.api.apply_preset(name)

    def _ungroup(self, target: Target, value: Optional[str]) -> None:
        room = self._room_for(target)
        self.echo(f"Removing {room} from group...")
        self.api.room(room, "leave")

    def _say(self, target: Target, value: str) -> None:
        if isinstance(target, PresetTarget):
            self.echo(f"Announcing on all speakers: {value}")
            self.api.say_all(value)
        else:
            self.echo(f"Announcing on {target.name}: {value}")
            self.api.room(target.name, "say", encode_segment(value))

    def play_playlist(self, request: PlaylistRequest, playlist: PlaylistEntry) -> None:
        """
        Start a playlist on the requested target.

        Issues start-playback, set-repeat and set-shuffle in that order,
        preceded by a preset application when the target is a group. There is
        no rollback if a later request fails.

        Args:
            request: Parsed `play-music` command line
            playlist: Resolved playlist row
        """
        target = self.resolve(request.target)
        self.echo(f"Playing: {playlist.description}")

        if isinstance(target, PresetTarget):
            self.echo(f"Target: Whole home (preset: {target.name})")
            self._form_group(target)
        else:
            self.echo(f"Target: {target.name}")

        room = self._room_for(target)
        logger.info(f"Starting playlist {playlist.name} on {room}",
                    extra={"playlist": playlist.name, "uri": playlist.uri, "room": room})

        self.echo("Starting music...")
        self.api.room(room, "spotify", f"now/{playlist.uri}")
        self.api.room(room, "repeat", "all" if request.repeat else "none")
        if request.shuffle:
            self.echo("Shuffle: on")
        self.api.room(room, "shuffle", "on" if request.shuffle else "off")
        self.echo("Done!")
