"""
Data models and enums for the speaker remote
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

PRESET_PREFIX = "__PRESET__:"


class Command(Enum):
    """Commands understood by the `sonos` entry point"""
    VOLUME = "volume"
    PLAY = "play"
    PAUSE = "pause"
    STOP = "stop"
    NEXT = "next"
    PREVIOUS = "previous"
    SHUFFLE = "shuffle"
    REPEAT = "repeat"
    GROUP = "group"
    UNGROUP = "ungroup"
    SAY = "say"

    @classmethod
    def from_token(cls, token: str) -> Optional["Command"]:
        """Map a command-line token (including aliases like 'skip') to a Command"""
        token = COMMAND_ALIASES.get(token, token)
        try:
            return cls(token)
        except ValueError:
            return None

    @property
    def takes_value(self) -> bool:
        """Whether the first positional after the command is a value rather than a speaker"""
        return self in VALUE_COMMANDS


COMMAND_ALIASES = {
    "skip": "next",
    "prev": "previous",
}

VALUE_COMMANDS = frozenset({
    Command.VOLUME,
    Command.SHUFFLE,
    Command.REPEAT,
    Command.GROUP,
    Command.SAY,
})


@dataclass(frozen=True)
class RoomTarget:
    """A single room addressed by its canonical name"""
    name: str


@dataclass(frozen=True)
class PresetTarget:
    """A named group preset"""
    name: str


Target = Union[RoomTarget, PresetTarget]


def parse_target(text: str) -> Target:
    """Turn the target column of the alias table into a Target"""
    if text.startswith(PRESET_PREFIX):
        return PresetTarget(text[len(PRESET_PREFIX):])
    return RoomTarget(text)


@dataclass(frozen=True)
class AliasEntry:
    """One row of the speaker alias table"""
    alias: str
    target: Target
    raw_target: str

    @classmethod
    def from_fields(cls, alias: str, raw_target: str) -> "AliasEntry":
        return cls(alias=alias, target=parse_target(raw_target), raw_target=raw_target)


@dataclass(frozen=True)
class PlaylistEntry:
    """One row of the playlist table"""
    name: str
    uri: str
    description: str


@dataclass(frozen=True)
class Invocation:
    """A parsed `sonos` command line"""
    command: Command
    value: Optional[str]
    target: str


@dataclass(frozen=True)
class PlaylistRequest:
    """A parsed `play-music` command line"""
    playlist: str
    target: str
    shuffle: bool = False
    repeat: bool = True
