"""
Sonos Remote

Command-line shortcuts for a local speaker HTTP control API.
"""

__version__ = "1.0.0"
__author__ = "sonos-remote"

from .config import RemoteConfig
from .dispatch import CommandDispatcher
from .models import Command, Invocation, PlaylistRequest, PresetTarget, RoomTarget
from .tables import UnknownPlaylistError, resolve_playlist, resolve_target

__all__ = [
    "Command",
    "CommandDispatcher",
    "Invocation",
    "PlaylistRequest",
    "PresetTarget",
    "RemoteConfig",
    "RoomTarget",
    "UnknownPlaylistError",
    "resolve_playlist",
    "resolve_target",
]
