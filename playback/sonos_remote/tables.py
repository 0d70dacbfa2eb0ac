"""
Alias and playlist tables.

Both tables are flat text files with one ``|``-delimited row per line.
Lines that are blank or whose first field starts with ``#`` are skipped.
The last field of a row receives the rest of the line, so a playlist
description may itself contain ``|``.

    # speakers.conf
    kitchen|Kitchen
    office|Office
    all|__PRESET__:whole_home

    # playlists.conf
    chill|spotify:user:spotify:playlist:37i9dQZF1DX4WYpdgoIcn6|Chill Hits

Bytes that are not valid UTF-8 are replaced rather than rejected, and an
unreadable file reads as an empty table.

The tables are read fresh on every call; nothing is cached.
"""

from typing import Iterator, List, Tuple

from .logging_utils import get_logger
from .models import AliasEntry, PlaylistEntry, RoomTarget, Target

logger = get_logger(__name__)


class UnknownPlaylistError(LookupError):
    """Raised when a playlist name is not in the playlist table"""

    def __init__(self, name: str):
        super().__init__(f"Unknown playlist '{name}'")
        self.name = name


def read_rows(path: str, width: int) -> Iterator[Tuple[str, ...]]:
    """
    Yield the data rows of a pipe-delimited table.

    Args:
        path: Table file path
        width: Number of fields per row; missing fields are returned as ''

    Yields:
        Tuples of exactly ``width`` stripped fields
    """
    try:
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            for line in f:
                fields = [field.strip() for field in line.rstrip("\r\n").split("|", width - 1)]
                if not fields[0] or fields[0].startswith("#"):
                    continue
                fields.extend([""] * (width - len(fields)))
                yield tuple(fields)
    except FileNotFoundError:
        logger.warning(f"Table file not found: {path}")
    except OSError as e:
        logger.warning(f"Could not read table file {path}: {e}")


def load_aliases(path: str) -> List[AliasEntry]:
    """Load the speaker alias table"""
    return [AliasEntry.from_fields(alias, target) for alias, target in read_rows(path, 2)]


def load_playlists(path: str) -> List[PlaylistEntry]:
    """Load the playlist table"""
    return [PlaylistEntry(name, uri, description) for name, uri, description in read_rows(path, 3)]


def resolve_target(aliases: List[AliasEntry], name: str) -> Target:
    """
    Resolve a speaker name through the alias table.

    The first matching alias wins. Names with no alias are returned as a
    RoomTarget unchanged, so this never fails.
    """
    for entry in aliases:
        if entry.alias == name:
            logger.debug(f"Resolved alias '{name}' -> {entry.target}")
            return entry.target
    return RoomTarget(name)


def resolve_playlist(playlists: List[PlaylistEntry], name: str) -> PlaylistEntry:
    """
    Look up a playlist by exact name.

    Raises:
        UnknownPlaylistError: if no row has this name
    """
    for entry in playlists:
        if entry.name == name:
            return entry
    raise UnknownPlaylistError(name)
