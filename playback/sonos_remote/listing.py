"""
Listing helpers for the alias and playlist tables
"""

from typing import Callable, List

import click

from .models import AliasEntry, PlaylistEntry


def format_speakers(aliases: List[AliasEntry]) -> List[str]:
    lines = ["Speaker aliases:", ""]
    lines.extend(f"  {entry.alias:<12} -> {entry.raw_target}" for entry in aliases)
    return lines


def format_playlists(playlists: List[PlaylistEntry]) -> List[str]:
    lines = ["Available playlists:", ""]
    lines.extend(f"  {entry.name:<12} {entry.description}" for entry in playlists)
    return lines


def print_lines(lines: List[str], echo: Callable[[str], None] = click.echo) -> None:
    for line in lines:
        echo(line)
