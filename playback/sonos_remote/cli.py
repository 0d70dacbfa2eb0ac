"""
Command-line entry points: `sonos` for general control, `play-music` for playlists
"""

import re
from typing import Callable, Optional, Sequence

import click
from pydantic import ValidationError

from .client import DispatchError
from .config import RemoteConfig
from .dispatch import CommandDispatcher
from .listing import format_playlists, format_speakers, print_lines
from .logging_utils import setup_logging, get_logger
from .models import Command, Invocation, PlaylistRequest
from .tables import UnknownPlaylistError, load_aliases, load_playlists, resolve_playlist

logger = get_logger(__name__)

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}

_SIGNED_NUMBER = re.compile(r"^-\d+$")

MISSING_VALUE_MESSAGES = {
    Command.VOLUME: "Volume level required",
    Command.SHUFFLE: "shuffle requires 'on' or 'off'",
    Command.REPEAT: "repeat requires 'all', 'one', or 'none'",
    Command.GROUP: "group requires a preset name (e.g., 'all' or 'whole_home')",
    Command.SAY: "say requires a message",
}

ALLOWED_VALUES = {
    Command.SHUFFLE: ("on", "off"),
    Command.REPEAT: ("all", "one", "none"),
}


class CommandUsageError(click.UsageError):
    """Usage error that exits with status 1 and prints the full help text"""
    exit_code = 1

    def show(self, file=None) -> None:
        if file is None:
            file = click.get_text_stream("stderr")
        click.echo(f"Error: {self.format_message()}", file=file)
        if self.ctx is not None:
            click.echo("", file=file)
            click.echo(self.ctx.get_help(), file=file)


class RemoteCommand(click.Command):
    """click.Command whose parse errors are reported as CommandUsageError"""

    def parse_args(self, ctx: click.Context, args):
        try:
            return super().parse_args(ctx, args)
        except CommandUsageError:
            raise
        except click.UsageError as e:
            raise CommandUsageError(e.message, ctx) from e


def common_options(func):
    """Options shared by both entry points"""
    options = [
        click.option('--api-url', help='Speaker HTTP API base address (default: http://localhost:5005)'),
        click.option('--dry-run', is_flag=True, help='Print request URLs instead of sending them'),
        click.option('--strict', is_flag=True, help='Fail when the speaker API cannot be reached'),
        click.option('--log-level', help='Log level (default: WARNING)'),
        click.option('--log-format', type=click.Choice(['text', 'json']), help='Log format'),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def load_config(api_url: Optional[str], dry_run: bool, strict: bool,
                log_level: Optional[str], log_format: Optional[str]) -> RemoteConfig:
    """Build the configuration from the environment plus command-line overrides"""
    try:
        cfg = RemoteConfig.from_env().with_overrides(
            api_url=api_url,
            dry_run=True if dry_run else None,
            strict=True if strict else None,
            log_level=log_level,
            log_format=log_format,
        )
    except ValidationError as e:
        raise click.ClickException(f"Invalid configuration: {e}") from e

    setup_logging(log_level=cfg.log_level, log_format=cfg.log_format)
    return cfg


def parse_invocation(tokens: Sequence[str], default_target: str,
                     ctx: Optional[click.Context] = None) -> Invocation:
    """
    Turn the positional tokens of a `sonos` command line into an Invocation.

    The first token is the command. Commands that need a value take it from
    the next token; any remaining token names the speaker and overrides
    ``default_target``.

    Raises:
        CommandUsageError: for unknown options, a missing or unknown command,
            a missing or disallowed value, or surplus arguments
    """
    for token in tokens:
        if token.startswith("-") and len(token) > 1 and not _SIGNED_NUMBER.match(token):
            raise CommandUsageError(f"No such option: {token}", ctx)

    if not tokens:
        raise CommandUsageError("Command is required", ctx)

    command = Command.from_token(tokens[0])
    if command is None:
        raise CommandUsageError(f"Unknown command '{tokens[0]}'", ctx)

    rest = list(tokens[1:])
    value = None
    if command.takes_value:
        value = rest.pop(0) if rest else None
        if not value:
            raise CommandUsageError(MISSING_VALUE_MESSAGES[command], ctx)
        allowed = ALLOWED_VALUES.get(command)
        if allowed and value not in allowed:
            raise CommandUsageError(
                f"{command.value} requires one of: {', '.join(allowed)} (got '{value}')", ctx
            )

    if len(rest) > 1:
        raise CommandUsageError(f"Unexpected extra argument '{rest[1]}'", ctx)

    speaker = rest[0] if rest else None
    return Invocation(command=command, value=value, target=speaker or default_target)


def _dispatch(cfg: RemoteConfig, action: Callable[[CommandDispatcher], None]) -> None:
    dispatcher = CommandDispatcher(cfg)
    try:
        action(dispatcher)
    except DispatchError as e:
        logger.error(f"Stopped after failed request: {e.url}")
        raise click.ClickException(str(e)) from e


@click.command(cls=RemoteCommand,
               context_settings={**CONTEXT_SETTINGS, "ignore_unknown_options": True})
@click.argument('tokens', nargs=-1, metavar='COMMAND [VALUE] [SPEAKER]')
@click.option('--target', '-t', help='Target speaker or alias (default: kitchen)')
@click.option('--speakers', 'list_speakers', is_flag=True, help='List speaker aliases')
@common_options
@click.pass_context
def sonos(ctx, tokens, target, list_speakers, api_url, dry_run, strict, log_level, log_format):
    """General speaker control.

    \b
    Commands:
      volume LEVEL [SPEAKER]   Set volume (0-100)
      volume +/-N [SPEAKER]    Adjust volume up/down
      play [SPEAKER]           Resume playback
      pause [SPEAKER]          Pause playback (use 'all' for pauseall)
      stop [SPEAKER]           Stop playback
      skip [SPEAKER]           Skip to next track
      prev [SPEAKER]           Go to previous track
      shuffle on|off           Set shuffle mode
      repeat all|one|none      Set repeat mode
      group PRESET             Apply a speaker preset (e.g., 'all')
      ungroup [SPEAKER]        Remove speaker from group
      say "MESSAGE" [SPEAKER]  Text-to-speech announcement

    \b
    Examples:
      sonos volume 15 all
      sonos volume +5 kitchen
      sonos pause all
      sonos skip office
      sonos group all
      sonos say "Dinner is ready" all
    """
    cfg = load_config(api_url, dry_run, strict, log_level, log_format)

    if list_speakers:
        print_lines(format_speakers(load_aliases(cfg.speakers_file)))
        return

    invocation = parse_invocation(tokens, target or cfg.default_target, ctx)
    _dispatch(cfg, lambda dispatcher: dispatcher.run(invocation))


@click.command(cls=RemoteCommand, context_settings=CONTEXT_SETTINGS)
@click.option('--playlist', '-p', help='Playlist to play (see --list)')
@click.option('--target', '-t', help="Target speaker or alias (default: kitchen). Use 'all' for whole home")
@click.option('--shuffle', '-s', is_flag=True, help='Enable shuffle mode')
@click.option('--no-repeat', is_flag=True, help='Disable repeat')
@click.option('--list', '-l', 'list_playlists', is_flag=True, help='List available playlists')
@click.option('--speakers', 'list_speakers', is_flag=True, help='List speaker aliases')
@common_options
@click.pass_context
def play_music(ctx, playlist, target, shuffle, no_repeat, list_playlists, list_speakers,
               api_url, dry_run, strict, log_level, log_format):
    """Play a named playlist on a speaker or speaker group."""
    cfg = load_config(api_url, dry_run, strict, log_level, log_format)

    if list_playlists:
        print_lines(format_playlists(load_playlists(cfg.playlists_file)))
        return
    if list_speakers:
        print_lines(format_speakers(load_aliases(cfg.speakers_file)))
        return

    if not playlist:
        raise CommandUsageError("Playlist is required", ctx)

    try:
        entry = resolve_playlist(load_playlists(cfg.playlists_file), playlist)
    except UnknownPlaylistError as e:
        raise click.ClickException(f"{e}\nUse --list to see available playlists") from e

    request = PlaylistRequest(
        playlist=playlist,
        target=target or cfg.default_target,
        shuffle=shuffle,
        repeat=not no_repeat,
    )
    _dispatch(cfg, lambda dispatcher: dispatcher.play_playlist(request, entry))


if __name__ == '__main__':
    sonos()
