"""
Configuration model for the speaker remote
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Literal
import os
import logging
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Use SONOS_REMOTE_DIR for the alias and playlist tables
DEFAULT_BASE_DIR = os.path.join(os.path.expanduser("~"), ".config", "sonos-remote")
DEFAULT_API_URL = "http://localhost:5005"

_TRUE_VALUES = ("1", "true", "yes", "on")


def _base_dir() -> str:
    return os.getenv("SONOS_REMOTE_DIR", DEFAULT_BASE_DIR)


class RemoteConfig(BaseModel):
    """Settings threaded through parse, resolve and dispatch"""
    model_config = ConfigDict(frozen=True)

    api_url: str = Field(default=DEFAULT_API_URL, description="Base address of the local speaker HTTP API")
    speakers_file: str = Field(
        default_factory=lambda: os.path.join(_base_dir(), "speakers.conf"),
        description="Pipe-delimited alias table (alias|room or alias|__PRESET__:name)"
    )
    playlists_file: str = Field(
        default_factory=lambda: os.path.join(_base_dir(), "playlists.conf"),
        description="Pipe-delimited playlist table (name|uri|description)"
    )
    default_target: str = Field(default="kitchen", description="Speaker or alias used when no target is given")
    coordinator: str = Field(default="Kitchen", description="Room that fronts a grouped preset")
    preset_settle_s: float = Field(default=2.0, ge=0, le=30.0, description="Wait after applying a preset before playback")
    request_timeout_s: float = Field(default=5.0, gt=0, le=60.0, description="Per-request timeout")
    connect_attempts: int = Field(default=1, ge=1, le=10, description="Attempts for connection failures")
    strict: bool = Field(default=False, description="Raise on transport failures instead of ignoring them")
    dry_run: bool = Field(default=False, description="Print request URLs instead of sending them")
    log_level: str = Field(default="WARNING", description="Logging level")
    log_format: Literal["text", "json"] = Field(default="text", description="Log format (text|json)")

    @classmethod
    def from_env(cls) -> "RemoteConfig":
        """Create configuration from environment variables (and a .env file if present)"""
        load_dotenv()

        base_dir = _base_dir()
        values = {
            "api_url": os.getenv("SONOS_API_URL", DEFAULT_API_URL),
            "speakers_file": os.getenv("SONOS_SPEAKERS_FILE", os.path.join(base_dir, "speakers.conf")),
            "playlists_file": os.getenv("SONOS_PLAYLISTS_FILE", os.path.join(base_dir, "playlists.conf")),
            "default_target": os.getenv("SONOS_DEFAULT_TARGET", "kitchen"),
            "coordinator": os.getenv("SONOS_COORDINATOR", "Kitchen"),
            "strict": os.getenv("SONOS_STRICT", "").strip().lower() in _TRUE_VALUES,
            "log_level": os.getenv("LOG_LEVEL", "WARNING"),
            "log_format": os.getenv("LOG_FORMAT", "text"),
        }

        # Numeric settings are only passed through when set so pydantic keeps its defaults
        for env_name, field_name in (
            ("SONOS_PRESET_SETTLE_S", "preset_settle_s"),
            ("SONOS_REQUEST_TIMEOUT_S", "request_timeout_s"),
            ("SONOS_CONNECT_ATTEMPTS", "connect_attempts"),
        ):
            raw = os.getenv(env_name)
            if raw:
                values[field_name] = raw

        config = cls(**values)
        logger.debug(f"Loaded configuration: api_url={config.api_url} speakers={config.speakers_file} "
                     f"playlists={config.playlists_file}")
        return config

    def with_overrides(self, **overrides) -> "RemoteConfig":
        """Return a copy with the given non-None values replaced"""
        update = {key: value for key, value in overrides.items() if value is not None}
        if not update:
            return self
        return self.model_validate({**self.model_dump(), **update})
