"""
HTTP client for the local speaker control API
"""

import threading
from typing import Callable, List, Optional

import click
import requests
from tenacity import Retrying, retry_if_exception, stop_after_attempt, wait_exponential
from urllib3.exceptions import MaxRetryError, NewConnectionError

from .config import RemoteConfig
from .logging_utils import get_logger, log_error, log_request

logger = get_logger(__name__)

_SESSION: Optional[requests.Session] = None
_SESSION_LOCK = threading.Lock()


def _never_reached_service(exc: BaseException) -> bool:
    """True when the request failed before a connection was made.

    Only these failures are retried. Read timeouts and aborted connections
    are not, since the service may already have applied the request
    (e.g. a relative volume change).
    """
    if isinstance(exc, requests.exceptions.ConnectTimeout):
        return True
    if not isinstance(exc, requests.exceptions.ConnectionError) or not exc.args:
        return False
    cause = exc.args[0]
    if isinstance(cause, MaxRetryError):
        cause = cause.reason
    return isinstance(cause, NewConnectionError)


class DispatchError(Exception):
    """A request could not be delivered to the speaker API"""

    def __init__(self, url: str, cause: Exception):
        super().__init__(f"Request to {url} failed: {cause}")
        self.url = url
        self.cause = cause


def _http_session() -> requests.Session:
    global _SESSION
    if _SESSION is None:
        with _SESSION_LOCK:
            if _SESSION is None:
                session = requests.Session()
                session.headers.update({"User-Agent": "sonos-remote/1.0"})
                _SESSION = session
    return _SESSION


def encode_segment(text: str) -> str:
    """Percent-encode the spaces in a path segment; everything else is left as is"""
    return text.replace(" ", "%20")


class SonosHttpApi:
    """Fire-and-forget GET client for the speaker HTTP API"""

    def __init__(self, cfg: RemoteConfig, echo: Callable[[str], None] = click.echo):
        self.cfg = cfg
        self.base_url = cfg.api_url.rstrip("/")
        self.echo = echo
        self.sent: List[str] = []

    def url_for(self, *segments: str) -> str:
        """Join already-encoded path segments onto the base address"""
        return self.base_url + "/" + "/".join(segments)

    def room(self, room: str, action: str, value: Optional[str] = None) -> None:
        """GET /{room}/{action}[/{value}]"""
        segments = [encode_segment(room), action]
        if value is not None:
            segments.append(value)
        self.get(*segments)

    def apply_preset(self, name: str) -> None:
        """GET /preset/{name}"""
        self.get("preset", name)

    def pause_all(self) -> None:
        """GET /pauseall"""
        self.get("pauseall")

    def say_all(self, message: str) -> None:
        """GET /sayall/{message}"""
        self.get("sayall", encode_segment(message))

    def get(self, *segments: str) -> None:
        """
        Issue one GET request and discard the response.

        Transport failures are logged and ignored unless the configuration is
        strict, in which case they raise DispatchError. Status codes and bodies
        are never inspected.

        Args:
            segments: Path segments, already encoded
        """
        url = self.url_for(*segments)
        self.sent.append(url)
        log_request(logger, url, dry_run=self.cfg.dry_run)

        if self.cfg.dry_run:
            self.echo(f"GET {url}")
            return

        session = _http_session()
        try:
            for attempt in Retrying(
                stop=stop_after_attempt(self.cfg.connect_attempts),
                wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
                retry=retry_if_exception(_never_reached_service),
                reraise=True,
            ):
                with attempt:
                    response = session.get(url, timeout=self.cfg.request_timeout_s)
                    logger.debug(f"{url} -> {response.status_code}")
        except requests.exceptions.RequestException as e:
            log_error(logger, url, e, {"attempts": self.cfg.connect_attempts})
            if self.cfg.strict:
                raise DispatchError(url, e) from e
