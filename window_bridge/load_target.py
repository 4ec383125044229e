"""Load target normalization.

A window's load target is either an absolute URI or a reference relative to
the local web server the host serves the application from. Whatever the
caller passes, the host always receives a fully-qualified URL.
"""

import logging
import re
from urllib.parse import SplitResult, urljoin, urlsplit, urlunsplit

from .errors import InvalidArgumentError

logger = logging.getLogger(__name__)

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
_SEGMENT_END = re.compile(r"[/?#]")

# Schemes whose URLs must name a host
NETWORK_SCHEMES = {"http", "https", "ws", "wss", "ftp"}

DEFAULT_PORTS = {"http": 80, "https": 443, "ws": 80, "wss": 443, "ftp": 21}


def build_base_url(host: str, port: int) -> str:
    """Base address relative load targets resolve against."""
    return f"http://{host}:{port}"


def normalize_load_target(load_target: str, base_url: str) -> str:
    """Resolve a load target to the fully-qualified URL sent to the host.

    Args:
        load_target: Absolute URI (``https://example.com``) or a reference
            relative to ``base_url`` (``/``, ``index.html``, ``?q=1``)
        base_url: Local web server address, e.g. ``http://localhost:8001``

    Returns:
        Canonical URL: lower-case scheme and host, default port dropped,
        empty path rendered as ``/``

    Raises:
        InvalidArgumentError: If the target is neither an absolute URI nor a
            valid relative reference
    """
    if not isinstance(load_target, str):
        raise InvalidArgumentError("load_target", load_target, "expected a string")

    candidate = load_target.strip()
    if _CONTROL_CHARS.search(candidate):
        raise InvalidArgumentError("load_target", load_target, "contains control characters")
    candidate = candidate.replace(" ", "%20")

    try:
        parts = urlsplit(candidate)
        if parts.scheme:
            normalized = _canonicalize(parts)
        else:
            # A relative reference may not carry a colon in its first segment,
            # otherwise it would be read as a (malformed) scheme
            first_segment = _SEGMENT_END.split(candidate, maxsplit=1)[0]
            if ":" in first_segment:
                raise InvalidArgumentError(
                    "load_target", load_target, "invalid scheme or relative reference"
                )
            normalized = _canonicalize(urlsplit(urljoin(base_url, candidate)))
    except InvalidArgumentError:
        raise
    except ValueError as e:
        raise InvalidArgumentError("load_target", load_target, str(e)) from e

    logger.debug(f"Normalized load target {load_target!r} -> {normalized}")
    return normalized


def _canonicalize(parts: SplitResult) -> str:
    """Rebuild a split URL in canonical form.

    Raises:
        ValueError: On a missing host for network schemes or an invalid port
    """
    scheme = parts.scheme.lower()
    hostname = parts.hostname or ""
    port = parts.port  # raises ValueError when out of range

    if scheme in NETWORK_SCHEMES and not hostname:
        raise ValueError(f"{scheme} URL requires a host")

    netloc = ""
    if parts.netloc:
        if ":" in hostname:
            hostname = f"[{hostname}]"
        netloc = hostname
        if port is not None and port != DEFAULT_PORTS.get(scheme):
            netloc = f"{netloc}:{port}"
        userinfo, sep, _ = parts.netloc.rpartition("@")
        if sep:
            netloc = f"{userinfo}@{netloc}"

    path = parts.path
    if not path and netloc:
        path = "/"

    return urlunsplit((scheme, netloc, path, parts.query, parts.fragment))
