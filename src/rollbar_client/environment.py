"""Runtime facts and delivery primitives the reporter consumes."""

from __future__ import annotations

import locale
import os
import platform
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Mapping, Optional

BeaconFn = Callable[[str, str], bool]
RequestFn = Callable[[str, str, Mapping[str, str]], object]


def current_location() -> str:
    """Return a ``file://`` URI for the running script (cwd when there is none)."""
    script = sys.argv[0] if sys.argv else ""
    if script and script not in ("-c", "-m"):
        return Path(script).resolve().as_uri()
    return Path.cwd().resolve().as_uri()


def default_user_agent() -> str:
    """Identify the interpreter and host the way a browser user agent would."""
    return (
        f"{platform.python_implementation()}/{platform.python_version()} "
        f"({platform.system()} {platform.release()}; {platform.machine()})"
    )


def _normalize_language_tag(raw: str) -> str:
    # "en_US.UTF-8" -> "en-US"
    tag = raw.split(".", 1)[0].split("@", 1)[0]
    return tag.replace("_", "-")


def default_languages() -> list[str]:
    """
    Resolve the preferred language list, most preferred first.

    Search order
    ------------
    1) ``LANGUAGE`` (colon separated)
    2) ``LC_ALL`` / ``LC_MESSAGES`` / ``LANG``
    3) the process locale
    """
    language = os.environ.get("LANGUAGE", "").strip()
    if language:
        tags = [_normalize_language_tag(part) for part in language.split(":") if part.strip()]
        tags = [t for t in tags if t and t not in ("C", "POSIX")]
        if tags:
            return tags

    for var in ("LC_ALL", "LC_MESSAGES", "LANG"):
        value = os.environ.get(var, "").strip()
        if value:
            tag = _normalize_language_tag(value)
            if tag and tag not in ("C", "POSIX"):
                return [tag]

    loc = locale.getlocale()[0]
    if loc:
        return [_normalize_language_tag(loc)]
    return ["en-US"]


@dataclass
class Environment:
    """
    Everything the pipeline reads from its host.

    Parameters
    ----------
    user_agent
        Runtime identification string; matched by ``browsers_supported_regex``.
    location
        Current location; the default context string.
    languages
        Preferred languages, most preferred first.
    beacon
        Fire-and-forget primitive ``(url, body) -> bool``. ``None`` means unavailable.
    request
        Blocking primitive ``(url, body, headers)`` used as the fallback.

    Usage example
    -------------
        env = Environment.detect()
        env = Environment(user_agent="test", beacon=lambda url, body: True)
    """
    user_agent: str = field(default_factory=default_user_agent)
    location: str = field(default_factory=current_location)
    languages: list[str] = field(default_factory=default_languages)
    beacon: Optional[BeaconFn] = None
    request: Optional[RequestFn] = None

    @property
    def language(self) -> str:
        return self.languages[0] if self.languages else ""

    def current_location(self) -> str:
        """Default context provider."""
        return self.location

    @classmethod
    def detect(cls) -> "Environment":
        """Build an environment wired to the real beacon and HTTP primitives."""
        from .transport import http_post, send_beacon  # avoid import cycle

        return cls(beacon=send_beacon, request=http_post)
