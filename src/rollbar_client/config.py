from __future__ import annotations

import dataclasses
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Pattern, Union

import yaml

from .environment import Environment, current_location

DEFAULT_API_URL = "https://api.rollbar.com/api/1/item/"
DEFAULT_UNSUPPORTED_TITLE_PREFIX = "[UNSUPPORTED BROWSER] "
REQUIRED_OPTIONS: tuple[str, ...] = ("access_token", "environment")

_OPTION_ALIASES = {"transform_payload": "transform"}


class ConfigurationError(ValueError):
    """Raised when reporter configuration is missing, unknown or malformed."""


def _noop_transform(data: dict[str, Any], config: "ReporterConfig") -> None:
    return None


@dataclass(frozen=True)
class ReporterConfig:
    """
    Fully resolved reporter configuration.

    Build it with :func:`resolve_configuration` rather than directly, so that
    required keys are checked and the user-agent rule is applied.

    Parameters
    ----------
    access_token
        Delivery credential; never embedded in the configuration snapshot.
    environment
        Free-text environment label placed on every payload.
    api_url
        Ingestion endpoint.
    is_verbose
        Mirror every occurrence to the local logger.
    has_configuration_in_payload
        Embed a serialized snapshot of this object in ``custom.configuration``.
    is_browser_supported
        False marks occurrences as coming from a degraded runtime.
    browser_unsupported_title_prefix
        Prepended to the title (and default fingerprint) when unsupported.
    set_context
        Zero-argument callable returning the context string.
    transform
        ``(data, config)`` hook allowed to edit ``payload["data"]`` in place.
    browsers_supported_regex
        Searched once against the user agent; overrides ``is_browser_supported``.
    fingerprint
        A string fixes the fingerprint, False removes it, None defaults to the title.
    should_ignore_occurrence
        ``(payload, config) -> bool`` veto predicate.
    on_unhandled_error / on_unhandled_rejection
        None installs the default listener, False installs nothing, a callable
        is installed as-is.
    """

    access_token: str
    environment: str
    api_url: str = DEFAULT_API_URL
    is_verbose: bool = True
    has_configuration_in_payload: bool = False
    is_browser_supported: bool = True
    browser_unsupported_title_prefix: str = DEFAULT_UNSUPPORTED_TITLE_PREFIX
    set_context: Callable[[], str] = current_location
    transform: Callable[[dict[str, Any], "ReporterConfig"], None] = _noop_transform

    browsers_supported_regex: Optional[Union[str, Pattern[str]]] = None
    commit_hash: Optional[str] = None
    custom_payload_fields: Optional[Mapping[str, Any]] = None
    fingerprint: Optional[Union[str, bool]] = None
    location_info: Optional[Mapping[str, Any]] = None
    should_ignore_occurrence: Optional[Callable[[dict[str, Any], "ReporterConfig"], bool]] = None
    user_info: Optional[Mapping[str, Any]] = None
    on_unhandled_error: Optional[Union[Callable[..., Any], bool]] = field(default=None, repr=False)
    on_unhandled_rejection: Optional[Union[Callable[..., Any], bool]] = field(default=None, repr=False)


_KNOWN_OPTIONS = frozenset(f.name for f in dataclasses.fields(ReporterConfig))


def _canonical_options(options: Mapping[str, Any]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for key, value in options.items():
        name = _OPTION_ALIASES.get(key, key)
        if name not in _KNOWN_OPTIONS:
            raise ConfigurationError(f'Unknown configuration key "{key}"')
        # The canonical name wins over its alias when both are given.
        if name != key and name in options:
            continue
        out[name] = value
    return out


def resolve_configuration(options: Mapping[str, Any], *, environment: Environment) -> ReporterConfig:
    """
    Merge caller options over the defaults and apply the user-agent rule.

    The merge is shallow: a caller value replaces the default entirely. When
    no ``set_context`` is given, the context is the environment's location.

    Usage example
    -------------
        cfg = resolve_configuration({"access_token": "abc", "environment": "prod"}, environment=env)
    """
    for required in REQUIRED_OPTIONS:
        if required not in options:
            raise ConfigurationError(f'Configuration key "{required}" is required')

    resolved = _canonical_options(options)
    if resolved.get("set_context") is None:
        resolved["set_context"] = environment.current_location
    regex = resolved.get("browsers_supported_regex")
    if regex:
        pattern = regex if isinstance(regex, re.Pattern) else re.compile(regex)
        resolved["is_browser_supported"] = pattern.search(environment.user_agent) is not None
    return ReporterConfig(**resolved)


def load_options(path: Path) -> dict[str, Any]:
    """Load reporter options from a YAML mapping."""
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as error:
        raise ConfigurationError(f"Could not parse options file {path}: {error}") from error
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigurationError("Options file must be a YAML mapping at top level.")
    return raw


def options_from_env(prefix: str = "ROLLBAR_") -> dict[str, Any]:
    """
    Read reporter options from environment variables.

    Supported variables
    -------------------
    - <PFX>ACCESS_TOKEN, <PFX>ENVIRONMENT, <PFX>API_URL, <PFX>COMMIT_HASH
    - <PFX>VERBOSE: "0"/"false" disables console echo
    - <PFX>FINGERPRINT: "false" disables fingerprinting, any other value fixes it

    Unset variables are omitted so they never shadow file or default values.
    """
    options: dict[str, Any] = {}
    for var, key in (
        ("ACCESS_TOKEN", "access_token"),
        ("ENVIRONMENT", "environment"),
        ("API_URL", "api_url"),
        ("COMMIT_HASH", "commit_hash"),
    ):
        value = os.getenv(f"{prefix}{var}")
        if value is not None and value.strip():
            options[key] = value.strip()

    verbose = os.getenv(f"{prefix}VERBOSE")
    if verbose is not None:
        options["is_verbose"] = verbose.strip().lower() not in ("0", "false", "no", "")

    fingerprint = os.getenv(f"{prefix}FINGERPRINT")
    if fingerprint is not None and fingerprint.strip():
        options["fingerprint"] = False if fingerprint.strip().lower() == "false" else fingerprint.strip()
    return options
