from __future__ import annotations

import dataclasses
import json
import re
import traceback as _traceback
from typing import Any

from ..config import ReporterConfig
from ..environment import Environment
from ..types import OccurrenceArguments, ReportingMethod
from ..version import NOTIFIER_NAME, __version__
from .canonical import build_sorted, deep_merge

FRAMEWORK = "browser-js"
LANGUAGE = "javascript"
PLATFORM = "browser"
UNKNOWN_CLASS = "(unknown)"


def _compact_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)


def _exception_class(error: BaseException) -> str:
    return type(error).__name__ or getattr(error, "name", None) or UNKNOWN_CLASS


def _stack_text(error: BaseException) -> str:
    return "".join(_traceback.format_exception(type(error), error, error.__traceback__))


def get_stack_frames(error: BaseException) -> list[dict[str, Any]]:
    """Parse the exception's traceback into ``{filename, lineno, colno, method}`` frames."""
    return [
        {
            "colno": getattr(frame, "colno", None),
            "filename": frame.filename,
            "lineno": frame.lineno,
            "method": frame.name,
        }
        for frame in _traceback.extract_tb(error.__traceback__)
    ]


def _build_body(title: str, error: BaseException | None) -> dict[str, Any]:
    if error is None:
        return {"message": {"body": title}}
    return {
        "trace": {
            "exception": {
                "class": _exception_class(error),
                "description": title,
                "message": str(error),
                "raw": "".join(_traceback.format_exception_only(type(error), error)).strip(),
                "stack": _stack_text(error),
            },
            "frames": get_stack_frames(error),
        }
    }


def _describe_value(value: Any) -> Any:
    if isinstance(value, re.Pattern):
        return value.pattern
    if callable(value):
        module = getattr(value, "__module__", None)
        qualname = getattr(value, "__qualname__", None)
        if qualname:
            return f"{module}.{qualname}" if module else qualname
        return repr(value)
    return value


def serialize_configuration(config: ReporterConfig) -> dict[str, Any]:
    """Snapshot every configuration field except the access token."""
    return {
        f.name: _describe_value(getattr(config, f.name))
        for f in dataclasses.fields(config)
        if f.name != "access_token"
    }


def build_title(title: str, config: ReporterConfig) -> str:
    prefix = "" if config.is_browser_supported else config.browser_unsupported_title_prefix
    return f"{prefix}{title}"


def build_payload(
    arguments: OccurrenceArguments,
    config: ReporterConfig,
    environment: Environment,
) -> dict[str, Any]:
    """
    Turn one occurrence into the canonical wire record.

    Pure: reads the configuration and environment, performs no I/O.

    Returns
    -------
    payload
        ``{"access_token": ..., "data": {...}}`` with every mapping's keys in
        collation order (lists left untouched).

    Usage example
    -------------
        payload = build_payload(OccurrenceArguments("error", "boom"), cfg, env)
        payload["data"]["fingerprint"]  # "boom"
    """
    title = build_title(arguments.title, config)

    javascript: dict[str, Any] = {
        "browser": environment.user_agent,
        "guess_uncaught_frames": True,
        "source_map_enabled": True,
    }
    if config.commit_hash:
        javascript["code_version"] = config.commit_hash

    custom: dict[str, Any] = {
        "isBrowserSupported": config.is_browser_supported,
        "languagePreferred": environment.language,
        "languages": ", ".join(environment.languages),
        "reportingMethod": ReportingMethod.BEACON.value,
    }
    if arguments.action_history is not None:
        custom["actionHistory"] = _compact_json(list(arguments.action_history))
    if arguments.application_state is not None:
        custom["applicationState"] = _compact_json(arguments.application_state)
    if config.has_configuration_in_payload:
        custom["configuration"] = serialize_configuration(config)
    if config.location_info is not None:
        custom["locationInfo"] = config.location_info

    data: dict[str, Any] = {
        "body": _build_body(title, arguments.error),
        "client": {"javascript": javascript},
        "context": config.set_context(),
        "custom": custom,
        "environment": config.environment,
        "framework": FRAMEWORK,
        "language": LANGUAGE,
        "level": arguments.level,
        "notifier": {"name": NOTIFIER_NAME, "version": __version__},
        "platform": PLATFORM,
        "title": title,
    }
    if config.user_info is not None:
        data["person"] = dict(config.user_info)

    if isinstance(config.fingerprint, str):
        data["fingerprint"] = config.fingerprint
    elif config.fingerprint is not False:
        data["fingerprint"] = title

    payload = {"access_token": config.access_token, "data": data}
    return build_sorted(deep_merge(payload, config.custom_payload_fields))
