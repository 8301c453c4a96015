from __future__ import annotations

import json
import logging
import threading
from typing import Any, Mapping, Optional

import httpx

from .environment import BeaconFn, RequestFn
from .logging import get_logger
from .types import ReportingMethod

BEACON_MAX_BYTES = 64 * 1024

FALLBACK_HEADERS: dict[str, str] = {
    "Cache-Control": "no-store",
    "Connection": "keep-alive",
    "Content-Type": "application/json",
}

logger = get_logger()


def http_post(url: str, body: str, headers: Mapping[str, str]) -> httpx.Response:
    """Blocking POST; raises ``httpx.HTTPError`` on network failure."""
    return httpx.post(url, content=body.encode("utf-8"), headers=dict(headers))


def _beacon_worker(url: str, body: str) -> None:
    try:
        http_post(url, body, {"Content-Type": "text/plain;charset=UTF-8"})
    except httpx.HTTPError as exc:
        logger.debug("Beacon delivery to %s failed: %s", url, exc)


def send_beacon(url: str, body: str) -> bool:
    """
    Queue ``body`` for delivery without waiting for a response.

    Returns False when the body exceeds the beacon size limit or the sender
    thread cannot be started. The thread is non-daemon so the interpreter
    waits for in-flight sends at exit.
    """
    if len(body.encode("utf-8")) > BEACON_MAX_BYTES:
        return False
    thread = threading.Thread(target=_beacon_worker, args=(url, body), name="rollbar-beacon", daemon=False)
    try:
        thread.start()
    except RuntimeError:
        # Interpreter shutting down or thread limit reached.
        return False
    return True


class Transport:
    """
    Delivers payloads: beacon first, one blocking request as fallback.

    Usage example
    -------------
        transport = Transport(beacon=send_beacon, request=http_post)
        method = transport.deliver(cfg.api_url, payload)
    """

    def __init__(
        self,
        *,
        beacon: Optional[BeaconFn],
        request: Optional[RequestFn],
        logger: logging.Logger | None = None,
    ) -> None:
        self._beacon = beacon
        self._request = request if request is not None else http_post
        self._logger = logger or get_logger()

    def deliver(self, url: str, payload: dict[str, Any]) -> ReportingMethod:
        """
        Send ``payload`` to ``url`` and return the method that carried it.

        The fallback rewrites ``payload["data"]["custom"]["reportingMethod"]``
        before serializing. Fallback failures are logged, never raised.
        """
        if self._beacon is not None and self._beacon(url, json.dumps(payload, default=str)):
            return ReportingMethod.BEACON

        self._logger.warning("[ROLLBAR COMMUNICATION ERROR] Beacon delivery failed; falling back to HTTP request")
        payload["data"].setdefault("custom", {})["reportingMethod"] = ReportingMethod.FETCH.value
        try:
            self._request(url, json.dumps(payload, default=str), FALLBACK_HEADERS)
        except httpx.HTTPError as exc:
            self._logger.error("[ROLLBAR COMMUNICATION ERROR] Fallback request to %s failed: %s", url, exc)
        return ReportingMethod.FETCH
