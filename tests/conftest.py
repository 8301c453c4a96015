from __future__ import annotations

import logging
from typing import Any, Iterator, Mapping

import pytest

from rollbar_client.environment import Environment
from rollbar_client.logging import LOGGER_NAME

MINIMAL_OPTIONS: dict[str, Any] = {"access_token": "abc123", "environment": "test"}


class FakeBeacon:
    """Records beacon calls; returns ``result`` for each."""

    def __init__(self, result: bool = True) -> None:
        self.result = result
        self.calls: list[tuple[str, str]] = []

    def __call__(self, url: str, body: str) -> bool:
        self.calls.append((url, body))
        return self.result


class FakeRequest:
    """Records blocking-request calls."""

    def __init__(self, exc: BaseException | None = None) -> None:
        self.exc = exc
        self.calls: list[tuple[str, str, dict[str, str]]] = []

    def __call__(self, url: str, body: str, headers: Mapping[str, str]) -> None:
        self.calls.append((url, body, dict(headers)))
        if self.exc is not None:
            raise self.exc


@pytest.fixture(autouse=True)
def _reset_package_logger() -> Iterator[None]:
    logger = logging.getLogger(LOGGER_NAME)
    yield
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def beacon() -> FakeBeacon:
    return FakeBeacon()


@pytest.fixture
def request_fn() -> FakeRequest:
    return FakeRequest()


@pytest.fixture
def environment(beacon: FakeBeacon, request_fn: FakeRequest) -> Environment:
    return Environment(
        user_agent="Mozilla/5.0 (X11; Linux x86_64) Firefox/118.0",
        location="https://example.test/checkout",
        languages=["en-US", "fr-FR"],
        beacon=beacon,
        request=request_fn,
    )


@pytest.fixture
def options() -> dict[str, Any]:
    return {**MINIMAL_OPTIONS, "set_context": lambda: "https://example.test/checkout"}
