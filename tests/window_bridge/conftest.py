"""Shared fixtures for window-bridge tests."""

import itertools
from typing import Any, List, Tuple

import pytest

from window_bridge.channel import EventChannel
from window_bridge.config import BridgeSettings
from window_bridge.platform_info import PlatformInfo
from window_bridge.services import CreationCorrelator, WindowRegistry


class RecordingChannel(EventChannel):
    """In-memory channel that records emitted events.

    Tests play the host by calling `deliver()`, which dispatches exactly
    like a real transport would.
    """

    def __init__(self) -> None:
        super().__init__()
        self.emitted: List[Tuple[str, Tuple[Any, ...]]] = []

    def emit(self, event: str, *args: Any) -> None:
        self.emitted.append((event, args))

    def deliver(self, event: str, *args: Any) -> None:
        self.dispatch(event, list(args))

    def emitted_events(self, event: str) -> List[Tuple[Any, ...]]:
        return [args for name, args in self.emitted if name == event]


@pytest.fixture
def channel() -> RecordingChannel:
    return RecordingChannel()


@pytest.fixture
def registry() -> WindowRegistry:
    return WindowRegistry()


@pytest.fixture
def settings() -> BridgeSettings:
    """Settings with the default base URL and no creation timeout."""
    return BridgeSettings(host="localhost", web_port=8001, creation_timeout=None)


@pytest.fixture
def linux_platform() -> PlatformInfo:
    return PlatformInfo(system="Linux", release="6.8.0-generic", build=None)


@pytest.fixture
def windows10_platform() -> PlatformInfo:
    return PlatformInfo(system="Windows", release="10", build=19045)


@pytest.fixture
def token_factory():
    """Deterministic request tokens: req-1, req-2, ..."""
    counter = itertools.count(1)
    return lambda: f"req-{next(counter)}"


@pytest.fixture
def correlator(channel, registry, settings, linux_platform, token_factory) -> CreationCorrelator:
    return CreationCorrelator(
        channel,
        registry,
        settings=settings,
        platform_info=linux_platform,
        token_factory=token_factory,
    )
