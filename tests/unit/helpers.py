"""Test-only fakes shared by unit tests."""

from __future__ import annotations

import threading
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime

from bedlaunch.catalog.resolver import ModelResolver
from bedlaunch.config.models import ProfileConfig

SONNET_ID = "global.anthropic.claude-sonnet-4-5-20250929-v1:0"
HAIKU_ID = "global.anthropic.claude-haiku-4-5-20251001-v1:0"
OPUS_ID = "global.anthropic.claude-opus-4-1-20250805-v1:0"
US_HAIKU_ID = "us.anthropic.claude-haiku-4-5-20251001-v1:0"
CATALOG = (SONNET_ID, HAIKU_ID, OPUS_ID, US_HAIKU_ID)


class StaticFetcher:
    """Catalog fetcher returning a fixed listing or raising a fixed error."""

    def __init__(
        self,
        identifiers: Sequence[str] = CATALOG,
        *,
        error: Exception | None = None,
    ) -> None:
        self.identifiers = list(identifiers)
        self.error = error
        self.calls = 0

    def fetch(self) -> list[str]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.identifiers)


def resolver_factory(fetcher: StaticFetcher):  # noqa: ANN201
    """Return a ``ResolverFactory`` that always uses ``fetcher``."""

    def build(config: ProfileConfig) -> ModelResolver:
        del config
        return ModelResolver(fetcher)

    return build


def bedrock_profile(**overrides: str) -> ProfileConfig:
    """Build a complete Bedrock profile."""
    payload: dict[str, object] = {
        "version": "0.7.0",
        "profile_type": "bedrock",
        "region": "us-west-2",
        "cross_region": "global",
        "model": SONNET_ID,
        "fast_model": HAIKU_ID,
        "heavy_model": OPUS_ID,
    }
    payload.update(overrides)
    return ProfileConfig.model_validate(payload)


def api_profile(**overrides: str) -> ProfileConfig:
    """Build a complete API profile."""
    payload: dict[str, object] = {
        "version": "0.7.0",
        "profile_type": "api",
        "base_url": "https://llm.example.com",
        "api_key_env": "TEST_API_KEY",
        "model": "anthropic/claude-sonnet-4-5",
        "fast_model": "anthropic/claude-haiku-4-5",
        "heavy_model": "anthropic/claude-opus-4-1",
    }
    payload.update(overrides)
    return ProfileConfig.model_validate(payload)


@dataclass
class FakeHandle:
    """Stand-in for a started child process."""

    pid: int = 4242
    exited: threading.Event = field(default_factory=threading.Event)
    exit_code: int = 0


class FakeRunner:
    """Process runner whose child exits when the test says so."""

    def __init__(self) -> None:
        self.handle = FakeHandle()
        self.started: list[tuple[str, tuple[str, ...], dict[str, str]]] = []
        self.killed = False

    def start(
        self, executable: str, args: Sequence[str], env: Mapping[str, str]
    ) -> FakeHandle:
        self.started.append((executable, tuple(args), dict(env)))
        return self.handle

    def wait(self, handle: FakeHandle) -> int:
        handle.exited.wait(timeout=10)
        return handle.exit_code

    def kill(self, handle: FakeHandle) -> None:
        self.killed = True
        handle.exit_code = -9
        handle.exited.set()

    def exit(self, code: int) -> None:
        """Make the child exit with ``code``."""
        self.handle.exit_code = code
        self.handle.exited.set()


@dataclass
class RecordingSink:
    """Usage sink remembering every recorded session."""

    sessions: list[dict[str, object]] = field(default_factory=list)
    error: Exception | None = None

    def record_session(
        self,
        *,
        profile_name: str,
        identifiers: Sequence[str],
        start: datetime,
        end: datetime,
        exit_code: int,
    ) -> None:
        if self.error is not None:
            raise self.error
        self.sessions.append(
            {
                "profile_name": profile_name,
                "identifiers": tuple(identifiers),
                "start": start,
                "end": end,
                "exit_code": exit_code,
            }
        )
