"""Pytest fixtures and configuration for mailsync tests.

Provides common fixtures for configuration, a recording optimistic view and
a controllable fake of the remote mail service.
"""

import asyncio
import os
from pathlib import Path
from typing import Any, Generator

import pytest

from mailsync.config import reset_config


@pytest.fixture(autouse=True)
def reset_config_singleton() -> Generator[None, None, None]:
    """Reset the config singleton before each test."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def sample_config_yaml() -> str:
    """Return a minimal valid config.yaml content."""
    return """
schema_version: 1

service:
  base_url: "http://mail.test/"
  timeout_seconds: 5

auth:
  token_env_var: "TEST_MAILSYNC_TOKEN"

logging:
  level: "DEBUG"
  json_output: false
"""


@pytest.fixture
def config_file(tmp_path: Path, sample_config_yaml: str) -> Path:
    """Create a temporary config file with valid content."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    config_path = config_dir / "config.yaml"
    config_path.write_text(sample_config_yaml)
    return config_path


@pytest.fixture
def set_config_env(config_file: Path) -> Generator[None, None, None]:
    """Point MAILSYNC_CONFIG_PATH at the temporary config file."""
    old_value = os.environ.get("MAILSYNC_CONFIG_PATH")
    os.environ["MAILSYNC_CONFIG_PATH"] = str(config_file)
    yield
    if old_value is None:
        del os.environ["MAILSYNC_CONFIG_PATH"]
    else:
        os.environ["MAILSYNC_CONFIG_PATH"] = old_value


class RecordingView:
    """OptimisticView backed by a dict of items, recording every callback.

    Removed items are kept aside and put back on restore(), the way a UI
    list would.
    """

    def __init__(self, items: dict[str, dict[str, Any]] | None = None):
        self.items: dict[str, dict[str, Any]] = {k: dict(v) for k, v in (items or {}).items()}
        self.removed: dict[str, dict[str, Any]] = {}
        self.calls: list[tuple[Any, ...]] = []

    def apply_update(self, email_id: str, patch: dict[str, Any]) -> None:
        self.calls.append(("update", email_id, dict(patch)))
        self.items.setdefault(email_id, {}).update(patch)

    def apply_remove(self, email_id: str) -> None:
        self.calls.append(("remove", email_id))
        if email_id in self.items:
            self.removed[email_id] = self.items.pop(email_id)

    def restore(self, email_id: str) -> None:
        self.calls.append(("restore", email_id))
        if email_id in self.removed:
            self.items[email_id] = self.removed.pop(email_id)

    def current(self, email_id: str, field: str) -> Any:
        return self.items.get(email_id, {}).get(field)

    def count(self, kind: str) -> int:
        return sum(1 for call in self.calls if call[0] == kind)


class FakeMailService:
    """RemoteMailService double.

    Each request is recorded, then waits on ``gate`` (open by default) and
    either raises ``error`` or returns ``response``.
    """

    def __init__(
        self,
        response: dict[str, Any] | None = None,
        error: Exception | None = None,
    ):
        self.response = response if response is not None else {"success": True}
        self.error = error
        self.requests: list[tuple[str, str, dict[str, Any] | None]] = []
        self.gate = asyncio.Event()
        self.gate.set()

    def hold(self) -> None:
        """Make the next requests block until release()."""
        self.gate.clear()

    def release(self) -> None:
        self.gate.set()

    async def request(
        self,
        method: str,
        endpoint: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        self.requests.append((method, endpoint, json))
        await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def view() -> RecordingView:
    """Return a view holding one unread, unflagged email 'e1'."""
    return RecordingView(
        {"e1": {"read": False, "flagStatus": "notFlagged", "flagColor": None}}
    )


@pytest.fixture
def service() -> FakeMailService:
    """Return a fake mail service that answers success."""
    return FakeMailService()
