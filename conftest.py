import subprocess
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

import pytest

from icalshare.config import constants
from icalshare.publish.base import PublishResult

CONFIG_ENV_VARS = [
    constants.PERMA_KEY_ENV_VAR,
    constants.UPLOADTHING_TOKEN_ENV_VAR,
    constants.UPLOADTHING_APP_ID_ENV_VAR,
    constants.BACKEND_ENV_VAR,
    constants.TOOL_PATH_ENV_VAR,
    constants.OUTPUT_PATH_ENV_VAR,
    constants.TIMEZONE_ENV_VAR,
    constants.S3_BUCKET_ENV_VAR,
    constants.S3_PUBLIC_BASE_URL_ENV_VAR,
    constants.S3_ENDPOINT_URL_ENV_VAR,
]


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Dict[str, Path]:
    """Keep tests away from the real environment, .env files and keyring."""
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)

    user_env = tmp_path / "user-config" / ".env"
    local_env = tmp_path / "workdir" / ".env"
    monkeypatch.setattr("icalshare.config.settings.get_env_file_path", lambda: user_env)
    monkeypatch.setattr("icalshare.config.settings.get_working_dir_env_path", lambda: local_env)
    monkeypatch.setattr("icalshare.storage.key_manager.get_env_file_path", lambda: user_env)
    monkeypatch.setattr("icalshare.storage.key_manager.get_working_dir_env_path", lambda: local_env)
    monkeypatch.setattr("icalshare.storage.key_manager.load_from_keyring", lambda: None)
    return {"user_env": user_env, "local_env": local_env}


@pytest.fixture
def tool_file(tmp_path: Path) -> Path:
    """An existing (but never executed) calendar tool binary."""
    path = tmp_path / "bin" / "calendar-export"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("#!/bin/sh\n")
    return path


@pytest.fixture
def make_runner() -> Callable[..., Callable]:
    """Build a subprocess.run replacement returning a canned result."""

    def factory(
        stdout: str = "",
        stderr: str = "",
        returncode: int = 0,
        calls: Optional[List[Dict[str, Any]]] = None,
    ) -> Callable:
        def run(command, **kwargs):
            if calls is not None:
                calls.append({"command": command, **kwargs})
            return subprocess.CompletedProcess(command, returncode, stdout=stdout, stderr=stderr)

        return run

    return factory


class InMemoryPublisher:
    """Stand-in storage backend keyed by identifier."""

    base_url = "https://files.example.test"

    def __init__(self) -> None:
        self.objects: Dict[str, bytes] = {}
        self.calls = 0

    def publish(self, path: Union[str, Path], identifier: str) -> PublishResult:
        self.calls += 1
        self.objects[identifier] = Path(path).read_bytes()
        return PublishResult(url=f"{self.base_url}/{identifier}", key=identifier, backend="memory")


@pytest.fixture
def memory_publisher() -> InMemoryPublisher:
    return InMemoryPublisher()
