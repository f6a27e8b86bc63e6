from pathlib import Path
from typing import Dict

import pytest

from icalshare.config.settings import ExportConfig, load_config
from icalshare.exceptions import ConfigurationError
from icalshare.storage import key_manager

PUBLISH_ENV = {
    "CALENDAR_PERMA_KEY": "perma-key",
    "UPLOADTHING_TOKEN": "sk_test_123456789",
    "UPLOADTHING_APP_ID": "app123",
}


def test_defaults_without_any_configuration() -> None:
    config = load_config(environ={})

    assert config.output_path == Path("shared.ics")
    assert config.timezone == "local"
    assert config.backend == "uploadthing"
    assert config.perma_key is None


def test_environment_values_are_collected() -> None:
    env = dict(PUBLISH_ENV, ICAL_SHARE_OUTPUT="/tmp/out.ics", ICAL_SHARE_TIMEZONE="UTC")

    config = load_config(environ=env, require_publish=True)

    assert config.perma_key == "perma-key"
    assert config.uploadthing_token == "sk_test_123456789"
    assert config.output_path == Path("/tmp/out.ics")
    assert config.timezone == "UTC"


def test_overrides_win_over_environment() -> None:
    env = dict(PUBLISH_ENV, ICAL_SHARE_TIMEZONE="UTC")

    config = load_config(environ=env, timezone="Europe/London", output_path="week.ics", tool_path=None)

    assert config.timezone == "Europe/London"
    assert config.output_path == Path("week.ics")
    assert config.tool_path is None


@pytest.mark.parametrize("missing", sorted(PUBLISH_ENV))
def test_missing_publish_setting_is_named(missing: str) -> None:
    env = {name: value for name, value in PUBLISH_ENV.items() if name != missing}

    with pytest.raises(ConfigurationError) as excinfo:
        load_config(environ=env, require_publish=True)

    assert excinfo.value.item == missing
    assert missing in str(excinfo.value)


def test_s3_backend_requires_bucket_and_base_url() -> None:
    env = {"CALENDAR_PERMA_KEY": "perma-key", "ICAL_SHARE_BACKEND": "S3"}

    with pytest.raises(ConfigurationError) as excinfo:
        load_config(environ=env, require_publish=True)
    assert excinfo.value.item == "ICAL_SHARE_S3_BUCKET"

    env["ICAL_SHARE_S3_BUCKET"] = "calendars"
    env["ICAL_SHARE_PUBLIC_BASE_URL"] = "https://cdn.example.test"
    config = load_config(environ=env, require_publish=True)
    assert config.backend == "s3"


def test_unknown_backend_is_rejected() -> None:
    with pytest.raises(ConfigurationError):
        ExportConfig(perma_key="k", backend="ftp").validate_publish()


def test_dotenv_files_are_read(isolated_config: Dict[str, Path]) -> None:
    local_env = isolated_config["local_env"]
    local_env.parent.mkdir(parents=True)
    local_env.write_text("CALENDAR_PERMA_KEY=from-local\nUPLOADTHING_APP_ID='app-local'\n")
    user_env = isolated_config["user_env"]
    user_env.parent.mkdir(parents=True)
    user_env.write_text("CALENDAR_PERMA_KEY=from-user\n")

    config = load_config(environ={})

    assert config.perma_key == "from-user"
    assert config.uploadthing_app_id == "app-local"


def test_environment_beats_dotenv(isolated_config: Dict[str, Path]) -> None:
    user_env = isolated_config["user_env"]
    user_env.parent.mkdir(parents=True)
    user_env.write_text("CALENDAR_PERMA_KEY=from-file\n")

    config = load_config(environ={"CALENDAR_PERMA_KEY": "from-env"})

    assert config.perma_key == "from-env"


def test_token_falls_back_to_keyring(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(key_manager, "load_from_keyring", lambda: "sk_from_keyring_1234")
    env = {"CALENDAR_PERMA_KEY": "perma-key", "UPLOADTHING_APP_ID": "app123"}

    config = load_config(environ=env, require_publish=True)

    assert config.uploadthing_token == "sk_from_keyring_1234"


def test_token_source_reports_environment() -> None:
    token, source = key_manager.get_upload_token_source({"UPLOADTHING_TOKEN": "sk_env"})

    assert token == "sk_env"
    assert "UPLOADTHING_TOKEN" in source


def test_save_token_prefers_keyring(monkeypatch: pytest.MonkeyPatch) -> None:
    saved = {}

    def fake_save(token: str) -> bool:
        saved["token"] = token
        return True

    monkeypatch.setattr(key_manager, "save_to_keyring", fake_save)

    ok, where = key_manager.save_upload_token("  'sk_live_abcdef'  ")

    assert ok is True
    assert where == "OS Keyring"
    assert saved["token"] == "sk_live_abcdef"


def test_save_token_falls_back_to_env_file(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    target = tmp_path / "config" / ".env"
    monkeypatch.setattr(key_manager, "save_to_keyring", lambda token: False)
    monkeypatch.setattr("icalshare.storage.env_storage.get_env_file_path", lambda: target)

    ok, where = key_manager.save_upload_token("sk_live_abcdef")

    assert ok is True
    assert str(target) in where
    assert "UPLOADTHING_TOKEN='sk_live_abcdef'" in target.read_text()
