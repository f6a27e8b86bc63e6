"""Runtime configuration for ical-share.

Everything environment-derived is collected once into an ExportConfig at
startup and passed down explicitly.
"""

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Mapping, Optional

from icalshare.config.constants import (
    BACKEND_ENV_VAR,
    BACKEND_S3,
    BACKEND_UPLOADTHING,
    DEFAULT_OUTPUT_FILE,
    DEFAULT_TIMEZONE,
    OUTPUT_PATH_ENV_VAR,
    PERMA_KEY_ENV_VAR,
    S3_BUCKET_ENV_VAR,
    S3_ENDPOINT_URL_ENV_VAR,
    S3_PUBLIC_BASE_URL_ENV_VAR,
    SUPPORTED_BACKENDS,
    TIMEZONE_ENV_VAR,
    TOOL_PATH_ENV_VAR,
    UPLOADTHING_APP_ID_ENV_VAR,
    UPLOADTHING_TOKEN_ENV_VAR,
)
from icalshare.exceptions.errors import ConfigurationError
from icalshare.storage.env_storage import (
    get_env_file_path,
    get_working_dir_env_path,
    load_env_values,
)
from icalshare.storage.key_manager import load_upload_token

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExportConfig:
    """Settings for one export-and-publish run."""

    output_path: Path = Path(DEFAULT_OUTPUT_FILE)
    tool_path: Optional[str] = None
    timezone: str = DEFAULT_TIMEZONE
    perma_key: Optional[str] = None
    backend: str = BACKEND_UPLOADTHING
    uploadthing_token: Optional[str] = None
    uploadthing_app_id: Optional[str] = None
    s3_bucket: Optional[str] = None
    s3_public_base_url: Optional[str] = None
    s3_endpoint_url: Optional[str] = None

    def validate_publish(self) -> None:
        """Check that everything needed to publish is present.

        Raises:
            ConfigurationError: Naming the first missing item.
        """
        if self.backend not in SUPPORTED_BACKENDS:
            raise ConfigurationError(
                BACKEND_ENV_VAR,
                f"unknown backend '{self.backend}', expected one of {', '.join(SUPPORTED_BACKENDS)}",
            )
        if not self.perma_key:
            raise ConfigurationError(PERMA_KEY_ENV_VAR, "the stable identifier of the published file")

        if self.backend == BACKEND_UPLOADTHING:
            if not self.uploadthing_token:
                raise ConfigurationError(
                    UPLOADTHING_TOKEN_ENV_VAR, "set it or store it with 'ical-share set-token'"
                )
            if not self.uploadthing_app_id:
                raise ConfigurationError(UPLOADTHING_APP_ID_ENV_VAR)
        elif self.backend == BACKEND_S3:
            if not self.s3_bucket:
                raise ConfigurationError(S3_BUCKET_ENV_VAR)
            if not self.s3_public_base_url:
                raise ConfigurationError(S3_PUBLIC_BASE_URL_ENV_VAR)

    def with_overrides(self, **overrides) -> "ExportConfig":
        """Return a copy with the non-None overrides applied."""
        changes = {name: value for name, value in overrides.items() if value is not None}
        if "output_path" in changes:
            changes["output_path"] = Path(changes["output_path"])
        return replace(self, **changes)


def _collect_values(environ: Mapping[str, str]) -> Dict[str, str]:
    """Merge .env files and the environment; the environment wins."""
    values: Dict[str, str] = {}
    values.update(load_env_values(get_working_dir_env_path()))
    values.update(load_env_values(get_env_file_path()))
    values.update({name: value for name, value in environ.items() if value})
    return values


def load_config(
    environ: Optional[Mapping[str, str]] = None,
    require_publish: bool = False,
    **overrides,
) -> ExportConfig:
    """Build the run configuration.

    Priority: keyword overrides (CLI flags), then environment variables, then
    the user config .env, then the .env in the working directory. The upload
    token may also come from the OS keyring.

    Args:
        environ: Environment mapping (default: os.environ).
        require_publish: Validate the publishing settings as well.
        **overrides: ExportConfig field values; None means "not given".

    Returns:
        The resolved ExportConfig.

    Raises:
        ConfigurationError: If a required value is missing.
    """
    env = os.environ if environ is None else environ
    values = _collect_values(env)

    token = values.get(UPLOADTHING_TOKEN_ENV_VAR)
    backend = values.get(BACKEND_ENV_VAR, BACKEND_UPLOADTHING).strip().lower()
    if not token and backend == BACKEND_UPLOADTHING and overrides.get("uploadthing_token") is None:
        token = load_upload_token(values)

    config = ExportConfig(
        output_path=Path(values.get(OUTPUT_PATH_ENV_VAR, DEFAULT_OUTPUT_FILE)),
        tool_path=values.get(TOOL_PATH_ENV_VAR),
        timezone=values.get(TIMEZONE_ENV_VAR, DEFAULT_TIMEZONE),
        perma_key=values.get(PERMA_KEY_ENV_VAR),
        backend=backend,
        uploadthing_token=token,
        uploadthing_app_id=values.get(UPLOADTHING_APP_ID_ENV_VAR),
        s3_bucket=values.get(S3_BUCKET_ENV_VAR),
        s3_public_base_url=values.get(S3_PUBLIC_BASE_URL_ENV_VAR),
        s3_endpoint_url=values.get(S3_ENDPOINT_URL_ENV_VAR),
    ).with_overrides(**overrides)

    if require_publish:
        config.validate_publish()
    logger.debug("Loaded configuration (backend=%s, output=%s)", config.backend, config.output_path)
    return config
