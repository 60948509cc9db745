from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)


class GithubConfig(BaseModel):
    """GitHub sign-in; only members of ``organization`` are admitted."""

    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    organization: Optional[str] = None

    @property
    def enabled(self) -> bool:
        return bool(self.client_id and self.client_secret and self.organization)


class Office365Config(BaseModel):
    """Office365 sign-in; admits accounts whose mail ends with ``domain``."""

    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    domain: Optional[str] = None

    @property
    def enabled(self) -> bool:
        return bool(self.client_id and self.client_secret and self.domain)


class RetroConfig(BaseModel):
    # where the browser is sent back to after sign-in
    app_url: str = "/"
    log_level: str = "INFO"
    http_timeout_s: float = 10.0

    github: GithubConfig = Field(default_factory=GithubConfig)
    office365: Office365Config = Field(default_factory=Office365Config)


_ENV_KEYS = {
    "RETRO_BOARD_APP_URL": ("app_url",),
    "RETRO_BOARD_LOG_LEVEL": ("log_level",),
    "RETRO_BOARD_HTTP_TIMEOUT_S": ("http_timeout_s",),
    "RETRO_BOARD_GITHUB_CLIENT_ID": ("github", "client_id"),
    "RETRO_BOARD_GITHUB_CLIENT_SECRET": ("github", "client_secret"),
    "RETRO_BOARD_GITHUB_ORGANIZATION": ("github", "organization"),
    "RETRO_BOARD_OFFICE365_CLIENT_ID": ("office365", "client_id"),
    "RETRO_BOARD_OFFICE365_CLIENT_SECRET": ("office365", "client_secret"),
    "RETRO_BOARD_OFFICE365_DOMAIN": ("office365", "domain"),
}


class ConfigManager:
    """Load configuration from an optional JSON file with environment overrides.

    Precedence: defaults < config file (RETRO_BOARD_CONFIG_PATH) < RETRO_BOARD_*
    environment variables. A missing or unreadable file is not fatal, the
    defaults are used instead.
    """

    def __init__(self, path: Optional[str] = None) -> None:
        self.path = path or os.getenv("RETRO_BOARD_CONFIG_PATH")

    def _read_file(self) -> dict:
        if not self.path:
            return {}
        cfg_path = Path(self.path)
        if not cfg_path.exists():
            logger.info("config file %s not found, using defaults", cfg_path)
            return {}
        try:
            data = json.loads(cfg_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("ignoring unreadable config file %s: %s", cfg_path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("ignoring config file %s: top level must be an object", cfg_path)
            return {}
        return data

    def load(self) -> RetroConfig:
        data = self._read_file()

        for env_key, path in _ENV_KEYS.items():
            v = os.getenv(env_key)
            if v is None or v.strip() == "":
                continue
            target = data
            for part in path[:-1]:
                section = target.get(part)
                if not isinstance(section, dict):
                    section = {}
                    target[part] = section
                target = section
            target[path[-1]] = v.strip()

        try:
            return RetroConfig.model_validate(data)
        except ValidationError as e:
            logger.warning("invalid configuration, using defaults: %s", e)
            return RetroConfig()
