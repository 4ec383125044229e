"""Configuration loader for window-bridge.

Settings are resolved in three layers: built-in defaults, an optional JSON
config file, then ``WINDOW_BRIDGE_*`` environment variables.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, Field, field_validator

from .constants import BridgeDefaults
from .load_target import build_base_url

logger = logging.getLogger(__name__)


class BridgeSettings(BaseModel):
    """Connection and protocol settings for the controller."""

    host: str = Field(
        default=BridgeDefaults.WEB_HOST,
        min_length=1,
        description="Host of the local web server relative load targets resolve against"
    )

    web_port: int = Field(
        default=BridgeDefaults.WEB_PORT,
        ge=1,
        le=65535,
        description="Port of the local web server"
    )

    socket_path: Optional[Path] = Field(
        default=None,
        description="UNIX socket of the host event bridge (overrides TCP)"
    )

    bridge_host: str = Field(
        default=BridgeDefaults.BRIDGE_HOST,
        min_length=1,
        description="TCP host of the host event bridge"
    )

    bridge_port: int = Field(
        default=BridgeDefaults.BRIDGE_PORT,
        ge=1,
        le=65535,
        description="TCP port of the host event bridge"
    )

    creation_timeout: Optional[float] = Field(
        default=BridgeDefaults.CREATION_TIMEOUT,
        gt=0,
        description="Seconds to wait for a creation notification (None = forever)"
    )

    log_level: str = Field(default="WARNING", description="Logging level used when no CLI flag is given")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and validate the logging level name."""
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid log level: {v}")
        return level

    @field_validator("creation_timeout", mode="before")
    @classmethod
    def parse_creation_timeout(cls, v: Any) -> Any:
        """Accept 'none' or an empty string from the environment as no timeout."""
        if isinstance(v, str) and v.strip().lower() in ("", "none", "never"):
            return None
        return v

    @property
    def base_url(self) -> str:
        """Base address for relative load targets."""
        return build_base_url(self.host, self.web_port)

    @classmethod
    def load(
        cls,
        config_file: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "BridgeSettings":
        """Load settings from defaults, a JSON file and the environment.

        Args:
            config_file: JSON config path (default: ~/.config/window-bridge/config.json).
                A missing file is not an error.
            environ: Environment mapping (default: os.environ)

        Returns:
            Validated BridgeSettings

        Raises:
            pydantic.ValidationError: If a value is invalid
            ValueError: If the config file is not valid JSON
        """
        data: Dict[str, Any] = {}

        path = config_file or BridgeDefaults.CONFIG_FILE
        if path.exists():
            try:
                with open(path) as f:
                    data.update(json.load(f))
                logger.debug(f"Loaded settings from {path}")
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid JSON in config file {path}: {e}") from e
        elif config_file is not None:
            logger.warning(f"Config file does not exist: {path}")

        data.update(_settings_from_env(environ if environ is not None else os.environ))
        return cls(**data)


def _settings_from_env(environ: Mapping[str, str]) -> Dict[str, str]:
    """Collect WINDOW_BRIDGE_<FIELD> variables for known fields."""
    overrides = {}
    for name in BridgeSettings.model_fields:
        key = f"{BridgeDefaults.ENV_PREFIX}{name.upper()}"
        if key in environ:
            overrides[name] = environ[key]
    return overrides
