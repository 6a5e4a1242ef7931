"""
Runtime configuration.

All settings come from ``CR_*`` environment variables; see
:meth:`Settings.from_env` for the full list.
"""

import logging
import os
from pathlib import Path
from typing import Literal, Mapping

from pydantic import BaseModel, Field, ValidationError

from config_registry.core.exceptions import ConfigRegistryError

logger = logging.getLogger(__name__)


class Settings(BaseModel):
    """Service configuration."""

    data_dir: Path = Field(default=Path("var/registry"), description="Root of the file store")
    store: Literal["file", "memory"] = "file"
    store_timeout: float | None = Field(default=None, gt=0, description="Seconds per store call")
    policy_file: Path | None = Field(default=None, description="YAML permission policy; allow-all if unset")
    jwt_secret: str | None = None
    api_keys: dict[str, str] = Field(default_factory=dict, description="API key hash -> username")
    allow_basic: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """
        Build settings from environment variables.

        Reads CR_DATA_DIR, CR_STORE, CR_STORE_TIMEOUT, CR_POLICY_FILE,
        CR_JWT_SECRET, CR_API_KEYS (comma-separated ``hash:username``),
        CR_ALLOW_BASIC and CR_LOG_LEVEL.

        Raises:
            ConfigRegistryError: If a variable holds an invalid value
        """
        env = os.environ if environ is None else environ
        values: dict[str, object] = {}

        if env.get("CR_DATA_DIR"):
            values["data_dir"] = env["CR_DATA_DIR"]
        if env.get("CR_STORE"):
            values["store"] = env["CR_STORE"].lower()
        if env.get("CR_STORE_TIMEOUT"):
            values["store_timeout"] = env["CR_STORE_TIMEOUT"]
        if env.get("CR_POLICY_FILE"):
            values["policy_file"] = env["CR_POLICY_FILE"]
        if env.get("CR_JWT_SECRET"):
            values["jwt_secret"] = env["CR_JWT_SECRET"]
        if env.get("CR_API_KEYS"):
            values["api_keys"] = _parse_api_keys(env["CR_API_KEYS"])
        values["allow_basic"] = env.get("CR_ALLOW_BASIC", "false").lower() == "true"
        values["log_level"] = env.get("CR_LOG_LEVEL", "INFO").upper()

        try:
            return cls(**values)
        except ValidationError as e:
            raise ConfigRegistryError(
                "Invalid configuration in environment",
                details={"errors": [f"{'.'.join(map(str, err['loc']))}: {err['msg']}" for err in e.errors()]},
            ) from e


def _parse_api_keys(raw: str) -> dict[str, str]:
    keys: dict[str, str] = {}
    for item in raw.split(","):
        item = item.strip()
        if not item:
            continue
        key_hash, sep, username = item.partition(":")
        if not sep or not key_hash or not username:
            raise ConfigRegistryError(
                "CR_API_KEYS entries must look like 'hash:username'", details={"entry": item[:8] + "..."}
            )
        keys[key_hash] = username

    if keys:
        logger.info(f"Loaded {len(keys)} API key(s) from environment")
    return keys
