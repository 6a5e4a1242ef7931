"""Tests for environment configuration."""

from pathlib import Path

import pytest

from config_registry.auth.tokens import hash_api_key
from config_registry.core.exceptions import ConfigRegistryError
from config_registry.settings import Settings


class TestSettingsFromEnv:
    """Tests for Settings.from_env."""

    def test_defaults(self) -> None:
        settings = Settings.from_env({})

        assert settings.store == "file"
        assert settings.data_dir == Path("var/registry")
        assert settings.store_timeout is None
        assert settings.policy_file is None
        assert settings.api_keys == {}
        assert settings.allow_basic is False
        assert settings.log_level == "INFO"

    def test_reads_variables(self, temp_dir: Path) -> None:
        key_hash = hash_api_key("k-bob")
        settings = Settings.from_env(
            {
                "CR_DATA_DIR": str(temp_dir),
                "CR_STORE": "MEMORY",
                "CR_STORE_TIMEOUT": "2.5",
                "CR_POLICY_FILE": str(temp_dir / "policy.yaml"),
                "CR_JWT_SECRET": "s3cret",
                "CR_API_KEYS": f"{key_hash}:bob, ",
                "CR_ALLOW_BASIC": "True",
                "CR_LOG_LEVEL": "debug",
            }
        )

        assert settings.data_dir == temp_dir
        assert settings.store == "memory"
        assert settings.store_timeout == 2.5
        assert settings.policy_file == temp_dir / "policy.yaml"
        assert settings.jwt_secret == "s3cret"
        assert settings.api_keys == {key_hash: "bob"}
        assert settings.allow_basic is True
        assert settings.log_level == "DEBUG"

    @pytest.mark.parametrize(
        "environ",
        [
            {"CR_STORE": "redis"},
            {"CR_STORE_TIMEOUT": "0"},
            {"CR_STORE_TIMEOUT": "soon"},
            {"CR_API_KEYS": "missing-username"},
            {"CR_API_KEYS": ":bob"},
        ],
    )
    def test_invalid_values(self, environ: dict) -> None:
        with pytest.raises(ConfigRegistryError):
            Settings.from_env(environ)
