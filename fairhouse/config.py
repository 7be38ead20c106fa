"""Settings for the casino host.

Values come from, lowest precedence first: field defaults, ``data/config.yaml``
(section by section), then environment variables and ``.env``. Nested keys use
``__`` in the environment, e.g. ``CASINO__INITIAL_FUNDS=1000``.
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.yaml"


class CasinoConfig(BaseModel):
    """Ledger and bet id seeding."""

    initial_funds: int = Field(default=0, ge=0, le=2**64 - 1)
    first_bet_id: int = Field(default=1, ge=0)
    amount_decimals: int = Field(default=18, ge=0, le=38)  # minor units per token
    token_symbol: str = "TOKEN"


def _read_yaml(path: Path) -> dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        loaded = yaml.safe_load(f)
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ValueError(f"{path} must contain a mapping, got {type(loaded).__name__}")
    return loaded


class Settings(BaseSettings):
    data_dir: Path = Path("data")
    environment: Literal["development", "staging", "production"] = "development"
    logfire_token: str = ""

    casino: CasinoConfig = Field(default_factory=CasinoConfig)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("data_dir", mode="after")
    @classmethod
    def absolute_data_dir(cls, v: Path) -> Path:
        return v.resolve()

    @property
    def config_path(self) -> Path:
        return self.data_dir / CONFIG_FILENAME

    def load_yaml_config(self) -> None:
        """Overlay sections from data/config.yaml onto the current values.

        Keys already set in a section are replaced; keys the file omits keep
        their current value. Unknown sections are ignored.
        """
        if not self.config_path.exists():
            logger.warning(
                f"No {CONFIG_FILENAME} in {self.data_dir}; using defaults. "
                "Run 'python -m fairhouse init' to create one."
            )
            return

        try:
            overrides = _read_yaml(self.config_path)
        except yaml.YAMLError as e:
            logger.error(f"Invalid YAML in {self.config_path}: {e}")
            raise

        for name, values in overrides.items():
            current = getattr(self, name, None)
            if not isinstance(current, BaseModel):
                logger.debug(f"Ignoring unknown config section: {name}")
                continue
            merged = {**current.model_dump(), **(values or {})}
            setattr(self, name, type(current).model_validate(merged))

        logger.info(f"Applied configuration overlay from {self.config_path}")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process-wide settings, built on first use."""
    settings = Settings()
    settings.load_yaml_config()
    return settings
