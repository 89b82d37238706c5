from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


InsufficientSamplesPolicy = Literal["ieee", "raise"]

DEFAULT_CONFIG_FILE = "rollcov.yaml"


class CovarianceConfig(BaseModel):
    """How covariance extraction behaves when fewer than two samples are summarized.
    """

    insufficient_samples: InsufficientSamplesPolicy = Field(
        "ieee",
        description="'ieee' returns NaN/inf like float division, 'raise' raises InsufficientSamplesError",
    )


class RuntimeConfig(BaseModel):
    covariance: CovarianceConfig = Field(default_factory=CovarianceConfig)


class EnvSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    LOG_LEVEL: str = "INFO"
    # Overrides covariance.insufficient_samples from the YAML file
    ROLLCOV_INSUFFICIENT_SAMPLES: Optional[InsufficientSamplesPolicy] = None


class AppConfig(BaseModel):
    env: EnvSettings
    runtime: RuntimeConfig

    @field_validator("env", mode="before")
    @classmethod
    def _coerce_env(cls, v):  # type: ignore[no-untyped-def]
        if isinstance(v, dict):
            return EnvSettings(**v)
        return v

    @property
    def insufficient_samples_policy(self) -> InsufficientSamplesPolicy:
        override = self.env.ROLLCOV_INSUFFICIENT_SAMPLES
        if override is not None:
            return override
        return self.runtime.covariance.insufficient_samples

    @staticmethod
    def load(config_path: Optional[Path] = None) -> "AppConfig":
        env = EnvSettings()  # loads from environment and .env

        runtime = RuntimeConfig()
        if config_path is None:
            default_path = Path(DEFAULT_CONFIG_FILE)
            config_path = default_path if default_path.exists() else None

        if config_path and Path(config_path).exists():
            name = Path(config_path).name
            try:
                with open(config_path, "r", encoding="utf-8") as fh:
                    raw = yaml.safe_load(fh) or {}
            except yaml.YAMLError as ye:
                raise ValueError(f"Invalid {name}: {ye}") from ye
            if not isinstance(raw, dict):
                raise ValueError(f"Invalid {name}: expected a mapping, got {type(raw).__name__}")
            try:
                runtime = RuntimeConfig(**raw)
            except ValidationError as ve:
                raise ValueError(f"Invalid {name}: {ve}") from ve

        return AppConfig(env=env, runtime=runtime)


def load_config() -> AppConfig:
    """Load merged configuration from environment and optional YAML."""

    return AppConfig.load()
