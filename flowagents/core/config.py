"""Configuration management for flowagents."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import yaml


class FloatConfig(BaseSettings):
    """
    Float Controller Configuration.

    Controls run tracing collected by the dispatcher.
    """

    enabled: bool = Field(
        default=False, description="Enable float collection (True=tests/debug, False=production)"
    )
    max_events: int = Field(default=10000, ge=0, description="Max floats to keep (0=unlimited)")

    model_config = SettingsConfigDict(
        env_prefix="FLOWAGENTS_FLOAT_",
        extra="ignore",
    )


class AgentsConfig(BaseSettings):
    """
    Configuration for the agent runtime and the bundled demo.

    Can be loaded from:
    - Environment variables (prefix: FLOWAGENTS_)
    - YAML file
    - Direct initialization

    Example:
        >>> config = AgentsConfig(max_steps=50)
        >>> config = AgentsConfig.from_yaml("config.yaml")
        >>> config = AgentsConfig()
    """

    model_config = SettingsConfigDict(
        env_prefix="FLOWAGENTS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        validate_default=True,
    )

    ollama_base_url: str = Field(
        default="http://localhost:11434",
        description="Ollama server URL",
    )
    ollama_request_timeout: str = Field(
        default="120s",
        description="Timeout for one chat round trip (e.g. 120s, 2m, 1500ms)",
    )
    ollama_max_retries: int = Field(
        default=2,
        ge=0,
        description="Retries on transport errors before a chat call fails",
    )
    sentiment_model: str = Field(
        default="llama3.2:latest",
        description="Model name used by the sentiment demo",
    )

    max_steps: int | None = Field(
        default=1000,
        ge=1,
        description="Maximum events dispatched per run (None disables the guard)",
    )
    run_timeout: float | None = Field(
        default=None,
        gt=0,
        description="Per-run deadline in seconds (None disables)",
    )
    max_concurrent_runs: int = Field(
        default=1,
        ge=1,
        description="How many runs may execute concurrently",
    )
    resource_scope: Literal["run", "process"] = Field(
        default="run",
        description="Cache resolved resources per run or share them across runs",
    )
    terminal_event_type: str = Field(
        default="output",
        description="Event type whose dispatch ends a run",
    )

    log_level: str = Field(default="INFO", description="Logging level for the demo CLI")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize log level names."""
        return v.upper()

    @field_validator("ollama_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @classmethod
    def find_config_yaml(cls) -> Path | None:
        """
        Search for config.yaml in standard locations.

        Search order:
        1. Current working directory
        2. Project root (parent of flowagents package)
        3. User home directory

        Returns:
            Path to config.yaml if found, None otherwise
        """
        search_paths = [
            Path.cwd() / "config.yaml",
            Path(__file__).parent.parent.parent / "config.yaml",
            Path.home() / ".flowagents" / "config.yaml",
        ]

        for path in search_paths:
            if path.exists():
                return path

        return None

    @classmethod
    def from_yaml(cls, path: Path | str | None = None) -> AgentsConfig:
        """
        Load configuration from YAML file.

        Environment variables take precedence over values from the file.

        Args:
            path: Path to YAML configuration file. If None, searches standard locations.

        Returns:
            AgentsConfig instance

        Raises:
            FileNotFoundError: If the file cannot be found
        """
        if path is None:
            path = cls.find_config_yaml()
            if path is None:
                raise FileNotFoundError(
                    "Config file not found. Searched:\n"
                    "  1. ./config.yaml\n"
                    "  2. <project_root>/config.yaml\n"
                    "  3. ~/.flowagents/config.yaml"
                )
        else:
            path = Path(path)
            if not path.exists():
                raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f) or {}

        result_data = {}
        for key, value in yaml_data.items():
            if f"FLOWAGENTS_{key.upper()}" in os.environ:
                continue
            result_data[key] = value

        return cls(**result_data)

    def to_yaml(self, path: Path | str) -> None:
        """Save configuration to YAML file."""
        path = Path(path)
        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(
                self.model_dump(mode="json"),
                f,
                default_flow_style=False,
                sort_keys=False,
            )

    def __repr__(self) -> str:
        return (
            f"AgentsConfig(ollama_base_url={self.ollama_base_url!r}, "
            f"max_steps={self.max_steps}, resource_scope={self.resource_scope!r})"
        )
