from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Chunk budget (characters)
    MAX_CHUNK_SIZE: int = Field(default=500, gt=0)
    MAX_OVERLAP_SIZE: int = Field(default=50, ge=0)

    # Strategy selection
    DEFAULT_FORMAT: str = "markdown"  # markdown|html|text
    DEFAULT_STRATEGY: Optional[str] = None  # None = most structural for format
    NON_MERGEABLE_TYPES: List[str] = ["code_block"]  # Markdown only

    # Workspace paths
    STRATACHUNK_WORKDIR: str = "var"  # Tool-managed artifacts (events)

    # Observability
    LOG_FORMAT: str = "auto"  # json|plain|auto
    LOG_LEVEL: str = "info"
    EMIT_EVENTS: bool = True  # Write var/logs/<run_id>/events.ndjson

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @classmethod
    def load_config(cls, config_file: Optional[str] = None) -> "Settings":
        """Load settings with config file -> env -> CLI precedence."""
        config_data: Dict[str, Any] = {}

        # Find config file
        config_path: Optional[Path]
        if config_file:
            config_path = Path(config_file)
        else:
            # Auto-discover .stratachunk.{yaml,yml,toml}
            for ext in ["yaml", "yml", "toml"]:
                config_path = Path(f".stratachunk.{ext}")
                if config_path.exists():
                    break
            else:
                config_path = None

        # Load config file if found
        if config_path and config_path.exists():
            if config_path.suffix in [".yaml", ".yml"]:
                import yaml  # type: ignore[import-untyped]

                with open(config_path) as f:
                    config_data = yaml.safe_load(f) or {}
            elif config_path.suffix == ".toml":
                import tomllib

                with open(config_path, "rb") as f:
                    config_data = tomllib.load(f)

        # Environment variables override file values; CLI flags are applied
        # by the caller on top of the returned settings.
        settings = cls()
        explicit = settings.model_fields_set
        merged = {
            k.upper(): v for k, v in config_data.items() if k.upper() not in explicit
        }
        merged.update({k: getattr(settings, k) for k in explicit})
        return cls.model_validate(merged) if merged else settings


# Default settings - will be replaced by load_config() during CLI startup
SETTINGS = Settings()
