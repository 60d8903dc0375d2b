"""Application configuration: settings schema and layered loader"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field


CONFIG_FILE = "config.yaml"
ENV_PREFIX = "CMSFRAG_"


class Settings(BaseModel):
    app_name:      str  = "cmsfrag"
    link_template: str  = Field(default="/{type}/{id}", description="URL template for document links: {type} {id} {uid} {slug}")
    output_dir:    str  = Field(default="dist", description="Directory for rendered HTML files")
    log_level:     str  = Field(default="WARNING", pattern="^(DEBUG|INFO|WARNING|ERROR)$", description="Root log level")
    wrap_sections: bool = Field(default=True, description='Wrap each rendered field in <section data-field="...">')


def _file_layer(path: Path) -> dict[str, Any]:
    if not path.is_file():
        return {}
    try:
        loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid {path.name}: {e}") from e
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ValueError(f"Invalid {path.name}: expected a mapping, got {type(loaded).__name__}")
    return loaded


def _env_layer() -> dict[str, Any]:
    env = {name: os.environ.get(ENV_PREFIX + name.upper()) for name in Settings.model_fields}
    return {name: val for name, val in env.items() if val}


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Merge config.yaml, CMSFRAG_<FIELD> env vars, and non-None CLI overrides (later layers win)."""
    cli = {k: v for k, v in (overrides or {}).items() if v is not None}
    return Settings(**{**_file_layer(Path(CONFIG_FILE)), **_env_layer(), **cli})
