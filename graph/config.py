"""
Settings for the contact graph tools: defaults, optional config.yaml, environment overrides.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

DEFAULT_CONFIG_PATH = Path("config.yaml")

# env var -> settings field
ENV_OVERRIDES = {
    "CTG_LOG_LEVEL": "log_level",
    "CTG_API_HOST": "api_host",
    "PORT": "api_port",
    "NEO4J_URI": "neo4j_uri",
    "NEO4J_USER": "neo4j_user",
    "NEO4J_PASSWORD": "neo4j_password",
    "CTG_EXPORT_BATCH_SIZE": "export_batch_size",
}


@dataclass
class Settings:
    log_level: str = "INFO"
    api_host: str = "127.0.0.1"
    api_port: int = 5001
    neo4j_uri: str = "bolt://localhost:7687"
    neo4j_user: str = "neo4j"
    neo4j_password: str = "password"
    export_batch_size: int = 500


def _coerce(name: str, value: Any) -> Any:
    field_types = {f.name: f.type for f in fields(Settings)}
    if field_types[name] in (int, "int"):
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ValueError(f"setting {name!r} must be an integer, got {value!r}") from None
    return str(value)


def _apply(settings: Settings, values: Dict[str, Any]) -> None:
    known = {f.name for f in fields(Settings)}
    for key, value in values.items():
        if key not in known:
            raise ValueError(f"unknown setting: {key}")
        setattr(settings, key, _coerce(key, value))


def load_config(path: Path) -> dict:
    with open(path) as f:
        return yaml.safe_load(f) or {}


def load_settings(path: Optional[Path] = None) -> Settings:
    """
    Build Settings from defaults, then the YAML file, then environment variables.
    An explicit path must exist; the default path (CTG_CONFIG or ./config.yaml) is optional.
    """
    settings = Settings()
    if path is not None:
        data = load_config(Path(path))
    else:
        default = Path(os.environ.get("CTG_CONFIG", DEFAULT_CONFIG_PATH))
        data = load_config(default) if default.exists() else {}
    if not isinstance(data, dict):
        raise ValueError("config file must contain a mapping")
    _apply(settings, data)
    _apply(settings, {
        field: os.environ[var] for var, field in ENV_OVERRIDES.items() if var in os.environ
    })
    return settings
