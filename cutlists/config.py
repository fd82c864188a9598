from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Iterator, Mapping

import yaml
from pydantic import BaseModel, Field

DEFAULT_CONFIG_PATH = Path("configs/default.yaml")
ENV_PREFIX = "CUTLISTS_"


class ServerSettings(BaseModel):
    base_url: str = "http://www.cutlist.at/"
    timeout_seconds: int = 30
    user_agent: str = "cutlists/0.1"


class ProgressSettings(BaseModel):
    interval_ms: int = 500


class LoggingSettings(BaseModel):
    level: str = "INFO"


class Settings(BaseModel):
    server: ServerSettings = Field(default_factory=ServerSettings)
    progress: ProgressSettings = Field(default_factory=ProgressSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


def load_settings(config_path: str | Path | None = None) -> Settings:
    """Load typed settings from YAML, then apply ``CUTLISTS_<SECTION>__<KEY>`` overrides.

    Override values stay strings here; pydantic coerces them to the field type.
    """

    resolved_path = Path(config_path or os.getenv(f"{ENV_PREFIX}CONFIG") or DEFAULT_CONFIG_PATH)
    data = _read_config_file(resolved_path)

    for section, key, raw_value in _env_overrides(os.environ):
        section_data = data.get(section)
        if isinstance(section_data, dict) and key in section_data:
            section_data[key] = raw_value

    return Settings.model_validate(data)


def _read_config_file(path: Path) -> dict[str, Any]:
    if path == DEFAULT_CONFIG_PATH and not path.exists():
        raw_config: dict[str, Any] = {}
    else:
        raw_config = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    return Settings.model_validate(raw_config).model_dump(mode="python")


def _env_overrides(environ: Mapping[str, str]) -> Iterator[tuple[str, str, str]]:
    for name, raw_value in environ.items():
        if not name.startswith(ENV_PREFIX):
            continue
        section, sep, key = name[len(ENV_PREFIX) :].lower().partition("__")
        if sep and key:
            yield section, key, raw_value
