from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml


@dataclass(slots=True)
class PathsConfig:
    data_file: str = "bands.json"


@dataclass(slots=True)
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 3000
    access_log: bool = False


@dataclass(slots=True)
class ProjectConfig:
    project_name: str = "Nog een bandje"
    paths: PathsConfig = field(default_factory=PathsConfig)
    server: ServerConfig = field(default_factory=ServerConfig)


def _merge_dataclass(dc_cls: type, source: dict[str, Any] | None) -> Any:
    source = source or {}
    valid = {k: v for k, v in source.items() if k in dc_cls.__dataclass_fields__}
    return dc_cls(**valid)


def load_config(path: str | Path | None = None) -> ProjectConfig:
    """Read a YAML config; a missing file (or no path) yields the defaults."""
    if path is None:
        return ProjectConfig()
    cfg_path = Path(path)
    if not cfg_path.exists():
        return ProjectConfig()
    data = yaml.safe_load(cfg_path.read_text()) or {}

    return ProjectConfig(
        project_name=data.get("project_name", "Nog een bandje"),
        paths=_merge_dataclass(PathsConfig, data.get("paths")),
        server=_merge_dataclass(ServerConfig, data.get("server")),
    )
