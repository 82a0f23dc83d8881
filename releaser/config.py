"""
config.py

Responsibility: Load the release configuration into an explicit, typed record.

The record is built once by the CLI and passed to every operation; nothing
else reads configuration files.

Accepted formats:
- `foundryconfig.json` (or any `.json` file)
- `.yaml` / `.yml` files, parsed with `yaml.safe_load`
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

from releaser.errors import ConfigError, MissingConfigurationError

DEFAULT_CONFIG_NAME = "foundryconfig.json"
DEFAULT_STATICS = ("images", "module.json", "packs", "README.md")


@dataclass(frozen=True)
class ReleaseConfig:
    """Everything a release command needs to know about the project."""

    project_root: Path
    repository: str | None = None
    raw_url: str | None = None
    data_path: Path | None = None
    dist_dir: str = "dist"
    manifest_name: str = "module.json"
    artifact_name: str = "module.zip"
    statics: tuple[str, ...] = DEFAULT_STATICS
    commit_message: str = "version bump v{{ version }}"
    tag_name: str = "v{{ version }}"
    tag_message: str = "Updated to {{ version }}"
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def defaults(cls, project_root: str | Path = ".") -> "ReleaseConfig":
        return cls(project_root=Path(project_root).resolve())

    @property
    def name(self) -> str:
        return self.project_root.name

    @property
    def dist_path(self) -> Path:
        return self.project_root / self.dist_dir

    def require_repository(self) -> str:
        if not self.repository or not self.raw_url:
            raise MissingConfigurationError(
                f"Repository URLs not configured in {DEFAULT_CONFIG_NAME} (need `repository` and `rawURL`)"
            )
        return self.repository

    def require_data_path(self) -> Path:
        if self.data_path is None:
            raise MissingConfigurationError(f"`dataPath` not configured in {DEFAULT_CONFIG_NAME}")
        return self.data_path


def _read_mapping(path: Path) -> dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
        if path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Could not read config file {path}: {e}") from e
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"Could not parse config file {path}: {e}") from e
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain an object/mapping at the top level.")
    return data


def _optional_str(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    return str(value).strip() or None


def _str(data: dict[str, Any], key: str, default: str) -> str:
    return _optional_str(data, key) or default


def parse_config(data: dict[str, Any], *, project_root: str | Path) -> ReleaseConfig:
    root = Path(project_root).resolve()

    statics_raw = data.get("statics", DEFAULT_STATICS)
    if isinstance(statics_raw, str) or not isinstance(statics_raw, (list, tuple)):
        raise ConfigError("`statics` must be a list of paths when provided.")

    data_path = _optional_str(data, "dataPath")
    known = {
        "repository",
        "rawURL",
        "dataPath",
        "distDir",
        "manifestName",
        "artifactName",
        "statics",
        "commitMessage",
        "tagName",
        "tagMessage",
    }

    return ReleaseConfig(
        project_root=root,
        repository=_optional_str(data, "repository"),
        raw_url=_optional_str(data, "rawURL"),
        data_path=Path(data_path).expanduser() if data_path else None,
        dist_dir=_str(data, "distDir", "dist"),
        manifest_name=_str(data, "manifestName", "module.json"),
        artifact_name=_str(data, "artifactName", "module.zip"),
        statics=tuple(str(s) for s in statics_raw),
        commit_message=_str(data, "commitMessage", ReleaseConfig.commit_message),
        tag_name=_str(data, "tagName", ReleaseConfig.tag_name),
        tag_message=_str(data, "tagMessage", ReleaseConfig.tag_message),
        extra={k: v for k, v in sorted(data.items()) if k not in known},
    )


def load_config(
    config_path: str | Path | None = None,
    *,
    project_root: str | Path | None = None,
    required: bool = True,
) -> ReleaseConfig:
    """
    Load the release configuration.

    `config_path` defaults to `foundryconfig.json` in `project_root`, and a
    relative path is resolved against `project_root`. When the file does not
    exist, a MissingConfigurationError is raised if `required`, otherwise the
    defaults are returned.
    """
    root = Path(project_root or ".").resolve()
    path = Path(config_path) if config_path is not None else Path(DEFAULT_CONFIG_NAME)
    if not path.is_absolute():
        path = root / path

    if not path.exists():
        if required:
            raise MissingConfigurationError(f"{path.name} not found (looked for {path})")
        return ReleaseConfig.defaults(root)

    return parse_config(_read_mapping(path), project_root=root)


def with_overrides(config: ReleaseConfig, **changes: Any) -> ReleaseConfig:
    return replace(config, **{k: v for k, v in changes.items() if v is not None})
