from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import yaml

from . import __version__
from .models import DirectoriesConfig, HttpClientConfig, PipelineConfig

CONFIG_ENV_VAR = "TRANSFER_CLI_CONFIG"

DEFAULT_CONFIG: dict[str, Any] = {
    "directories": {
        "collect_inboxes": None,
        # Only used by pipelines flagged with vaas: true.
        "vaas_collect_inboxes": None,
        "working_space_base_dir": None,
        "data_vault_batch_root": None,
        "data_vault_root": None,
    },
    "pipelines": {},
    "http_client": {
        "timeout_sec": 30,
        "user_agent": f"dd-transfer-to-vault-cli/{__version__}",
    },
    "status": {
        "max_workers": 4,
    },
    "runtime": {
        "log_level": "WARNING",
    },
}

REQUIRED_DIRECTORIES = (
    "collect_inboxes",
    "working_space_base_dir",
    "data_vault_batch_root",
    "data_vault_root",
)


class PipelineSelectionError(ValueError):
    """The pipeline selector is missing or does not name a configured pipeline."""


class MissingPipelineError(PipelineSelectionError):
    def __init__(self) -> None:
        super().__init__("No pipeline specified. Use -p or --pipeline option.")


class PipelineNotFoundError(PipelineSelectionError):
    def __init__(self, name: str) -> None:
        super().__init__(f"No configuration found for pipeline: {name}")
        self.name = name


def _deep_update(base: dict[str, Any], updates: dict[str, Any]) -> dict[str, Any]:
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _deep_update(base[key], value)
        else:
            base[key] = value
    return base


def resolve_config_path(cli_value: str | Path | None) -> Path | None:
    if cli_value:
        return Path(cli_value)
    env_value = os.environ.get(CONFIG_ENV_VAR, "").strip()
    return Path(env_value) if env_value else None


def load_config(config_path: str | Path | None) -> dict[str, Any]:
    cfg = json.loads(json.dumps(DEFAULT_CONFIG))
    if not config_path:
        return cfg
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with path.open("r", encoding="utf-8") as handle:
        payload = yaml.safe_load(handle) or {}
    if not isinstance(payload, dict):
        raise ValueError("Config root must be a mapping")
    _deep_update(cfg, payload)
    return cfg


def apply_cli_overrides(cfg: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    def _drop_none(value: Any) -> Any:
        if isinstance(value, dict):
            return {k: _drop_none(v) for k, v in value.items() if v is not None}
        if isinstance(value, list):
            return [_drop_none(v) for v in value if v is not None]
        return value

    cleaned = _drop_none(overrides)
    _deep_update(cfg, cleaned)
    return cfg


def directories_from_config(cfg: dict[str, Any]) -> DirectoriesConfig:
    section = cfg.get("directories") or {}
    for key in REQUIRED_DIRECTORIES:
        if not section.get(key):
            raise ValueError(f"Config is missing directories.{key}")
    vaas = section.get("vaas_collect_inboxes")
    return DirectoriesConfig(
        collect_inboxes=Path(str(section["collect_inboxes"])),
        working_space_base_dir=Path(str(section["working_space_base_dir"])),
        data_vault_batch_root=Path(str(section["data_vault_batch_root"])),
        data_vault_root=Path(str(section["data_vault_root"])),
        vaas_collect_inboxes=Path(str(vaas)) if vaas else None,
    )


def pipelines_from_config(cfg: dict[str, Any]) -> dict[str, PipelineConfig]:
    defaults = cfg.get("http_client") or {}
    pipelines: dict[str, PipelineConfig] = {}
    for name, settings in (cfg.get("pipelines") or {}).items():
        settings = settings or {}
        if not isinstance(settings, dict):
            raise ValueError(f"Config for pipeline {name} must be a mapping")
        url = settings.get("url")
        if not url:
            raise ValueError(f"Config is missing pipelines.{name}.url")
        http = {**defaults, **(settings.get("http_client") or {})}
        pipelines[str(name)] = PipelineConfig(
            name=str(name),
            url=str(url),
            vaas=bool(settings.get("vaas", False)),
            http_client=HttpClientConfig(
                timeout_sec=int(http.get("timeout_sec", 30)),
                user_agent=str(http.get("user_agent") or f"dd-transfer-to-vault-cli/{__version__}"),
            ),
        )
    return pipelines


def resolve_pipeline(pipelines: dict[str, PipelineConfig], name: str | None) -> PipelineConfig:
    if not name:
        raise MissingPipelineError()
    pipeline = pipelines.get(name)
    if pipeline is None:
        raise PipelineNotFoundError(name)
    return pipeline
