from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(slots=True)
class HttpClientConfig:
    timeout_sec: int = 30
    user_agent: str = "dd-transfer-to-vault-cli"


@dataclass(slots=True)
class PipelineConfig:
    name: str
    url: str
    vaas: bool = False
    http_client: HttpClientConfig = field(default_factory=HttpClientConfig)


@dataclass(slots=True)
class DirectoriesConfig:
    collect_inboxes: Path
    working_space_base_dir: Path
    data_vault_batch_root: Path
    data_vault_root: Path
    vaas_collect_inboxes: Path | None = None


@dataclass(slots=True)
class PipelineRoots:
    pipeline: str
    collect_inbox: Path
    working_space: Path
    data_vault_batch_root: Path
    data_vault_root: Path


@dataclass(slots=True)
class StageSpec:
    label: str
    path: Path
    suffix: str | None = None


@dataclass(slots=True)
class StageCount:
    label: str
    path: Path
    count: int = 0
    size: str = "0 bytes"


@dataclass(slots=True)
class BatchCount:
    name: str
    inbox_count: int = 0
    inbox_size: str = "0 bytes"
    processed_count: int = 0
    processed_size: str = "0 bytes"
    failed_count: int = 0
    failed_size: str = "0 bytes"


@dataclass(slots=True)
class StatusMessage:
    message: str
