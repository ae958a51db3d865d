from __future__ import annotations

from pathlib import Path

from .models import DirectoriesConfig, PipelineConfig, PipelineRoots, StageSpec

ZIP_FILTER = ".zip"
BATCH_INBOX = "inbox"
BATCH_OUTBOX = "outbox"
BATCH_PROCESSED = "processed"
BATCH_FAILED = "failed"


def pipeline_roots(directories: DirectoriesConfig, pipeline: PipelineConfig) -> PipelineRoots:
    name = pipeline.name
    collect_base = directories.collect_inboxes
    if pipeline.vaas and directories.vaas_collect_inboxes is not None:
        collect_base = directories.vaas_collect_inboxes
    return PipelineRoots(
        pipeline=name,
        collect_inbox=collect_base / name,
        working_space=directories.working_space_base_dir / name,
        data_vault_batch_root=directories.data_vault_batch_root / name,
        data_vault_root=directories.data_vault_root / name,
    )


def transfer_stages(roots: PipelineRoots) -> list[StageSpec]:
    extract = roots.working_space / "extract-metadata"
    send = roots.working_space / "send-to-vault"
    return [
        StageSpec("transfer inbox", roots.collect_inbox, ZIP_FILTER),
        StageSpec("extract metadata inbox", extract / "inbox"),
        StageSpec("extract metadata failed", extract / "outbox" / "failed", ZIP_FILTER),
        StageSpec("extract metadata rejected", extract / "outbox" / "rejected", ZIP_FILTER),
        StageSpec("send to vault inbox", send / "inbox", ZIP_FILTER),
        StageSpec("send to vault processed", send / "outbox" / "processed", ZIP_FILTER),
        StageSpec("send to vault failed", send / "outbox" / "failed", ZIP_FILTER),
        StageSpec("send to vault work", send / "work"),
    ]


def vault_stages(roots: PipelineRoots) -> list[StageSpec]:
    return [
        StageSpec("staged layers", roots.data_vault_root / "staging"),
        StageSpec("archived layers", roots.data_vault_root / "archive"),
        StageSpec("data vault inbox batches", batch_inbox_root(roots)),
    ]


def batch_inbox_root(roots: PipelineRoots) -> Path:
    return roots.data_vault_batch_root / BATCH_INBOX


def batch_outbox_dirs(roots: PipelineRoots, batch: str) -> tuple[Path, Path]:
    outbox = roots.data_vault_batch_root / BATCH_OUTBOX / batch
    return outbox / BATCH_PROCESSED, outbox / BATCH_FAILED
