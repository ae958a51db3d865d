from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime
from pathlib import Path
from typing import Any

from tqdm import tqdm

from .layout import batch_inbox_root, batch_outbox_dirs, transfer_stages, vault_stages
from .models import BatchCount, PipelineRoots, StageCount, StageSpec
from .utils import display_size, format_report_timestamp

LOGGER = logging.getLogger(__name__)

ZERO_SIZE = "0 bytes"
LABEL_WIDTH = 30


def count_children(path: Path, suffix: str | None = None, dirs_only: bool = False) -> int:
    count = 0
    for child in path.iterdir():
        if suffix is not None and not child.name.endswith(suffix):
            continue
        if dirs_only and not child.is_dir():
            continue
        count += 1
    return count


def directory_size(path: Path) -> int:
    total = 0
    for item in path.rglob("*"):
        if item.is_file():
            total += item.stat().st_size
    return total


def _measure(path: Path, suffix: str | None = None, dirs_only: bool = False) -> tuple[int, str]:
    """Count the direct children of ``path`` and render its recursive size.

    A missing directory, or one that cannot be read, measures as zero. The
    count and the size fail independently of each other.
    """
    try:
        if not path.exists():
            return 0, ZERO_SIZE
        count = count_children(path, suffix=suffix, dirs_only=dirs_only)
    except OSError as exc:
        LOGGER.debug("Cannot list %s: %s", path, exc)
        return 0, ZERO_SIZE
    try:
        size = display_size(directory_size(path))
    except OSError as exc:
        LOGGER.debug("Cannot size %s: %s", path, exc)
        size = ZERO_SIZE
    return count, size


def stage_count(stage: StageSpec) -> StageCount:
    count, size = _measure(stage.path, suffix=stage.suffix)
    return StageCount(label=stage.label, path=stage.path, count=count, size=size)


def list_batches(roots: PipelineRoots) -> list[Path]:
    inbox = batch_inbox_root(roots)
    try:
        if not inbox.exists():
            return []
        batches = [p for p in inbox.iterdir() if p.is_dir()]
    except OSError as exc:
        LOGGER.debug("Cannot list batch inbox %s: %s", inbox, exc)
        return []
    return sorted(batches, key=lambda p: p.name)


def batch_count(roots: PipelineRoots, batch_dir: Path) -> BatchCount:
    processed_dir, failed_dir = batch_outbox_dirs(roots, batch_dir.name)
    inbox_count, inbox_size = _measure(batch_dir, dirs_only=True)
    processed_count, processed_size = _measure(processed_dir, dirs_only=True)
    failed_count, failed_size = _measure(failed_dir, dirs_only=True)
    return BatchCount(
        name=batch_dir.name,
        inbox_count=inbox_count,
        inbox_size=inbox_size,
        processed_count=processed_count,
        processed_size=processed_size,
        failed_count=failed_count,
        failed_size=failed_size,
    )


def include_batch(batch: BatchCount, all_batches: bool) -> bool:
    # Fully drained batches without failures are hidden by default.
    return all_batches or batch.inbox_count > 0 or batch.failed_count > 0


def collect_batches(roots: PipelineRoots, max_workers: int = 4) -> list[BatchCount]:
    batch_dirs = list_batches(roots)
    if not batch_dirs:
        return []
    results: list[BatchCount] = []
    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as pool:
        futures = [pool.submit(batch_count, roots, batch_dir) for batch_dir in batch_dirs]
        for fut in tqdm(as_completed(futures), total=len(futures), desc="batches", leave=False, disable=None):
            results.append(fut.result())
    results.sort(key=lambda b: b.name)
    return results


def build_status_report(
    pipeline_name: str,
    roots: PipelineRoots,
    all_batches: bool = False,
    *,
    max_workers: int = 4,
    now: datetime | None = None,
) -> dict[str, Any]:
    batches = collect_batches(roots, max_workers=max_workers)
    shown = [b for b in batches if include_batch(b, all_batches)]
    LOGGER.info("Pipeline %s: %s batches found, %s shown", pipeline_name, len(batches), len(shown))
    return {
        "pipeline": pipeline_name,
        "generated_at": format_report_timestamp(now),
        "transfer": [stage_count(stage) for stage in transfer_stages(roots)],
        "vault": [stage_count(stage) for stage in vault_stages(roots)],
        "batches": shown,
    }


def format_stage_line(stage: StageCount) -> str:
    return f"{stage.label:<{LABEL_WIDTH}}: {stage.count} items ({stage.size})"


def format_batch_header() -> str:
    return (
        f"{'BATCH':<20} {'INBOX':>6} {'(SIZE)':<12} {'PROCESSED':>10} "
        f"{'(SIZE)':<12} {'FAILED':>7} {'(SIZE)':<11}"
    )


def format_batch_line(batch: BatchCount) -> str:
    return (
        f"{batch.name:<20} {batch.inbox_count:>6} ({batch.inbox_size + ')':<11} "
        f"{batch.processed_count:>10} ({batch.processed_size + ')':<11} "
        f"{batch.failed_count:>7} ({batch.failed_size})"
    )


def format_status_report(report: dict[str, Any]) -> str:
    lines = []
    lines.append(f"status {report['pipeline']} at {report['generated_at']}")
    lines.append("")
    lines.append("* dd-transfer-to-vault:")
    lines.extend(format_stage_line(stage) for stage in report["transfer"])
    lines.append("")
    lines.append("* dd-data-vault:")
    lines.extend(format_stage_line(stage) for stage in report["vault"])
    lines.append(format_batch_header())
    lines.extend(format_batch_line(batch) for batch in report["batches"])
    lines.append("---")
    lines.append("")
    return "\n".join(lines) + "\n"
