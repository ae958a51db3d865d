from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

import yaml

from . import __version__
from .client import ApiError, TransferToVaultClient
from .config import (
    PipelineSelectionError,
    apply_cli_overrides,
    directories_from_config,
    load_config,
    pipelines_from_config,
    resolve_config_path,
    resolve_pipeline,
)
from .layout import pipeline_roots
from .models import PipelineConfig
from .status import build_status_report, format_status_report
from .utils import setup_logging

LOGGER = logging.getLogger(__name__)


def _add_global_options(parser: argparse.ArgumentParser, default: Any) -> None:
    parser.add_argument("--config", type=Path, default=default, help="YAML configuration file")
    parser.add_argument(
        "-p",
        "--pipeline",
        default=default,
        help="The pipeline (dd-transfer-to-vault) instance to execute the command on",
    )
    parser.add_argument("--log-level", default=default)


def _create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="transfer", description="CLI for dd-transfer-to-vault")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    _add_global_options(parser, None)
    sub = parser.add_subparsers(dest="cmd", required=True)

    # SUPPRESS keeps a value given before the subcommand from being reset by the subparser.
    flush = sub.add_parser("flush-work-to-vault", help="Flush the staged batch to the data vault")
    _add_global_options(flush, argparse.SUPPRESS)

    status = sub.add_parser("status", help="Print a status report for a transfer pipeline")
    _add_global_options(status, argparse.SUPPRESS)
    status.add_argument(
        "-a",
        "--all-batches",
        action="store_true",
        help="Show all batches, including completed ones",
    )

    return parser


def _command_flush(args: argparse.Namespace, cfg: dict[str, Any], pipelines: dict[str, PipelineConfig]) -> int:
    pipeline = resolve_pipeline(pipelines, args.pipeline)
    client = TransferToVaultClient.for_pipeline(pipeline)
    try:
        status = client.flush_work_to_vault()
    except ApiError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    print(f"Flush job submitted: {status.message}", file=sys.stderr)
    return 0


def _command_status(args: argparse.Namespace, cfg: dict[str, Any], pipelines: dict[str, PipelineConfig]) -> int:
    pipeline = resolve_pipeline(pipelines, args.pipeline)
    roots = pipeline_roots(directories_from_config(cfg), pipeline)
    report = build_status_report(
        pipeline.name,
        roots,
        args.all_batches,
        max_workers=int(cfg["status"]["max_workers"]),
    )
    print(format_status_report(report), end="")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _create_parser()
    args = parser.parse_args(argv)

    try:
        cfg = load_config(resolve_config_path(args.config))
        cfg = apply_cli_overrides(cfg, {"runtime": {"log_level": args.log_level}})
        pipelines = pipelines_from_config(cfg)
    except (FileNotFoundError, ValueError, yaml.YAMLError) as exc:
        parser.error(str(exc))
        return 2
    setup_logging(cfg.get("runtime", {}).get("log_level", "WARNING"))
    LOGGER.debug("Configured pipelines: %s", ", ".join(sorted(pipelines)) or "none")

    try:
        if args.cmd == "flush-work-to-vault":
            return _command_flush(args, cfg, pipelines)
        if args.cmd == "status":
            return _command_status(args, cfg, pipelines)
    except PipelineSelectionError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except ValueError as exc:
        parser.error(str(exc))
        return 2

    parser.error(f"Unhandled command: {args.cmd}")
    return 2


def _single_command_main(cmd: str) -> int:
    return main([cmd, *sys.argv[1:]])


def main_status() -> int:
    return _single_command_main("status")


def main_flush_work_to_vault() -> int:
    return _single_command_main("flush-work-to-vault")


if __name__ == "__main__":
    raise SystemExit(main())
