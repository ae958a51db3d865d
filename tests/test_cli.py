from pathlib import Path

import pytest

from transfer_vault_cli import cli
from transfer_vault_cli.client import ApiError
from transfer_vault_cli.config import CONFIG_ENV_VAR
from transfer_vault_cli.models import StatusMessage


def _config(tmp_path: Path) -> Path:
    path = tmp_path / "config.yml"
    path.write_text(
        f"""
directories:
  collect_inboxes: {tmp_path / 'collect-inboxes'}
  working_space_base_dir: {tmp_path / 'working-space'}
  data_vault_batch_root: {tmp_path / 'data-vault-batches'}
  data_vault_root: {tmp_path / 'data-vault-root'}
pipelines:
  test-pipeline:
    url: http://localhost:20330
""",
        encoding="utf-8",
    )
    return path


@pytest.fixture(autouse=True)
def _no_env_config(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)


def test_status_without_pipeline_prints_no_report(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    rc = cli.main(["--config", str(_config(tmp_path)), "status"])
    captured = capsys.readouterr()
    assert rc == 1
    assert captured.out == ""
    assert "No pipeline specified" in captured.err


def test_status_with_unknown_pipeline(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    rc = cli.main(["--config", str(_config(tmp_path)), "-p", "non-existent", "status"])
    captured = capsys.readouterr()
    assert rc == 1
    assert captured.out == ""
    assert "No configuration found for pipeline: non-existent" in captured.err


def test_status_on_fresh_tree(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    rc = cli.main(["--config", str(_config(tmp_path)), "--pipeline", "test-pipeline", "status"])
    out = capsys.readouterr().out
    assert rc == 0
    assert out.startswith("status test-pipeline at ")
    assert out.count("0 items (0 bytes)") == 11
    assert out.endswith("---\n\n")


def test_status_accepts_options_after_subcommand(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv(CONFIG_ENV_VAR, str(_config(tmp_path)))
    batch = tmp_path / "data-vault-batches" / "test-pipeline" / "inbox" / "batch1"
    batch.mkdir(parents=True)
    (tmp_path / "data-vault-batches" / "test-pipeline" / "outbox" / "batch1" / "processed" / "x").mkdir(parents=True)

    assert cli.main(["status", "-p", "test-pipeline"]) == 0
    assert "\nbatch1" not in capsys.readouterr().out

    assert cli.main(["status", "-p", "test-pipeline", "--all-batches"]) == 0
    assert "\nbatch1" in capsys.readouterr().out


def test_missing_config_file_is_usage_error(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as info:
        cli.main(["--config", str(tmp_path / "missing.yml"), "-p", "x", "status"])
    assert info.value.code == 2


def test_flush_reports_message(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    seen = []

    def _flush(self):
        seen.append(self.base_url)
        return StatusMessage(message="flush started")

    monkeypatch.setattr(cli.TransferToVaultClient, "flush_work_to_vault", _flush)
    rc = cli.main(["--config", str(_config(tmp_path)), "-p", "test-pipeline", "flush-work-to-vault"])
    assert rc == 0
    assert seen == ["http://localhost:20330"]
    assert "Flush job submitted: flush started" in capsys.readouterr().err


def test_flush_reports_api_error(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    def _flush(self):
        raise ApiError("HTTP 503 from http://localhost:20330/send-to-vault/flush")

    monkeypatch.setattr(cli.TransferToVaultClient, "flush_work_to_vault", _flush)
    rc = cli.main(["--config", str(_config(tmp_path)), "-p", "test-pipeline", "flush-work-to-vault"])
    assert rc == 1
    assert "Error: HTTP 503" in capsys.readouterr().err


def test_flush_without_pipeline(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    rc = cli.main(["--config", str(_config(tmp_path)), "flush-work-to-vault"])
    assert rc == 1
    assert "No pipeline specified" in capsys.readouterr().err
