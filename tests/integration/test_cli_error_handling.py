"""CLI error-handling tests for concise stage-aware diagnostics."""

from pathlib import Path

from typer.testing import CliRunner

from livetranslate.cli import app


def test_translate_reports_missing_config_file() -> None:
    """Translate should fail with stage-aware diagnostics when `--config` is missing."""

    runner = CliRunner()
    result = runner.invoke(
        app, ["translate", "Hello", "--config", "missing-livetranslate.yaml"]
    )

    assert result.exit_code == 1
    assert "translate failed at stage `config`" in result.output
    assert "Config file not found: `missing-livetranslate.yaml`." in result.output


def test_translate_reports_invalid_config_payload(tmp_path: Path) -> None:
    """Unknown YAML keys should fail fast before any translation work."""

    config_path = tmp_path / "invalid.yaml"
    config_path.write_text("output_dir: out\n", encoding="utf-8")

    runner = CliRunner()
    result = runner.invoke(app, ["translate", "Hello", "--config", str(config_path)])

    assert result.exit_code == 1
    assert "translate failed at stage `config`" in result.output
    assert "unsupported key(s): output_dir" in result.output
    assert "Hint: Fix config schema/values and rerun." in result.output


def test_translate_rejects_auto_target_language() -> None:
    """`auto` is only valid as a source language."""

    runner = CliRunner()
    result = runner.invoke(app, ["translate", "Hello", "--target", "auto"])

    assert result.exit_code == 1
    assert "translate failed at stage `config`" in result.output
    assert "only valid as a source language" in result.output


def test_detect_rejects_unknown_rate_limit_mode() -> None:
    """Unsupported rate-limit policies should be reported as config errors."""

    runner = CliRunner()
    result = runner.invoke(app, ["detect", "Hello", "--rate-limit-mode", "burst"])

    assert result.exit_code == 1
    assert "detect failed at stage `config`" in result.output
    assert "rate_limit_mode" in result.output


def test_batch_reports_missing_input_file(tmp_path: Path) -> None:
    """Batch should report unreadable input files at the `input` stage."""

    runner = CliRunner()
    result = runner.invoke(app, ["batch", str(tmp_path / "missing.txt")])

    assert result.exit_code == 1
    assert "batch failed at stage `input`" in result.output
    assert "Hint: Verify the input path exists and is readable." in result.output


def test_translate_json_reports_invalid_json(tmp_path: Path) -> None:
    """Malformed JSON input should fail at the `input` stage."""

    input_path = tmp_path / "broken.json"
    input_path.write_text("{not json", encoding="utf-8")

    runner = CliRunner()
    result = runner.invoke(app, ["translate-json", str(input_path)])

    assert result.exit_code == 1
    assert "translate-json failed at stage `input`" in result.output
    assert "is not valid JSON" in result.output
