from __future__ import annotations

from pathlib import Path

from typer.testing import CliRunner

from captionkit.cli.main import app
from captionkit.exceptions import ConfigurationError, DependencyMissingError


def test_cli_reports_config_error(monkeypatch, tmp_path: Path) -> None:
    import captionkit.cli.main as cli_main

    def fake_open_runtime(*_args, **_kwargs):  # noqa: ANN001
        raise ConfigurationError("bad config value")

    monkeypatch.setattr(cli_main, "_open_runtime", fake_open_runtime)

    runner = CliRunner(mix_stderr=False)
    result = runner.invoke(
        app,
        [
            "status",
            "some-video",
            "--workdir",
            str(tmp_path / ".captionkit"),
        ],
    )

    assert result.exit_code == 2
    assert "Configuration error: bad config value" in result.stderr


def test_cli_reports_dependency_error(monkeypatch) -> None:
    import captionkit.cli.main as cli_main

    def fake_run_doctor(_settings):  # noqa: ANN001
        raise DependencyMissingError("ffmpeg missing")

    monkeypatch.setattr(cli_main, "run_doctor", fake_run_doctor)

    runner = CliRunner(mix_stderr=False)
    result = runner.invoke(app, ["doctor"])

    assert result.exit_code == 3
    assert "Dependency error: ffmpeg missing" in result.stderr


def test_cli_reports_unknown_video(tmp_path: Path) -> None:
    runner = CliRunner(mix_stderr=False)
    result = runner.invoke(app, ["status", "missing", "--workdir", str(tmp_path / ".captionkit")])

    assert result.exit_code == 5
    assert "Not found: Video not found: missing" in result.stderr


def test_cli_rejects_unknown_subtitle_format(tmp_path: Path) -> None:
    runner = CliRunner(mix_stderr=False)
    result = runner.invoke(
        app,
        ["subtitles", "any", "--format", "ass", "--workdir", str(tmp_path / ".captionkit")],
    )

    assert result.exit_code == 4
    assert "Invalid input: Invalid --format 'ass'" in result.stderr


def test_cli_rejects_bad_segment_size_before_transcribing(monkeypatch, tmp_path: Path) -> None:
    import captionkit.cli.main as cli_main

    opened = []
    monkeypatch.setattr(cli_main, "_open_runtime", lambda settings: opened.append(settings))

    runner = CliRunner(mix_stderr=False)
    result = runner.invoke(
        app,
        ["transcribe", "any", "--words-per-segment", "0", "--workdir", str(tmp_path / ".captionkit")],
    )

    assert result.exit_code == 4
    assert "Invalid input: words_per_segment must be at least 1" in result.stderr
    assert opened == []
