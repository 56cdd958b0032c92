from __future__ import annotations

from captionkit.config.settings import Settings
from captionkit.utils import doctor


def _patch_common(monkeypatch, modules_ok=True) -> None:  # noqa: ANN001
    monkeypatch.setattr(doctor, "_check_writable", lambda _: True)
    monkeypatch.setattr(doctor, "_module_available", lambda _: modules_ok)
    monkeypatch.setattr(doctor, "_get_version", lambda: "0.0.0")


def test_doctor_all_ok(monkeypatch, capsys, tmp_path) -> None:
    def fake_run(cmd):  # noqa: ANN001
        if cmd[0] == "ffmpeg":
            return 0, "ffmpeg version x"
        if cmd[0] == "ffprobe":
            return 0, "ffprobe version y"
        return 0, ""

    monkeypatch.setattr(doctor, "_run_cmd", fake_run)
    _patch_common(monkeypatch)

    settings = Settings(workdir=str(tmp_path), google_credentials_base64="e30=")
    code = doctor.run_doctor(settings)
    out = capsys.readouterr().out

    assert code == 0
    assert "ffmpeg version x" in out
    assert "Google credentials: set" in out


def test_doctor_missing_ffmpeg(monkeypatch, capsys, tmp_path) -> None:
    def fake_run(cmd):  # noqa: ANN001
        if cmd[0] == "ffmpeg":
            return 1, ""
        return 0, "ffprobe version y"

    monkeypatch.setattr(doctor, "_run_cmd", fake_run)
    _patch_common(monkeypatch)

    code = doctor.run_doctor(Settings(workdir=str(tmp_path)))
    assert code == 1
    assert "❌ ffmpeg (not found)" in capsys.readouterr().out


def test_doctor_missing_speech_client(monkeypatch, capsys, tmp_path) -> None:
    monkeypatch.setattr(doctor, "_run_cmd", lambda cmd: (0, "ok"))
    _patch_common(monkeypatch, modules_ok=False)

    code = doctor.run_doctor(Settings(workdir=str(tmp_path)))
    assert code == 1
    assert "google-cloud-videointelligence (not installed)" in capsys.readouterr().out


def test_doctor_missing_ffprobe_only_warns(monkeypatch, capsys, tmp_path) -> None:
    def fake_run(cmd):  # noqa: ANN001
        return (1, "") if cmd[0] == "ffprobe" else (0, "ffmpeg version x")

    monkeypatch.setattr(doctor, "_run_cmd", fake_run)
    _patch_common(monkeypatch)

    code = doctor.run_doctor(Settings(workdir=str(tmp_path)))
    assert code == 0
    assert "⚠️ ffprobe" in capsys.readouterr().out


def test_doctor_reports_missing_burn_filters(monkeypatch, tmp_path) -> None:
    filters = " ... subtitles         V->V       Render text subtitles onto input video using the libass library.\n"

    def fake_run(cmd):  # noqa: ANN001
        if cmd[0] == "ffmpeg" and "-filters" in cmd:
            return 0, filters
        return 0, f"{cmd[0]} version x"

    monkeypatch.setattr(doctor, "_run_cmd", fake_run)
    _patch_common(monkeypatch)

    checks = {c.label: c for c in doctor.collect_checks(Settings(workdir=str(tmp_path)))}
    burn = checks["ffmpeg burn filters"]
    assert not burn.ok
    assert "ass, drawtext" in burn.detail
    assert burn.line().startswith("⚠️")
    assert doctor.run_doctor(Settings(workdir=str(tmp_path))) == 0
