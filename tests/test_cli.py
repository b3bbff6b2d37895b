"""CLI 命令测试。"""

from __future__ import annotations

import json
from pathlib import Path
import sys
from types import SimpleNamespace

import pytest

from kaleido_scope.__main__ import _detect_render_backend, main


def _write_request(tmp_path: Path, body: object) -> Path:
    path = tmp_path / "request.json"
    path.write_text(json.dumps(body), encoding="utf-8")
    return path


def test_cli_init_creates_env_file(tmp_path: Path) -> None:
    env_path = tmp_path / ".env"
    ret = main(["init", "--env-file", str(env_path)])
    assert ret == 0
    text = env_path.read_text(encoding="utf-8")
    assert "KALEIDO_SCOPE_SAFE_MODE=" in text
    assert "KALEIDO_SCOPE_PDF_PAGE_LOAD_TIMEOUT=2.0" in text
    assert "KALEIDO_SCOPE_PLOT_GL_PIXEL_RATIO=2.5" in text


def test_cli_init_without_force_refuses_overwrite(tmp_path: Path) -> None:
    env_path = tmp_path / ".env"
    env_path.write_text("EXISTING=1\n", encoding="utf-8")
    assert main(["init", "--env-file", str(env_path)]) == 1
    assert env_path.read_text(encoding="utf-8") == "EXISTING=1\n"
    assert main(["init", "--env-file", str(env_path), "--force"]) == 0


def test_cli_validate_prints_summary(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], bar_figure: dict
) -> None:
    path = _write_request(tmp_path, {"figure": bar_figure, "format": "svg", "scale": 2})
    assert main(["validate", str(path)]) == 0

    summary = json.loads(capsys.readouterr().out)
    assert summary["format"] == "svg"
    assert summary["content_type"] == "image/svg+xml"
    assert summary["scale"] == 2
    assert summary["traces"] == 1


def test_cli_validate_shorthand_uses_flags(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], bar_figure: dict
) -> None:
    path = _write_request(tmp_path, bar_figure)
    assert main(["validate", str(path), "--format", "webp", "--width", "640"]) == 0
    summary = json.loads(capsys.readouterr().out)
    assert summary["format"] == "webp"
    assert summary["width"] == 640


def test_cli_validate_rejects_malformed(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    path = _write_request(tmp_path, {"figure": {"layout": []}})
    assert main(["validate", str(path)]) == 1
    assert json.loads(capsys.readouterr().out)["code"] == 400


def test_cli_validate_missing_file(tmp_path: Path) -> None:
    assert main(["validate", str(tmp_path / "missing.json")]) == 1


def test_cli_validate_safe_mode(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = _write_request(tmp_path, {"data": [{"type": "scatter"}] * 201})
    assert main(["validate", str(path)]) == 0
    capsys.readouterr()
    assert main(["validate", str(path), "--safe-mode"]) == 1
    assert "likely to make exporter hang" in capsys.readouterr().out


@pytest.mark.parametrize(
    ("argv", "expected"),
    [
        (["profile", "1.10.0"], 1),
        (["profile", "1.20.0"], 0),
        (["profile", "1.40.0", "--format", "json"], 1),
        (["profile", "1.53.0", "--format", "json"], 0),
    ],
)
def test_cli_profile(argv: list[str], expected: int) -> None:
    assert main(argv) == expected


def test_cli_render_refuses_emf(tmp_path: Path, bar_figure: dict) -> None:
    path = _write_request(tmp_path, bar_figure)
    ret = main(["render", str(path), "-o", str(tmp_path / "out.emf"), "--format", "emf"])
    assert ret == 1
    assert not (tmp_path / "out.emf").exists()


def test_cli_serve_invokes_uvicorn(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[tuple[tuple[object, ...], dict[str, object]]] = []

    def fake_run(*args: object, **kwargs: object) -> None:
        calls.append((args, kwargs))

    monkeypatch.setitem(sys.modules, "uvicorn", SimpleNamespace(run=fake_run))

    ret = main(["serve", "--port", "9001", "--host", "0.0.0.0"])
    assert ret == 0
    assert len(calls) == 1
    args, kwargs = calls[0]
    assert args == ("kaleido_scope.app:create_app",)
    assert kwargs["factory"] is True
    assert kwargs["port"] == 9001
    assert kwargs["host"] == "0.0.0.0"


def test_detect_render_backend_with_bundled_chromium(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setitem(sys.modules, "kaleido", SimpleNamespace(__version__="0.2.1"))
    ok, detail = _detect_render_backend()
    assert ok is True
    assert "0.2.1" in detail


def test_detect_render_backend_without_chrome(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setitem(sys.modules, "kaleido", SimpleNamespace(__version__="1.0.0"))
    monkeypatch.setitem(
        sys.modules,
        "choreographer.browsers.chromium",
        SimpleNamespace(get_browser_path=lambda browsers: None, chromium_based_browsers=[]),
    )
    ok, detail = _detect_render_backend()
    assert ok is False
    assert "kaleido_get_chrome" in detail
