"""Tests for the extbuild command line."""

import subprocess
import pytest
from pathlib import Path
from unittest.mock import patch
from click.testing import CliRunner

from extbuild.cli.app import cli, INTERRUPTED_EXIT_CODE
from extbuild.cli.reporter import FAILURE_EXIT_CODE
from extbuild.utils.exceptions import CompileError

from conftest import FakeBundler, FakeSession


@pytest.fixture
def runner():
    return CliRunner()


def _invoke(runner, bundler, *args):
    with patch("extbuild.cli.app.EsbuildBundler", return_value=bundler):
        return runner.invoke(cli, list(args))


def test_one_shot_success(runner, project):
    bundler = FakeBundler()

    result = _invoke(runner, bundler, "--project-root", str(project))

    assert result.exit_code == 0, result.output
    assert "Build complete!" in result.output
    assert (project / "dist" / "manifest.json").exists()
    assert (project / "dist" / "popup.js").exists()
    assert [c[0] for c in bundler.calls] == ["compile_once"]


def test_one_shot_missing_entry(runner, project):
    (project / "src" / "popup.ts").unlink()

    result = _invoke(runner, FakeBundler(), "--project-root", str(project))

    assert result.exit_code == FAILURE_EXIT_CODE
    assert "Build complete!" not in result.output
    assert "Build failed" in result.output
    assert "popup" in result.output
    assert not (project / "dist" / "popup.js").exists()


def test_staging_failure(runner, tmp_path):
    result = _invoke(runner, FakeBundler(), "--project-root", str(tmp_path))

    assert result.exit_code == FAILURE_EXIT_CODE
    assert "Build failed" in result.output
    assert "public" in result.output


def test_watch_stays_resident(runner, project):
    session = FakeSession()
    bundler = FakeBundler(session=session)

    result = _invoke(runner, bundler, "--project-root", str(project), "--watch")

    assert "Watching for changes..." in result.output
    assert "Build complete!" not in result.output
    assert session.watching
    # The CLI blocked on the session until it was terminated from outside
    assert session.waited
    assert result.exit_code == INTERRUPTED_EXIT_CODE
    assert [c[0] for c in bundler.calls] == ["create_session"]


def test_watch_session_failure(runner, project):
    (project / "src" / "background.ts").unlink()

    result = _invoke(runner, FakeBundler(), "--project-root", str(project), "--watch")

    assert result.exit_code == FAILURE_EXIT_CODE
    assert "Watching for changes..." not in result.output
    assert "background" in result.output


def test_watch_session_that_ends_propagates_status(runner, project):
    bundler = FakeBundler(session=FakeSession(exit_status=3))

    result = _invoke(runner, bundler, "--project-root", str(project), "--watch")

    assert result.exit_code == 3


def test_unexpected_error_exits_non_zero(runner, project):
    bundler = FakeBundler()

    def crashing(descriptor):
        raise RuntimeError("boom")

    bundler.compile_once = crashing

    result = _invoke(runner, bundler, "--project-root", str(project))

    assert result.exit_code == FAILURE_EXIT_CODE
    assert "boom" in result.output


def test_compile_error_details_are_printed(runner, project):
    bundler = FakeBundler()

    def failing(descriptor):
        raise CompileError("esbuild exited with status 1", entry="content", details=["src/content.ts:3:0: syntax error"])

    bundler.compile_once = failing

    result = _invoke(runner, bundler, "--project-root", str(project))

    assert result.exit_code == FAILURE_EXIT_CODE
    assert "src/content.ts:3:0: syntax error" in result.output


def test_writes_log_file(runner, project):
    _invoke(runner, FakeBundler(), "--project-root", str(project), "--verbose")

    assert (project / "extbuild.log").exists()


def test_version(runner):
    result = runner.invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert "0.1.0" in result.output


def test_relative_project_root(runner, project, monkeypatch):
    """Bundles land in <project>/dist when the root is given relative to the caller."""
    esbuild = project / "node_modules" / ".bin" / "esbuild"
    esbuild.parent.mkdir(parents=True)
    esbuild.write_text("")
    monkeypatch.chdir(project.parent)
    monkeypatch.setenv("EXTBUILD_ESBUILD_PATH", "node_modules/.bin/esbuild")
    commands = []

    def fake_esbuild(cmd, cwd, **kwargs):
        # esbuild resolves --outdir against its own working directory
        commands.append(cmd)
        outdir = Path(cwd) / next(a for a in cmd if a.startswith("--outdir=")).split("=", 1)[1]
        outdir.mkdir(parents=True, exist_ok=True)
        for entry in cmd[1:5]:
            (outdir / f"{Path(entry).stem}.js").write_text("// js")
            (outdir / f"{Path(entry).stem}.js.map").write_text("{}")
        return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")

    with patch("extbuild.modules.bundler.subprocess.run", side_effect=fake_esbuild):
        result = runner.invoke(cli, ["--project-root", project.name])

    assert result.exit_code == 0, result.output
    assert "Build complete!" in result.output
    assert commands[0][0] == str(esbuild)
    assert f"--outdir={project / 'dist'}" in commands[0]
    assert (project / "dist" / "popup.js").exists()
    assert not (project / project.name).exists()
