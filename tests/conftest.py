"""Shared fixtures: a throwaway extension project and an in-memory bundler."""

import pytest
from pathlib import Path

from extbuild.config import Settings
from extbuild.modules.bundler import Bundler, BuildSession, CompileResult
from extbuild.utils.exceptions import CompileError

STATIC_FILES = {
    "manifest.json": b'{"manifest_version": 3, "name": "Test"}',
    "icon.png": b"\x89PNG\r\n\x1a\n\x00\x00fake",
}

ENTRY_NAMES = ["background", "content", "inpage", "popup"]


@pytest.fixture
def project(tmp_path):
    """Create an extension project with public/ and src/ directories."""
    public = tmp_path / "public"
    public.mkdir()
    for name, data in STATIC_FILES.items():
        (public / name).write_bytes(data)

    src = tmp_path / "src"
    src.mkdir()
    for name in ENTRY_NAMES:
        (src / f"{name}.ts").write_text(f"console.log('{name}');\n")

    return tmp_path


@pytest.fixture
def settings(project):
    """Settings rooted at the temporary project."""
    return Settings(project_root=project)


class FakeSession(BuildSession):
    """Watch session that never touches a real process."""

    def __init__(self, exit_status=None):
        self.watching = False
        self.waited = False
        self.exit_status = exit_status

    def watch(self):
        self.watching = True

    def wait(self):
        self.waited = True
        if self.exit_status is None:
            # Stand-in for the host terminating a resident process
            raise KeyboardInterrupt
        return self.exit_status


class FakeBundler(Bundler):
    """Writes placeholder bundles and fails on missing entry sources, like esbuild would."""

    def __init__(self, session=None):
        self.calls = []
        self.files_seen_at_compile = None
        self.session = session or FakeSession()

    def _check(self, descriptor):
        self.files_seen_at_compile = sorted(p.name for p in descriptor.output_dir.iterdir())
        for entry in descriptor.entry_points:
            if not descriptor.entry_path(entry).is_file():
                name = descriptor.entry_name(entry)
                raise CompileError(f'Could not resolve "{entry}"', entry=name)

    def compile_once(self, descriptor):
        self.calls.append(("compile_once", descriptor))
        self._check(descriptor)
        artifacts, maps = [], []
        for entry in descriptor.entry_points:
            artifact = descriptor.artifact_for(entry)
            artifact.write_text(f"// bundle for {entry}\n")
            sourcemap = descriptor.sourcemap_for(entry)
            sourcemap.write_text("{}")
            artifacts.append(artifact)
            maps.append(sourcemap)
        return CompileResult(artifacts=artifacts, sourcemaps=maps)

    def create_session(self, descriptor):
        self.calls.append(("create_session", descriptor))
        self._check(descriptor)
        return self.session


@pytest.fixture
def fake_bundler():
    return FakeBundler()
