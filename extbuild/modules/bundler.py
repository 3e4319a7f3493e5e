"""Bundler capability and its esbuild implementation."""

import abc
import logging
import shutil
import subprocess
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .descriptor import BuildDescriptor
from ..utils.exceptions import CompileError

logger = logging.getLogger(__name__)


@dataclass
class CompileResult:
    """Files written by a single compile pass."""

    artifacts: List[Path]
    sourcemaps: List[Path] = field(default_factory=list)
    log: List[str] = field(default_factory=list)


class BuildSession(abc.ABC):
    """Long-lived bundler handle that recompiles whenever a source dependency changes."""

    @abc.abstractmethod
    def watch(self) -> None:
        """Start watching; returns once watching is active, not when it ends."""
        pass

    @abc.abstractmethod
    def wait(self) -> int:
        """Block while the session is resident; returns its exit status if it ever ends."""
        pass


class Bundler(abc.ABC):
    """Turns a BuildDescriptor into one compiled artifact (plus source map) per entry point."""

    @abc.abstractmethod
    def compile_once(self, descriptor: BuildDescriptor) -> CompileResult:
        pass

    @abc.abstractmethod
    def create_session(self, descriptor: BuildDescriptor) -> BuildSession:
        pass


def _parse_esbuild_errors(output: str) -> List[str]:
    if not output:
        return []
    return [
        line.strip()
        for line in output.splitlines()
        if "error" in line.lower() or "could not resolve" in line.lower()
    ]


class EsbuildSession(BuildSession):
    """Watch session backed by a resident `esbuild --watch=forever` process."""

    def __init__(self, command: List[str], cwd: Path, startup_grace: float = 0.5):
        self.command = command
        self.cwd = cwd
        self.startup_grace = startup_grace
        self._process: Optional[subprocess.Popen] = None

    @property
    def process(self) -> Optional[subprocess.Popen]:
        return self._process

    def watch(self) -> None:
        if self._process is not None:
            raise RuntimeError("Session is already watching")

        logger.debug(f"Starting watch process: {' '.join(self.command)}")
        try:
            # Output is inherited so esbuild reports rebuild errors itself
            self._process = subprocess.Popen(self.command, cwd=self.cwd)
        except OSError as e:
            raise CompileError(f"Failed to start esbuild: {e}") from e

        try:
            returncode = self._process.wait(timeout=self.startup_grace)
        except subprocess.TimeoutExpired:
            logger.info(f"esbuild watch process running (pid {self._process.pid})")
            return

        raise CompileError(f"esbuild watch exited during startup with status {returncode}")

    def wait(self) -> int:
        if self._process is None:
            raise RuntimeError("Session is not watching")
        return self._process.wait()


class EsbuildBundler(Bundler):
    """Drives the esbuild CLI as a subprocess."""

    def __init__(self, executable: Optional[Path] = None, startup_grace: float = 0.5):
        """
        Initialize the bundler.

        Args:
            executable: Explicit esbuild executable; if None it is looked up on
                PATH, then in the project's node_modules/.bin
            startup_grace: Seconds a new watch process may run before it counts as established
        """
        self.executable = executable
        self.startup_grace = startup_grace

    def resolve_executable(self, project_root: Path) -> Path:
        """
        Locate the esbuild executable.

        Raises:
            CompileError: If no esbuild executable can be found
        """
        if self.executable is not None:
            if Path(self.executable).exists():
                return Path(self.executable)
            raise CompileError(f"esbuild executable not found: {self.executable}")

        found = shutil.which("esbuild")
        if found:
            return Path(found)

        name = "esbuild.cmd" if sys.platform == "win32" else "esbuild"
        local = project_root / "node_modules" / ".bin" / name
        if local.exists():
            return local

        raise CompileError(
            "esbuild executable not found",
            details=["Install it with: npm install --save-dev esbuild"],
        )

    def check_entry_points(self, descriptor: BuildDescriptor) -> None:
        """Fail with a CompileError naming the first entry point whose source is missing."""
        for entry in descriptor.entry_points:
            if not descriptor.entry_path(entry).is_file():
                name = descriptor.entry_name(entry)
                raise CompileError(
                    f'Could not resolve entry point "{entry}" ({name})',
                    entry=name,
                )

    def build_command(self, descriptor: BuildDescriptor, watch: bool = False) -> List[str]:
        cmd = [str(self.resolve_executable(descriptor.project_root))]
        cmd.extend(descriptor.entry_points)
        if descriptor.bundle:
            cmd.append("--bundle")
        cmd.extend([
            f"--outdir={descriptor.output_dir}",
            f"--format={descriptor.module_format}",
            f"--platform={descriptor.platform}",
            f"--target={descriptor.target}",
        ])
        if descriptor.sourcemap:
            cmd.append("--sourcemap")
        for name, value in descriptor.defines.items():
            cmd.append(f"--define:{name}={value}")
        if watch:
            # "forever" keeps watching even when stdin is closed
            cmd.append("--watch=forever")
        return cmd

    def _failing_entry(self, descriptor: BuildDescriptor, lines: List[str]) -> Optional[str]:
        for entry in descriptor.entry_points:
            if any(entry in line for line in lines):
                return descriptor.entry_name(entry)
        return None

    def compile_once(self, descriptor: BuildDescriptor) -> CompileResult:
        self.check_entry_points(descriptor)
        cmd = self.build_command(descriptor)

        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            result = subprocess.run(
                cmd,
                cwd=descriptor.project_root,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as e:
            raise CompileError(f"Failed to run esbuild: {e}") from e

        output = (result.stdout or "") + (result.stderr or "")
        if result.returncode != 0:
            errors = _parse_esbuild_errors(output) or output.strip().splitlines()
            entry = self._failing_entry(descriptor, output.splitlines())
            message = f"esbuild exited with status {result.returncode}"
            if entry:
                message += f" while compiling {entry}"
            raise CompileError(message, entry=entry, details=errors)

        artifacts = [descriptor.artifact_for(e) for e in descriptor.entry_points]
        missing = [a for a in artifacts if not a.exists()]
        if missing:
            raise CompileError(
                "esbuild finished without writing every bundle",
                entry=missing[0].stem,
                details=[str(m) for m in missing],
            )

        sourcemaps = [descriptor.sourcemap_for(e) for e in descriptor.entry_points] if descriptor.sourcemap else []
        return CompileResult(
            artifacts=artifacts,
            sourcemaps=sourcemaps,
            log=output.strip().splitlines(),
        )

    def create_session(self, descriptor: BuildDescriptor) -> EsbuildSession:
        self.check_entry_points(descriptor)
        return EsbuildSession(
            self.build_command(descriptor, watch=True),
            cwd=descriptor.project_root,
            startup_grace=self.startup_grace,
        )
