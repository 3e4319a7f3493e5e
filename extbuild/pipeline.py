"""Build orchestrator: stages static files, then runs one-shot or watch compilation."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional

from .config import Settings
from .modules.bundler import Bundler, BuildSession, CompileResult, EsbuildBundler
from .modules.descriptor import BuildDescriptor, extension_descriptor
from .modules.stager import AssetStager

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, str], None]

SUCCESS_NOTICE = "Build complete!"
WATCH_NOTICE = "Watching for changes..."


class RunMode(Enum):
    """Lifecycle of one invocation, chosen once at start."""

    ONE_SHOT = "one-shot"
    WATCH = "watch"

    @classmethod
    def from_flag(cls, watch: bool) -> "RunMode":
        return cls.WATCH if watch else cls.ONE_SHOT


@dataclass
class BuildResult:
    """Outcome of a successful run."""

    mode: RunMode
    staged: List[Path] = field(default_factory=list)
    compiled: Optional[CompileResult] = None
    session: Optional[BuildSession] = None


class BuildPipeline:
    """Main pipeline for building the extension."""

    def __init__(self, settings: Settings, bundler: Optional[Bundler] = None):
        """
        Initialize the pipeline.

        Args:
            settings: Build settings
            bundler: Bundler to compile with (default: esbuild CLI)
        """
        self.settings = settings
        self.descriptor: BuildDescriptor = extension_descriptor(
            settings.project_root,
            entry_points=settings.entry_points,
            output_dir=settings.resolved_dist_dir(),
            node_env=settings.node_env,
        )
        self.stager = AssetStager(settings.resolved_public_dir(), self.descriptor.output_dir)
        self.bundler = bundler or EsbuildBundler(
            executable=settings.resolved_esbuild_path(),
            startup_grace=settings.watch_startup_grace,
        )

    def run(self, mode: RunMode, progress_callback: Optional[ProgressCallback] = None) -> BuildResult:
        """
        Stage static files, then compile according to the run mode.

        Staging always finishes before any compilation starts. Errors are not
        caught here: StagingError and CompileError propagate to the caller,
        which is expected to report them and exit non-zero.

        Args:
            mode: RunMode.ONE_SHOT or RunMode.WATCH
            progress_callback: Optional callback for progress updates (stage, message)

        Returns:
            BuildResult; in watch mode it carries the live session
        """
        def update_progress(stage: str, message: str):
            """Update progress."""
            logger.info(f"[{stage}] {message}")
            if progress_callback:
                progress_callback(stage, message)

        update_progress("STAGE", f"Copying static files from {self.stager.source_dir}...")
        staged = self.stager.stage()
        update_progress("STAGE", f"Staged {len(staged)} file(s) into {self.stager.dest_dir}")

        if mode is RunMode.WATCH:
            return self._run_watch(staged, update_progress)
        return self._run_once(staged, update_progress)

    def _run_once(self, staged: List[Path], update_progress: ProgressCallback) -> BuildResult:
        names = ", ".join(self.descriptor.entry_names())
        update_progress("BUILD", f"Compiling {len(self.descriptor.entry_points)} entry point(s): {names}")

        compiled = self.bundler.compile_once(self.descriptor)
        for artifact in compiled.artifacts:
            update_progress("BUILD", f"Wrote {artifact}")

        update_progress("COMPLETE", SUCCESS_NOTICE)
        return BuildResult(mode=RunMode.ONE_SHOT, staged=staged, compiled=compiled)

    def _run_watch(self, staged: List[Path], update_progress: ProgressCallback) -> BuildResult:
        # Only establishing the session can fail the invocation; rebuild
        # errors inside a live session are reported by the bundler itself.
        session = self.bundler.create_session(self.descriptor)
        session.watch()

        update_progress("WATCH", WATCH_NOTICE)
        return BuildResult(mode=RunMode.WATCH, staged=staged, session=session)
