import logging
import sys
from pathlib import Path

import click
from colorama import init as colorama_init, Fore, Style

from . import logging as _logging
from .progress import ProgressDisplay
from .reporter import report
from ..config import get_settings
from ..modules.bundler import EsbuildBundler
from ..pipeline import BuildPipeline, RunMode

# Initialize colorama for cross-platform colored output
colorama_init()

logger = logging.getLogger(__name__)

INTERRUPTED_EXIT_CODE = 130


def _cancelled() -> None:
    click.echo(f"\n{Fore.YELLOW}Build cancelled by user.{Style.RESET_ALL}", err=True)
    sys.exit(INTERRUPTED_EXIT_CODE)


@click.command()
@click.version_option(version='0.1.0')
@click.option(
    '--watch',
    is_flag=True,
    default=False,
    help='Keep running and rebuild whenever a source file changes.'
)
@click.option(
    '--project-root',
    type=click.Path(file_okay=False, resolve_path=True, path_type=Path),
    default=None,
    help='Extension project directory (default: EXTBUILD_PROJECT_ROOT or the current directory)'
)
@click.option(
    '--verbose', '-v',
    is_flag=True,
    default=False,
    help='Show debug output on the console.'
)
def cli(watch, project_root, verbose):
    """
    Build the browser extension into dist/.

    Copies every file in public/ into dist/, then bundles the background,
    content, in-page and popup scripts with esbuild. With --watch, stays
    running and rebuilds on change.
    """
    mode = RunMode.from_flag(watch)

    try:
        settings = get_settings(project_root=project_root)
        _logging.configure(settings.resolved_log_file(), verbose=verbose)
        logger.debug(f"Run mode: {mode.value}, project root: {settings.project_root}")

        bundler = EsbuildBundler(
            executable=settings.resolved_esbuild_path(),
            startup_grace=settings.watch_startup_grace,
        )
        pipeline = BuildPipeline(settings, bundler=bundler)
        result = pipeline.run(mode, progress_callback=ProgressDisplay.show)
    except KeyboardInterrupt:
        _cancelled()
    except Exception as e:
        report(e)

    if result.session is None:
        return

    # Resident until the host terminates us
    try:
        status = result.session.wait()
    except KeyboardInterrupt:
        _cancelled()

    logger.warning(f"Watch session ended with status {status}")
    sys.exit(status)
