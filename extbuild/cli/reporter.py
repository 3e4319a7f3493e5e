import logging
import sys
from typing import NoReturn

import click
from colorama import Fore, Style

from ..utils.exceptions import BuildError

logger = logging.getLogger(__name__)

FAILURE_EXIT_CODE = 1


def report(error: BaseException) -> NoReturn:
    """Print a build failure to stderr and exit with a non-zero status."""
    if isinstance(error, BuildError):
        logger.debug("Build failed", exc_info=error)
    else:
        logger.exception("Unexpected build failure", exc_info=error)

    click.echo(f"{Fore.RED}Build failed: {error}{Style.RESET_ALL}", err=True)
    sys.exit(FAILURE_EXIT_CODE)
