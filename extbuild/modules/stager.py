"""Static asset staging: copies manifest, icons and HTML into the output directory."""

import logging
import shutil
from pathlib import Path
from typing import List

from ..utils.exceptions import StagingError

logger = logging.getLogger(__name__)


class AssetStager:
    """Copies the top-level files of a static directory into the build output."""

    def __init__(self, source_dir: Path, dest_dir: Path):
        """
        Initialize the stager.

        Args:
            source_dir: Directory holding static files (flat, not recursed)
            dest_dir: Output directory; created if missing, never cleaned
        """
        self.source_dir = Path(source_dir)
        self.dest_dir = Path(dest_dir)

    def stage(self) -> List[Path]:
        """
        Copy every top-level file of source_dir into dest_dir, overwriting.

        Returns:
            Paths of the copied files under dest_dir

        Raises:
            StagingError: If source_dir is unreadable or a copy fails
        """
        try:
            self.dest_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StagingError(f"Cannot create output directory {self.dest_dir}: {e}") from e

        try:
            entries = list(self.source_dir.iterdir())
        except OSError as e:
            raise StagingError(f"Cannot read static directory {self.source_dir}: {e}") from e

        staged = []
        for entry in entries:
            if not entry.is_file():
                logger.debug(f"Skipping non-file entry: {entry}")
                continue
            target = self.dest_dir / entry.name
            try:
                shutil.copyfile(entry, target)
            except OSError as e:
                raise StagingError(f"Failed to copy {entry} to {target}: {e}") from e
            logger.debug(f"Staged {entry.name} -> {target}")
            staged.append(target)

        logger.info(f"Staged {len(staged)} static file(s) into {self.dest_dir}")
        return staged


def stage(source_dir: Path, dest_dir: Path) -> List[Path]:
    """Stage static files from source_dir into dest_dir."""
    return AssetStager(source_dir, dest_dir).stage()
