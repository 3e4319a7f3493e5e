"""Build descriptor: the immutable compile configuration shared by every entry point."""

import json
from pathlib import Path
from types import MappingProxyType
from typing import Literal, Mapping, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..config import DEFAULT_ENTRY_POINTS


class BuildDescriptor(BaseModel):
    """Everything the bundler needs to compile the extension, fixed for one invocation."""

    model_config = ConfigDict(frozen=True)

    entry_points: Tuple[str, ...] = Field(min_length=1)
    output_dir: Path
    project_root: Path
    bundle: bool = True
    module_format: Literal["esm"] = "esm"
    platform: Literal["browser"] = "browser"
    target: Literal["es2020"] = "es2020"
    sourcemap: Literal[True] = True
    defines: Mapping[str, str] = Field(default_factory=dict, validate_default=True)

    @field_validator('defines')
    @classmethod
    def _read_only_defines(cls, value: Mapping[str, str]) -> Mapping[str, str]:
        return MappingProxyType(dict(value))

    def entry_name(self, entry: str) -> str:
        """Name of the artifact produced for an entry point (its file stem)."""
        return Path(entry).stem

    def entry_names(self) -> Tuple[str, ...]:
        return tuple(self.entry_name(e) for e in self.entry_points)

    def entry_path(self, entry: str) -> Path:
        path = Path(entry)
        return path if path.is_absolute() else self.project_root / path

    def artifact_for(self, entry: str) -> Path:
        return self.output_dir / f"{self.entry_name(entry)}.js"

    def sourcemap_for(self, entry: str) -> Path:
        return self.output_dir / f"{self.entry_name(entry)}.js.map"


def extension_descriptor(
    project_root: Path,
    entry_points: Optional[Sequence[str]] = None,
    output_dir: Optional[Path] = None,
    node_env: str = "production",
) -> BuildDescriptor:
    """
    Build the descriptor for the extension project.

    Args:
        project_root: Extension project directory
        entry_points: Source files, one per extension surface (default: background, content, inpage, popup)
        output_dir: Output directory (default: <project_root>/dist)
        node_env: Value substituted for process.env.NODE_ENV in every bundle

    Returns:
        Frozen BuildDescriptor
    """
    project_root = Path(project_root).resolve()
    return BuildDescriptor(
        entry_points=tuple(DEFAULT_ENTRY_POINTS if entry_points is None else entry_points),
        output_dir=output_dir if output_dir is not None else project_root / "dist",
        project_root=project_root,
        defines={"process.env.NODE_ENV": json.dumps(node_env)},
    )
