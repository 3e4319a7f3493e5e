"""Configuration management for extbuild."""

from pathlib import Path
from typing import List, Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# One compiled bundle per extension surface
DEFAULT_ENTRY_POINTS = [
    "src/background.ts",
    "src/content.ts",
    "src/inpage.ts",
    "src/popup.ts",
]


class Settings(BaseSettings):
    """Build settings loaded from environment variables (EXTBUILD_*) and .env."""

    model_config = SettingsConfigDict(
        env_prefix='EXTBUILD_',
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False
    )

    # Layout
    project_root: Path = Field(default_factory=Path.cwd, description="Extension project directory")
    public_dir: Path = Field(default=Path("public"), description="Static files copied verbatim into the output directory")
    dist_dir: Path = Field(default=Path("dist"), description="Output directory for staged and compiled files")
    entry_points: List[str] = Field(default_factory=lambda: list(DEFAULT_ENTRY_POINTS))

    # Compilation
    node_env: str = Field(default="production", description="Value baked into process.env.NODE_ENV")
    esbuild_path: Optional[Path] = Field(default=None, description="Explicit esbuild executable (default: PATH, then node_modules/.bin)")

    # Runtime
    log_file: Path = Field(default=Path("extbuild.log"))
    watch_startup_grace: float = Field(default=0.5, ge=0, description="Seconds to wait for an early watch-process failure")

    @field_validator('project_root')
    @classmethod
    def _absolute_project_root(cls, value: Path) -> Path:
        # esbuild runs with cwd=project_root, so every derived path must be absolute
        return value.resolve()

    @field_validator('entry_points')
    @classmethod
    def _require_entry_points(cls, value: List[str]) -> List[str]:
        if not value:
            raise ValueError("at least one entry point is required")
        return value

    def _resolve(self, path: Path) -> Path:
        return path if path.is_absolute() else self.project_root / path

    def resolved_public_dir(self) -> Path:
        return self._resolve(self.public_dir)

    def resolved_dist_dir(self) -> Path:
        return self._resolve(self.dist_dir)

    def resolved_log_file(self) -> Path:
        return self._resolve(self.log_file)

    def resolved_esbuild_path(self) -> Optional[Path]:
        return self._resolve(self.esbuild_path) if self.esbuild_path is not None else None


def get_settings(**overrides) -> Settings:
    """Get build settings, applying any explicit overrides (e.g. from CLI options)."""
    return Settings(**{k: v for k, v in overrides.items() if v is not None})
