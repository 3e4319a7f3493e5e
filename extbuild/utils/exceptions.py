"""Custom exceptions for extbuild."""

from typing import List, Optional


class BuildError(Exception):
    """Base class for failures that end a build invocation."""
    pass


class StagingError(BuildError, OSError):
    """Exception raised when static files cannot be copied into the output directory."""
    pass


class CompileError(BuildError):
    """Exception raised when the bundler rejects the build or fails to compile an entry point."""

    def __init__(self, message: str, entry: Optional[str] = None, details: Optional[List[str]] = None):
        super().__init__(message)
        self.entry = entry
        self.details = list(details or [])

    def __str__(self) -> str:
        message = super().__str__()
        if self.details:
            return message + "\n" + "\n".join(f"  {line}" for line in self.details)
        return message
