import logging
from pathlib import Path

_LOG_FMT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
_BLUE  = '\033[94m'   # bright blue
_RESET = '\033[0m'
_PATH_RE = __import__('re').compile(
    r'(?:'
    r'[\w./\\-]+/[\w./\\-]+'
    r'|'
    r'\w[\w._-]*\.(?:json|js|ts|tsx|map|html|css|png|svg|log)'
    r')'
)


class _ColorStreamFormatter(logging.Formatter):
    """Stream formatter that renders file paths in bright blue."""
    def format(self, record: logging.LogRecord) -> str:
        msg = super().format(record)
        return _PATH_RE.sub(lambda m: f"{_BLUE}{m.group()}{_RESET}", msg)


_stream_handler = logging.StreamHandler()
_stream_handler.setLevel(logging.WARNING)
_stream_handler.setFormatter(_ColorStreamFormatter(_LOG_FMT))

_root_logger = logging.getLogger()
_root_logger.setLevel(logging.DEBUG)
_root_logger.addHandler(_stream_handler)

_file_handler = None

logger = logging.getLogger(__name__)


def configure(log_file: Path, verbose: bool = False) -> None:
    """Attach the debug log file and set console verbosity."""
    global _file_handler

    _stream_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)

    if _file_handler is not None:
        _root_logger.removeHandler(_file_handler)
        _file_handler.close()

    _file_handler = logging.FileHandler(log_file, delay=True)
    _file_handler.setLevel(logging.DEBUG)
    _file_handler.setFormatter(logging.Formatter(_LOG_FMT))
    _root_logger.addHandler(_file_handler)
