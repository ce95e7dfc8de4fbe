import logging
import sys
from pathlib import Path
from typing import Optional

# Third-party loggers that are too chatty at INFO.
_NOISY = ("sqlalchemy", "passlib", "multipart", "httpx")


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Configure the root logger with a stderr handler and an optional file handler.

    Call this once, before the first log line. Calling it again replaces the
    handlers instead of stacking duplicates.
    """
    root = logging.getLogger()
    root.setLevel(level.upper())

    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setFormatter(fmt)
    root.addHandler(ch)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(path), encoding="utf-8")
        fh.setFormatter(fmt)
        root.addHandler(fh)

    for name in _NOISY:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.captureWarnings(True)
