# app/logging_setup.py
import logging
import sys


class _LibraryNoiseFilter(logging.Filter):
    """Keep app logs, only let third-party libraries through at WARNING and up"""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.startswith(("app.", "main", "__main__")):
            return True
        if record.name.startswith("uvicorn"):
            return record.levelno >= logging.INFO
        return record.levelno >= logging.WARNING


def setup_logging(level: str = "INFO") -> None:
    """
    Configure the root logger with a single stderr handler.

    Call once at startup, before the first logger.info.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Drop handlers from earlier calls (uvicorn --reload re-imports main)
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    handler.addFilter(_LibraryNoiseFilter())
    root.addHandler(handler)

    logging.captureWarnings(True)
