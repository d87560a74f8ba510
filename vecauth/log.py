import logging
import sys
from pathlib import Path
from typing import Optional, Union

"""
log.py — wire the "vecauth" loggers to an append-only file and stderr.

Line format (one event per line):
    [2025-01-31 12:00:00.123] ERROR: Authentication failed for 'bob': hash mismatch

The journal is a separate file with one line per finished session, fed by
the "vecauth.journal" logger.

Setting up a sink never raises: a file we can't open is reported on stderr
and simply not attached.
"""

LOG_FORMAT = "[%(asctime)s.%(msecs)03d] %(levelname)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

ROOT_LOGGER = "vecauth"
JOURNAL_LOGGER = "vecauth.journal"

_FORMATTER = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)


def _file_handler(path: Union[str, Path]) -> Optional[logging.Handler]:
    try:
        handler = logging.FileHandler(path, mode="a", encoding="utf-8")
    except OSError as exc:
        print(f"vecauth: cannot open log file {path}: {exc.strerror or exc}", file=sys.stderr)
        return None
    handler.setFormatter(_FORMATTER)
    return handler


def configure_logging(
    log_file: Optional[Union[str, Path]] = None,
    journal_file: Optional[Union[str, Path]] = None,
    level: int = logging.INFO,
    console: bool = True,
) -> logging.Logger:
    """Attach handlers to the vecauth loggers. Safe to call more than once."""
    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(level)
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()

    if console:
        stream = logging.StreamHandler(sys.stderr)
        stream.setFormatter(_FORMATTER)
        root.addHandler(stream)

    if log_file:
        handler = _file_handler(log_file)
        if handler:
            root.addHandler(handler)

    journal = logging.getLogger(JOURNAL_LOGGER)
    for h in list(journal.handlers):
        journal.removeHandler(h)
        h.close()
    if journal_file:
        handler = _file_handler(journal_file)
        if handler:
            journal.addHandler(handler)
            # Journal lines stay out of the error log.
            journal.propagate = False
    else:
        journal.propagate = True

    return root
