import logging
from pathlib import Path
from typing import List, Optional, Tuple, Union

"""
credentials.py — username → secret lookup backed by a text file.

File format (UTF-8, optional BOM, one pair per line):
    # comment
    ; also a comment
    alice:secret123

The file is read once, on the first lookup, and never re-read. A store that
can't be opened or decoded behaves like an empty one: every lookup misses.
"""

logger = logging.getLogger("vecauth.credentials")

COMMENT_PREFIXES = ("#", ";")


def parse_line(line: str) -> Optional[Tuple[str, str]]:
    """Return (username, secret) for a data line, None for blanks/comments/junk."""
    stripped = line.strip()
    if not stripped or stripped.startswith(COMMENT_PREFIXES):
        return None
    username, sep, secret = stripped.partition(":")
    if not sep:
        return None
    return username.strip(), secret.strip()


class CredentialStore:
    """Owned, lazily loaded credential cache. Build one at startup and share it."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        self._entries: List[Tuple[str, str]] = []
        self._loaded = False

    def _load(self) -> None:
        # Flip the flag first: an unreadable store stays empty for good.
        self._loaded = True
        entries: List[Tuple[str, str]] = []
        try:
            # utf-8-sig: a leading BOM must not become part of the first username.
            with open(self.path, "r", encoding="utf-8-sig") as f:
                for lineno, line in enumerate(f, start=1):
                    entry = parse_line(line)
                    if entry is None:
                        if line.strip() and not line.strip().startswith(COMMENT_PREFIXES):
                            logger.debug("%s:%d: no ':' separator, skipped", self.path, lineno)
                        continue
                    entries.append(entry)
        except OSError as exc:
            logger.error("Cannot open credential store %s: %s", self.path, exc.strerror or exc)
            return
        except UnicodeDecodeError as exc:
            # Cache stays empty, never partly filled.
            logger.error("Credential store %s is not valid UTF-8: %s", self.path, exc)
            return
        self._entries = entries
        logger.info("Loaded %d credential(s) from %s", len(self._entries), self.path)

    def find(self, username: str) -> Optional[str]:
        """Secret for username, or None. First entry wins on duplicates."""
        if not self._loaded:
            self._load()
        for name, secret in self._entries:
            if name == username:
                return secret
        return None

    def __len__(self) -> int:
        if not self._loaded:
            self._load()
        return len(self._entries)
