from __future__ import annotations

import datetime as dt
import logging
from pathlib import Path
from typing import Callable, Optional

from .errors import WalkDepthExceeded

logger = logging.getLogger(__name__)

MAX_WALK_DEPTH = 32


def parse_int(value: object, default: int) -> int:
    if value is None:
        return default
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return default


def join_url(base: str, path: str) -> str:
    base = base.rstrip("/")
    path = path.lstrip("/")
    if not path:
        return base
    return f"{base}/{path}"


def rfc822_date(value: dt.datetime) -> str:
    value = value.replace(tzinfo=dt.timezone.utc)
    return value.strftime("%a, %d %b %Y %H:%M:%S %z")


def is_reserved_name(name: str) -> bool:
    return name.startswith(("_", "."))


def walk_files(
    root: Path,
    skip: Optional[Callable[[str], bool]] = None,
    max_depth: int = MAX_WALK_DEPTH,
) -> list[Path]:
    """Collect regular files below ``root`` depth-first in name order.

    ``skip`` is applied to the base name of every entry, directories included,
    so a skipped directory hides its whole subtree. Directories already visited
    through another path (symlink loops) are walked once.
    """
    found: list[Path] = []
    seen: set[Path] = set()
    stack = [(root, 0)]
    while stack:
        directory, depth = stack.pop()
        if depth > max_depth:
            raise WalkDepthExceeded(f"Directory nesting deeper than {max_depth} at {directory}")
        real = directory.resolve()
        if real in seen:
            logger.warning("Skipping already visited directory %s", directory)
            continue
        seen.add(real)
        logger.debug("Discovering at %s", directory)
        subdirs = []
        for entry in sorted(directory.iterdir(), key=lambda p: p.name):
            if skip is not None and skip(entry.name):
                continue
            if entry.is_dir():
                subdirs.append(entry)
            elif entry.is_file():
                found.append(entry)
        for sub in reversed(subdirs):
            stack.append((sub, depth + 1))
    return found
