"""Small helpers for string lists, files and directories."""

import os
import shutil
import subprocess
from typing import Iterable, List, Sequence

from rainbow.errors import CommandError


def trim_and_filter(items: Iterable[str]) -> List[str]:
    """Strip each string and drop blanks and duplicates, keeping first-seen order."""
    seen = set()
    result = []
    for item in items:
        trimmed = item.strip()
        if not trimmed or trimmed in seen:
            continue
        seen.add(trimmed)
        result.append(trimmed)
    return result


def is_directory_exists(path) -> bool:
    """Return True if ``path`` exists and is a directory."""
    return os.path.isdir(path)


def ensure_directory_exists(path) -> None:
    """Create ``path`` and its parents if it is not already a directory."""
    if not is_directory_exists(path):
        os.makedirs(path, mode=0o755, exist_ok=True)


def is_file_exists(path) -> bool:
    """Return True if ``path`` exists and is not a directory."""
    try:
        return not os.path.isdir(path) and os.path.exists(path)
    except (OSError, ValueError):
        return False


def remove_file(path) -> None:
    """Remove a file or a whole directory tree, ignoring any failure."""
    try:
        if os.path.isdir(path) and not os.path.islink(path):
            shutil.rmtree(path, ignore_errors=True)
        else:
            os.remove(path)
    except OSError:
        pass


def write_into_file(content: str, file_name) -> None:
    """Write ``content`` to ``file_name``, replacing what was there."""
    with open(file_name, "w", encoding="utf-8") as handle:
        handle.write(content)


def _run(args: Sequence[str]) -> str:
    try:
        proc = subprocess.run(
            list(args),
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            check=False,
        )
    except OSError as exc:
        raise CommandError(args, str(exc)) from exc
    output = proc.stdout or ""
    if proc.returncode != 0:
        raise CommandError(args, output, proc.returncode)
    return output


def copy(src, dest) -> None:
    """Copy ``src`` to ``dest`` recursively with ``cp -r``."""
    _run(["cp", "-r", os.fspath(src), os.fspath(dest)])


def move(src, dest) -> None:
    """Move ``src`` to ``dest`` with ``mv``."""
    _run(["mv", os.fspath(src), os.fspath(dest)])