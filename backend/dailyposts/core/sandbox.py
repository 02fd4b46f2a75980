"""Sandboxed file access - ensures all file operations stay within the storage root."""

import os
import posixpath
from pathlib import Path

from dailyposts.core.errors import PathEscapeError


def strip_adapter(query_path: str, adapter: str) -> str:
    """Remove the first "<adapter>://" prefix from a client path."""
    return query_path.replace(f"{adapter}://", "", 1)


def _expand(path: str) -> str:
    if path.startswith("~"):
        path = os.path.expanduser("~") + path[1:]
    return os.path.expandvars(path)


class PathSandbox:
    """Maps client supplied paths onto one storage root.

    `resolve` returns the path relative to the root ("" for the root itself),
    `resolve_absolute` the absolute filesystem path. Both raise
    PathEscapeError for anything that lands outside of the root.
    """

    def __init__(self, root: str | Path):
        self.root = posixpath.normpath(os.path.abspath(_expand(str(root))))

    def resolve(self, requested_path: str) -> str:
        if "\x00" in requested_path:
            raise PathEscapeError(f"Path {requested_path!r} contains a NUL byte")

        joined = posixpath.join(self.root, requested_path.lstrip("/"))
        normalized = posixpath.normpath(_expand(joined))

        relative = posixpath.relpath(normalized, self.root)
        if relative == ".":
            relative = ""
        elif relative == ".." or relative.startswith("../"):
            raise PathEscapeError(f"Path {requested_path!r} is not inside of {self.root!r}")

        # symlinks inside the root must not lead out of it
        try:
            real_root = Path(self.root).resolve()
            real_path = (real_root / relative).resolve()
        except (ValueError, OSError, RuntimeError) as e:
            raise PathEscapeError(f"Path {requested_path!r} can't be resolved: {e}") from e
        if not real_path.is_relative_to(real_root):
            raise PathEscapeError(f"Path {requested_path!r} leaves {self.root!r} through a symlink")

        return relative

    def resolve_absolute(self, requested_path: str) -> Path:
        relative = self.resolve(requested_path)
        return Path(self.root, relative) if relative else Path(self.root)
