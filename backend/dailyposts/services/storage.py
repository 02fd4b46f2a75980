"""File browser operations on the sandboxed storage root.

Every path a client sends goes through PathSandbox before it touches the
filesystem. Batch operations (move, delete) work item by item and stop at the
first failure; items already handled stay handled.
"""

import logging
import mimetypes
import os
import posixpath
import shutil
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator

from dailyposts.core.errors import ConflictError, NotFoundError, ValidationError
from dailyposts.core.sandbox import PathSandbox, strip_adapter

logger = logging.getLogger(__name__)


@dataclass
class StorageEntry:
    type: str  # "dir" | "file"
    path: str
    basename: str
    storage: str
    last_modified: int
    file_size: int
    mime_type: str | None = None
    visibility: str = "public"
    extra_metadata: list[str] = field(default_factory=list)


def is_safe_basename(name: str) -> bool:
    """Allow only simple filenames (no directories)."""
    if not name or name in (".", ".."):
        return False
    return "/" not in name and "\\" not in name


@contextmanager
def _fs_errors(path: str) -> Iterator[None]:
    try:
        yield
    except FileNotFoundError as e:
        raise NotFoundError(f"{path!r} not found") from e
    except FileExistsError as e:
        raise ConflictError(f"{path!r} already exists") from e
    except OSError as e:
        raise ValidationError(f"filesystem operation on {path!r} failed: {e.strerror}") from e


class StorageBrowser:
    def __init__(self, sandbox: PathSandbox, adapter: str):
        self.sandbox = sandbox
        self.adapter = adapter

    def _relative(self, query_path: str) -> str:
        return self.sandbox.resolve(strip_adapter(query_path, self.adapter))

    def _entry(self, relative_dir: str, item: Path) -> StorageEntry:
        # lstat: a link reports itself, dangling or not
        stat = item.lstat()
        return StorageEntry(
            type="dir" if item.is_dir() else "file",
            path=f"{self.adapter}://{posixpath.join(relative_dir, item.name)}",
            basename=item.name,
            storage=self.adapter,
            last_modified=int(stat.st_mtime * 1000),
            file_size=stat.st_size,
            mime_type=mimetypes.guess_type(item.name)[0],
        )

    def list_dir(self, query_path: str, dirs_only: bool = False) -> list[StorageEntry]:
        relative = self._relative(query_path)
        directory = self.sandbox.resolve_absolute(relative)

        if not directory.is_dir():
            raise ValidationError(f"{query_path!r} is not a directory")

        with _fs_errors(query_path):
            return [
                self._entry(relative, item)
                for item in sorted(directory.iterdir())
                if item.is_dir() or not dirs_only
            ]

    def read(self, query_path: str) -> tuple[bytes, str]:
        file_path = self.sandbox.resolve_absolute(strip_adapter(query_path, self.adapter))
        if not file_path.is_file():
            raise NotFoundError(f"{query_path!r} is not a file")

        with _fs_errors(query_path):
            content = file_path.read_bytes()
        return content, mimetypes.guess_type(file_path.name)[0] or "application/octet-stream"

    def make_dir(self, query_path: str, name: str) -> None:
        if not is_safe_basename(name):
            raise ValidationError(f"invalid folder name {name!r}")

        target = self.sandbox.resolve_absolute(posixpath.join(strip_adapter(query_path, self.adapter), name))
        with _fs_errors(name):
            target.mkdir()
        logger.debug(f"Created folder {target}")

    def rename(self, item: str, name: str) -> None:
        if not is_safe_basename(name):
            raise ValidationError(f"invalid name {name!r}")

        source_rel = self._relative(item)
        if not source_rel:
            raise ValidationError("the storage root can't be renamed")

        source = self.sandbox.resolve_absolute(source_rel)
        dest = self.sandbox.resolve_absolute(posixpath.join(posixpath.dirname(source_rel), name))
        self._rename(source, dest, item)

    def move(self, destination: str, items: list[str]) -> None:
        dest_dir = self._relative(destination)
        if not self.sandbox.resolve_absolute(dest_dir).is_dir():
            raise ValidationError(f"{destination!r} is not a directory")

        for item in items:
            source_rel = self._relative(item)
            if not source_rel:
                raise ValidationError("the storage root can't be moved")

            source = self.sandbox.resolve_absolute(source_rel)
            dest = self.sandbox.resolve_absolute(posixpath.join(dest_dir, posixpath.basename(source_rel)))
            self._rename(source, dest, item)

    def delete(self, items: list[str]) -> None:
        for item in items:
            relative = self._relative(item)
            if not relative:
                raise ValidationError("the storage root can't be deleted")

            target = self.sandbox.resolve_absolute(relative)
            if not target.exists() and not target.is_symlink():
                raise NotFoundError(f"{item!r} not found")

            with _fs_errors(item):
                if target.is_dir() and not target.is_symlink():
                    shutil.rmtree(target)
                else:
                    target.unlink()
            logger.debug(f"Deleted {target}")

    def _rename(self, source: Path, dest: Path, item: str) -> None:
        if not source.exists():
            raise NotFoundError(f"{item!r} not found")
        # os.rename silently replaces files on POSIX
        if dest.exists():
            raise ConflictError(f"{dest.name!r} already exists at the destination")

        with _fs_errors(item):
            os.rename(source, dest)
        logger.debug(f"Moved {source} -> {dest}")
