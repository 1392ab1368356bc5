"""Non-blocking filesystem helpers (blocking calls run in a worker thread)."""

from __future__ import annotations

import os
from dataclasses import dataclass

import anyio.to_thread

from classic_static.schemas.listing import EntryKind


@dataclass(frozen=True)
class DirectoryEntry:
    name: str
    kind: EntryKind | None  # None for sockets, FIFOs, devices


def _classify(entry: os.DirEntry) -> EntryKind | None:
    if entry.is_symlink():
        return EntryKind.SYMLINK
    if entry.is_dir(follow_symlinks=False):
        return EntryKind.DIRECTORY
    if entry.is_file(follow_symlinks=False):
        return EntryKind.FILE
    return None


def _scan(path: str) -> list[DirectoryEntry]:
    with os.scandir(path) as it:
        return [DirectoryEntry(e.name, _classify(e)) for e in it]


async def stat_path(path: str) -> os.stat_result:
    """os.stat, following symlinks. Raises OSError / ValueError."""
    return await anyio.to_thread.run_sync(os.stat, path)


async def scan_directory(path: str) -> list[DirectoryEntry]:
    """List a directory in enumeration order. Raises OSError."""
    return await anyio.to_thread.run_sync(_scan, path)


async def is_readable(path: str) -> bool:
    try:
        return await anyio.to_thread.run_sync(os.access, path, os.R_OK)
    except ValueError:
        return False


def _readable_dir(path: str) -> bool:
    return os.path.isdir(path) and os.access(path, os.R_OK | os.X_OK)


async def is_readable_directory(path: str) -> bool:
    return await anyio.to_thread.run_sync(_readable_dir, path)
