"""Async file helpers for the media directory."""

from __future__ import annotations

import asyncio
from pathlib import Path


async def write_bytes_async(path: Path, data: bytes) -> None:
    """Write bytes to a file asynchronously using a thread pool.

    Args:
        path: Path to the file to write.
        data: Raw content to write.
    """
    await asyncio.to_thread(path.write_bytes, data)


async def mkdir_async(
    path: Path, parents: bool = False, exist_ok: bool = False
) -> None:
    """Create a directory asynchronously using a thread pool.

    Args:
        path: Path to the directory to create.
        parents: If True, create parent directories as needed.
        exist_ok: If True, don't raise an error if directory exists.
    """
    await asyncio.to_thread(path.mkdir, parents=parents, exist_ok=exist_ok)


async def list_files_async(path: Path) -> list[str]:
    """List the file names in a directory, sorted.

    Args:
        path: Directory to list.

    Returns:
        Names of the regular files in ``path``; an empty list when the
        directory does not exist.
    """

    def _list() -> list[str]:
        if not path.is_dir():
            return []
        return sorted(entry.name for entry in path.iterdir() if entry.is_file())

    return await asyncio.to_thread(_list)
