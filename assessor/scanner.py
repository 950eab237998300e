"""
Directory scanning for locally submitted code.

Walks a directory handle depth-first, keeps files with a known source
extension, skips dependency and build directories, and reads at most
``MAX_CODE_FILES`` files of at most ``MAX_FILE_SIZE`` bytes each.
"""

import asyncio
import logging
import os
from pathlib import Path
from typing import AsyncIterator, Iterable, List, Optional, Protocol, Tuple, Union

from assessor.config import Settings
from assessor.constants import (
    CODE_EXTENSIONS,
    DEFAULT_FILE_TYPE,
    FILE_TYPES,
    MAX_CODE_FILES,
    MAX_FILE_SIZE,
    SKIP_DIRECTORIES,
)
from assessor.errors import DirectoryAccessError, FileReadError, UnsupportedPlatform
from assessor.models import DirectoryManifest, FileRecord


class FileHandle(Protocol):
    name: str
    kind: str

    async def size(self) -> int: ...

    async def read_text(self) -> str: ...


class DirectoryHandle(Protocol):
    name: str
    kind: str

    def entries(self) -> AsyncIterator[Tuple[str, Union["DirectoryHandle", FileHandle]]]: ...


class UploadedFile(Protocol):
    relative_path: str

    async def size(self) -> int: ...

    async def read_text(self) -> str: ...


def is_code_file(file_name: str) -> bool:
    return file_name.lower().endswith(CODE_EXTENSIONS)


def get_file_type(file_name: str) -> str:
    extension = file_name.lower().rsplit(".", 1)[-1]
    return FILE_TYPES.get(extension, DEFAULT_FILE_TYPE)


class LocalFileHandle:
    """File handle over the server's own filesystem."""

    kind = "file"

    def __init__(self, path: Path):
        self._path = path
        self.name = path.name

    async def size(self) -> int:
        stat = await asyncio.to_thread(self._path.stat)
        return stat.st_size

    async def read_text(self) -> str:
        return await asyncio.to_thread(self._path.read_text, encoding="utf-8", errors="replace")


class LocalDirectoryHandle:
    """Directory handle over the server's own filesystem. Symlinked directories are not followed."""

    kind = "directory"

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)
        self.name = self._path.name or str(self._path)

    async def entries(self):
        items = await asyncio.to_thread(self._list)
        for name, is_dir in items:
            child = self._path / name
            if is_dir:
                yield name, LocalDirectoryHandle(child)
            else:
                yield name, LocalFileHandle(child)

    def _list(self) -> List[Tuple[str, bool]]:
        items = []
        with os.scandir(self._path) as it:
            for entry in it:
                if entry.is_dir(follow_symlinks=False):
                    items.append((entry.name, True))
                elif entry.is_file():
                    items.append((entry.name, False))
        return sorted(items)


class _ScanState:
    def __init__(self, max_files: int):
        self.max_files = max_files
        self.files: List[FileRecord] = []
        self.discovered: List[str] = []

    @property
    def full(self) -> bool:
        return len(self.files) >= self.max_files


async def scan(root: DirectoryHandle, max_files: int = MAX_CODE_FILES) -> DirectoryManifest:
    """
    Scan a directory tree into a manifest.

    Every supported file is recorded in ``discovered_paths``; only files that
    were actually read (below the size ceiling, while under the cap) become
    ``files``. Once the cap is hit no further directory is entered.
    """
    state = _ScanState(max_files)
    await _walk(root, "", state)
    return DirectoryManifest(
        root_path=root.name,
        total_file_count=len(state.discovered),
        files=state.files,
        discovered_paths=state.discovered,
    )


async def _walk(directory: DirectoryHandle, current_path: str, state: _ScanState):
    try:
        async for name, handle in directory.entries():
            full_path = f"{current_path}/{name}" if current_path else name

            if handle.kind == "directory":
                if name in SKIP_DIRECTORIES or state.full:
                    continue
                await _walk(handle, full_path, state)
            elif handle.kind == "file" and is_code_file(name):
                state.discovered.append(full_path)
                if state.full:
                    continue
                record = await _read_record(handle, name, full_path)
                if record is not None:
                    state.files.append(record)
    except OSError as e:
        logging.error(f"Error processing directory {current_path or directory.name}: {e}")


async def read_code_file(handle, path: str) -> Optional[str]:
    """
    Text of one code file, or None when it is over the size ceiling.

    Raises ``FileReadError`` when the file cannot be read or decoded.
    """
    try:
        size = await handle.size()
        if size > MAX_FILE_SIZE:
            logging.info(f"Skipping large file: {path} ({size} bytes)")
            return None
        return await handle.read_text()
    except (OSError, UnicodeError) as e:
        raise FileReadError(detail=f"{path}: {e}") from e


async def _read_record(handle, name: str, path: str) -> Optional[FileRecord]:
    try:
        content = await read_code_file(handle, path)
    except FileReadError as e:
        logging.warning(f"Could not read file {e.detail}")
        return None
    if content is None:
        return None
    return FileRecord(name=name, path=path, content=content, type=get_file_type(name))


async def scan_file_list(
    files: Iterable[UploadedFile], max_files: int = MAX_CODE_FILES
) -> Optional[DirectoryManifest]:
    """
    Build a manifest from a flat list of uploaded files.

    Used when the host cannot hand over a directory. Applies the same
    filters as ``scan``; an empty list means the user cancelled.
    """
    files = list(files)
    if not files:
        return None

    state = _ScanState(max_files)
    for upload in files:
        path = upload.relative_path.replace("\\", "/")
        name = path.rsplit("/", 1)[-1]
        if not is_code_file(name):
            continue
        state.discovered.append(path)
        if state.full:
            continue
        record = await _read_record(upload, name, path)
        if record is not None:
            state.files.append(record)

    root_name = files[0].relative_path.replace("\\", "/").split("/")[0]
    manifest = DirectoryManifest(
        root_path=root_name,
        total_file_count=len(state.discovered),
        files=state.files,
        discovered_paths=state.discovered,
    )
    logging.info(f"Uploaded directory {root_name}: {manifest.summary()}")
    return manifest


async def select_directory(path: Optional[str], settings: Settings) -> Optional[DirectoryManifest]:
    """
    Scan a directory on the server's filesystem.

    Returns ``None`` when no path was chosen. Raises ``UnsupportedPlatform``
    when local directory access is switched off for this host.
    """
    if not settings.LOCAL_SCAN_ENABLED:
        raise UnsupportedPlatform()

    if not path or not path.strip():
        logging.info("Directory selection cancelled")
        return None

    root = Path(path.strip()).expanduser()
    if not root.is_dir():
        raise DirectoryAccessError(
            f"Directory not found: {root.name or path}",
            detail=f"{root} does not exist or is not a directory",
        )

    logging.info(f"Directory selected: {root}")
    manifest = await scan(LocalDirectoryHandle(root))
    logging.info(manifest.summary())
    return manifest
