"""Concrete implementation of the FileSystem interface for the local disk.

Uses `pathlib` for paths, `aiofiles` for async file I/O and a worker thread
for directory listing.
"""

import asyncio
import logging
import os
from pathlib import Path
from typing import List

import aiofiles

# Domain Layer Imports
from stitchcli.domain.exceptions import FileIOError
from stitchcli.domain.interfaces.filesystem import FileSystem
from stitchcli.domain.models.common import FilePath

logger = logging.getLogger(__name__)

class LocalFileSystem(FileSystem):
    """Implementation of FileSystem for the local disk."""

    def __init__(self, encoding: str = "utf-8"):
        """Initializes the LocalFileSystem adapter."""
        self.encoding = encoding
        logger.debug("LocalFileSystem initialized.")

    async def read_file(self, file_path: FilePath) -> str:
        """Reads file content asynchronously using aiofiles."""
        path = Path(file_path)
        logger.debug(f"Attempting to read file: {path}")
        try:
            async with aiofiles.open(path, mode='r', encoding=self.encoding) as f:
                content = await f.read()
            logger.debug(f"Successfully read {len(content)} characters from {path}")
            return content
        except FileNotFoundError as e:
            raise FileIOError(f"File not found: {file_path}", path=str(file_path)) from e
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Error reading file {path}: {e}")
            raise FileIOError(f"Failed to read file {file_path}: {e}", path=str(file_path)) from e

    async def write_file(self, file_path: FilePath, content: str) -> None:
        """Writes content to a file asynchronously using aiofiles."""
        path = Path(file_path)
        logger.debug(f"Attempting to write {len(content)} characters to file: {path}")
        try:
            # Ensure parent directory exists
            await asyncio.to_thread(path.parent.mkdir, parents=True, exist_ok=True)
            async with aiofiles.open(path, mode='w', encoding=self.encoding) as f:
                await f.write(content)
            logger.debug(f"Successfully wrote to {path}")
        except OSError as e:
            logger.error(f"Error writing file {path}: {e}")
            raise FileIOError(f"Failed to write file {file_path}: {e}", path=str(file_path)) from e

    async def list_dir(self, dir_path: FilePath) -> List[str]:
        """Lists directory entry names in a worker thread."""
        path = Path(dir_path)
        try:
            entries = await asyncio.to_thread(os.listdir, path)
        except FileNotFoundError:
            logger.debug(f"Directory does not exist yet: {path}")
            return []
        except OSError as e:
            logger.error(f"Error listing directory {path}: {e}")
            raise FileIOError(f"Failed to list directory {dir_path}: {e}", path=str(dir_path)) from e
        logger.debug(f"Listed {len(entries)} entries in {path}")
        return sorted(entries)
