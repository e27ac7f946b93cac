"""Interface for interacting with the file system.

Defines the contract for listing, reading and writing files, allowing the
cache store to be independent of the specific file system implementation.
"""

import abc
from typing import List

# Import relevant domain models
from ..models.common import FilePath

class FileSystem(abc.ABC):
    """Abstract Base Class for file system operations."""

    @abc.abstractmethod
    async def read_file(self, file_path: FilePath) -> str:
        """Reads the entire content of a file asynchronously.

        Args:
            file_path: The path to the file to read.

        Returns:
            The content of the file as a string.

        Raises:
            FileIOError: If the file is missing or cannot be read.
        """
        pass

    @abc.abstractmethod
    async def write_file(self, file_path: FilePath, content: str) -> None:
        """Writes content to a file asynchronously, overwriting if it exists.

        Args:
            file_path: The path to the file to write.
            content: The string content to write.

        Raises:
            FileIOError: If the file cannot be written.
        """
        pass

    @abc.abstractmethod
    async def list_dir(self, dir_path: FilePath) -> List[str]:
        """Lists the entry names of a directory asynchronously.

        Args:
            dir_path: The directory to list.

        Returns:
            Entry names (not full paths). Empty if the directory does not exist.

        Raises:
            FileIOError: If the directory exists but cannot be listed.
        """
        pass
