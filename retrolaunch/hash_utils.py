"""ROM hash utilities - streaming SHA-1 digests used for database lookups."""

import os
import hashlib
import logging
from pathlib import Path
from typing import Union

from .exceptions import IoError

logger = logging.getLogger(__name__)


def _read_int_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


DEFAULT_CHUNK_SIZE = max(1, _read_int_env("RETROLAUNCH_HASH_CHUNK_KB", 4)) * 1024


class ContentHasher:
    """Feed a file through a SHA-1 accumulator chunk by chunk.

    The digest depends only on the file's bytes; ``chunk_size`` controls the
    read granularity and nothing else.
    """

    algorithm = "sha1"

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self.chunk_size = chunk_size

    def hash_file(self, file_path: Union[str, Path]) -> str:
        """Return the lowercase hex digest of ``file_path``.

        Raises:
            IoError: the file could not be opened or a read failed. No
                partial digest is ever returned.
        """
        digest = hashlib.sha1()
        try:
            with open(file_path, "rb") as f:
                while True:
                    try:
                        data = f.read(self.chunk_size)
                    except InterruptedError:
                        continue
                    if not data:
                        break
                    digest.update(data)
        except OSError as exc:
            raise IoError(f"Could not hash {file_path}: {exc}",
                          file_path=str(file_path), os_error=exc) from exc

        result = digest.hexdigest()
        logger.debug("sha1(%s) = %s", file_path, result)
        return result


def calculate_sha1(file_path: Union[str, Path], chunk_size: int = DEFAULT_CHUNK_SIZE) -> str:
    """Calculate the SHA-1 hash of a file as a hex string."""
    return ContentHasher(chunk_size).hash_file(file_path)
