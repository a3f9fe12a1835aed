"""File I/O for interchange documents.

Reads are plain byte reads; writes go to a temporary file in the target
directory which is then renamed over the destination, so a reader never
observes a half-written document.
"""

import tempfile
from pathlib import Path

from reqsmith.exceptions import CodecIOError

__all__ = ["read_bytes", "write_bytes_atomic"]


def read_bytes(path: Path) -> bytes:
    """Read a file's raw content.

    Raises:
        CodecIOError: If the file cannot be read.
    """
    try:
        return path.read_bytes()
    except OSError as e:
        msg = f"Failed to read file: {e}"
        raise CodecIOError(msg, path=path, operation="read", cause=e) from e


def write_bytes_atomic(path: Path, content: bytes) -> None:
    """Write content to a file atomically.

    Args:
        path: Destination file path. Missing parent directories are created.
        content: Bytes to write.

    Raises:
        CodecIOError: If the write operation fails.
    """
    temp_path: Path | None = None
    try:
        _ = path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            mode="wb",
            dir=path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            temp_path = Path(f.name)
            _ = f.write(content)

        # Path.replace() is atomic on both POSIX and Windows
        _ = temp_path.replace(path)

    except OSError as e:
        if temp_path is not None:
            temp_path.unlink(missing_ok=True)
        msg = f"Failed to write file: {e}"
        raise CodecIOError(msg, path=path, operation="write", cause=e) from e
