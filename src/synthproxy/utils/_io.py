"""File I/O utilities for generated configuration files."""

import tempfile
from pathlib import Path


def read_text_or_empty(path: Path) -> str | None:
    """Read a text file, returning None when it does not exist.

    Raises:
        OSError: For any failure other than a missing file.
    """
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None


def write_text_atomic(path: Path, content: str) -> None:
    """Write text to a file atomically.

    Writes to a temporary file in the same directory, then renames to the
    target path. The file is either fully written or not at all.

    Args:
        path: Destination file path.
        content: Text to write.

    Raises:
        OSError: If the write operation fails.
    """
    _ = path.parent.mkdir(parents=True, exist_ok=True)

    temp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            delete=False,
            suffix=".tmp",
            encoding="utf-8",
        ) as f:
            _ = f.write(content)
            temp_path = Path(f.name)

        # Path.replace() is atomic on both POSIX and Windows
        _ = temp_path.replace(path)
    except OSError:
        if temp_path is not None:
            temp_path.unlink(missing_ok=True)
        raise
