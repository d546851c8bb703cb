"""Local dump file operations."""

from __future__ import annotations

import hashlib
from pathlib import Path

from sampledump.config import DumpSettings
from sampledump.exceptions import LocalStorageError
from sampledump.models import TableConfiguration


def sha256_file(path: Path) -> str:
    """Calculate SHA256 hash of a file."""
    h = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(1024 * 1024), b""):
            h.update(chunk)
    return h.hexdigest()


def ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def dump_file_path(settings: DumpSettings, table_configuration: TableConfiguration) -> Path:
    return settings.dump_directory / f"{table_configuration.qualified_table_name}.sql"


def write_lines(path: Path, lines: list[str]) -> None:
    """Write one line per entry, replacing any existing file."""
    try:
        ensure_dir(path.parent)
        with path.open("w", encoding="utf-8") as f:
            for line in lines:
                f.write(line + "\n")
    except OSError as e:
        raise LocalStorageError(f"Failed to write dump file: {e}", details={"path": str(path)}) from e


def read_dump_file(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        raise LocalStorageError(f"Failed to read dump file: {e}", details={"path": str(path)}) from e
