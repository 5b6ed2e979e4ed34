"""
Loads class file buffers from disk: single .class files or .jar/.zip archives.
"""

import zipfile
from pathlib import Path
from typing import Iterator

ARCHIVE_SUFFIXES = (".jar", ".zip")


def _check_file(path: Path):
    if not path.exists():
        raise FileNotFoundError(f"{path} does not exist")
    if not path.is_file():
        raise IsADirectoryError(f"{path} is not a file")


def read_class_bytes(path: str | Path) -> bytes:
    """Read a whole file into memory."""
    path = Path(path)
    _check_file(path)
    return path.read_bytes()


def iter_class_entries(path: str | Path) -> Iterator[tuple[str, bytes]]:
    """Yield (name, data) for a class file or for every class in an archive."""
    path = Path(path)
    if path.suffix not in ARCHIVE_SUFFIXES:
        yield str(path), read_class_bytes(path)
        return

    _check_file(path)
    with zipfile.ZipFile(path, "r") as zf:
        for name in sorted(zf.namelist()):
            if name.endswith(".class"):
                yield f"{path}!{name}", zf.read(name)
