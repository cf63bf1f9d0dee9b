"""Upload Rules — image validation and stored-name derivation.

Invariants:
    - Empty files are skipped (should_store returns False), never rejected
    - Oversized files and disallowed extensions raise FileValidationError
    - Stored names never contain path separators or spaces
    - next_available_name never returns a name for which exists() is True

Design Decisions:
    - exists is injected as a callable so name collision logic stays IO-free
"""

import re
from collections.abc import Callable, Iterable
from pathlib import PurePath

from doconnect.core.errors import FileValidationError


DEFAULT_ALLOWED_EXTENSIONS: tuple[str, ...] = (".jpg", ".jpeg", ".png", ".gif", ".bmp")
DEFAULT_MAX_FILE_SIZE: int = 5 * 1024 * 1024

_INVALID_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f\s]')


def file_extension(file_name: str) -> str:
    return PurePath(file_name).suffix.lower()


def should_store(size: int) -> bool:
    return size > 0


def validate_image_upload(
    file_name: str,
    size: int,
    max_size: int = DEFAULT_MAX_FILE_SIZE,
    allowed_extensions: Iterable[str] = DEFAULT_ALLOWED_EXTENSIONS,
) -> None:
    if size > max_size:
        raise FileValidationError(
            f"File {file_name} exceeds maximum size of {max_size // (1024 * 1024)}MB",
            file_name,
        )
    extension = file_extension(file_name)
    if extension not in {ext.lower() for ext in allowed_extensions}:
        raise FileValidationError(
            f"File type {extension or '(none)'} is not allowed", file_name,
        )


def sanitize_file_name(file_name: str) -> str:
    """Drop any directory part and replace characters unsafe in names or URLs."""
    base = re.split(r"[\\/]", file_name)[-1]
    safe = _INVALID_CHARS.sub("_", base).lstrip(".")
    return safe or "upload"


def next_available_name(file_name: str, exists: Callable[[str], bool]) -> str:
    """Return file_name, or file_name with _1, _2, ... appended to the stem."""
    if not exists(file_name):
        return file_name
    path = PurePath(file_name)
    stem, suffix = path.stem, path.suffix
    counter = 1
    while True:
        candidate = f"{stem}_{counter}{suffix}"
        if not exists(candidate):
            return candidate
        counter += 1
