"""Local File Storage — writes uploaded images under a single upload directory.

Invariants:
    - Every stored file lives directly inside root (no subdirectories)
    - store() never overwrites: collisions get a _1, _2, ... suffix (core/file_rules.py)
    - resolve() returns None for names that would escape root

Design Decisions:
    - Plain filesystem; swapping in object storage means replacing this class only
"""

import logging
from pathlib import Path

from doconnect.core.file_rules import next_available_name, sanitize_file_name

logger = logging.getLogger(__name__)


class LocalFileStorage:
    """Stores image bytes on local disk."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def ensure_root(self) -> None:
        self.root.mkdir(parents=True, exist_ok=True)

    def store(self, original_name: str, data: bytes) -> tuple[str, Path]:
        """Write data under a unique sanitized name. Returns (stored_name, path)."""
        self.ensure_root()
        safe_name = sanitize_file_name(original_name)
        stored_name = next_available_name(
            safe_name, lambda name: (self.root / name).exists(),
        )
        path = self.root / stored_name
        path.write_bytes(data)
        logger.debug(f"Stored upload {original_name!r} as {stored_name!r}")
        return stored_name, path

    def resolve(self, file_name: str) -> Path | None:
        """Map a stored name to its path, or None if it is not a plain file in root."""
        if not file_name or file_name != Path(file_name).name or file_name in (".", ".."):
            return None
        path = self.root / file_name
        if not path.is_file():
            return None
        return path

    def delete(self, file_path: str | Path) -> bool:
        path = Path(file_path)
        try:
            path.unlink()
        except FileNotFoundError:
            logger.warning(f"Stored file already missing: {path}")
            return False
        return True
