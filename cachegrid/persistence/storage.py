"""SaveFile — durable storage for the game blob.

Writes go to a temporary file in the same directory and are moved into
place with ``os.replace`` so a crash mid-write never leaves a truncated
save behind.  Every OS failure surfaces as
``PersistenceUnavailableError``; deciding to carry on with in-memory
state is the caller's job.
"""

from __future__ import annotations

import os
from pathlib import Path
from tempfile import NamedTemporaryFile

from cachegrid.game.errors import PersistenceUnavailableError


class SaveFile:
    """A single JSON save file on disk.

    Attributes:
        path: Location of the save file.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def read(self) -> str | None:
        """Return the stored blob, or None if nothing has been saved.

        Raises:
            PersistenceUnavailableError: If the file exists but cannot be read.
        """
        try:
            return self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            msg = f"cannot read save file {self.path}: {exc}"
            raise PersistenceUnavailableError(msg) from exc

    def write(self, blob: str) -> None:
        """Atomically replace the stored blob.

        Raises:
            PersistenceUnavailableError: If the blob cannot be written.
        """
        temp_path: Path | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=self.path.parent,
                delete=False,
                suffix=".tmp",
            ) as temp_file:
                temp_path = Path(temp_file.name)
                temp_file.write(blob)
                temp_file.flush()
                os.fsync(temp_file.fileno())
            os.replace(temp_path, self.path)
        except OSError as exc:
            if temp_path is not None:
                temp_path.unlink(missing_ok=True)
            msg = f"cannot write save file {self.path}: {exc}"
            raise PersistenceUnavailableError(msg) from exc

    def clear(self) -> None:
        """Delete the stored blob, if any.

        Raises:
            PersistenceUnavailableError: If the file cannot be removed.
        """
        try:
            self.path.unlink(missing_ok=True)
        except OSError as exc:
            msg = f"cannot remove save file {self.path}: {exc}"
            raise PersistenceUnavailableError(msg) from exc
