"""File storage for whole tables."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from relational_tables.errors import PersistenceFailure

logger = logging.getLogger(__name__)


class TableStore:
    """Saves and loads table state as one file per table in a directory."""

    DEFAULT_DIR = Path("store")
    EXTENSION = ".dbf"

    def __init__(self, data_dir: Path | str | None = None) -> None:
        """Initialize the store.

        Args:
            data_dir: Directory holding table files. Defaults to ``store/``
                relative to the working directory. Created on first save.
        """
        if data_dir is None:
            data_dir = self.DEFAULT_DIR
        self.data_dir = Path(data_dir)

    def path_for(self, name: str) -> Path:
        """Return the file path used for the named table."""
        return self.data_dir / f"{name}{self.EXTENSION}"

    def exists(self, name: str) -> bool:
        return self.path_for(name).is_file()

    def list_tables(self) -> list[str]:
        """List the names of all stored tables."""
        if not self.data_dir.is_dir():
            return []
        return sorted(p.stem for p in self.data_dir.glob(f"*{self.EXTENSION}"))

    def save(self, name: str, state: dict[str, Any]) -> Path:
        """Serialize a table's state to its file.

        Raises:
            PersistenceFailure: If the directory or file cannot be written.
        """
        path = self.path_for(name)
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            with open(path, "w") as f:
                json.dump(state, f, indent=2)
        except (OSError, TypeError, ValueError) as e:
            raise PersistenceFailure(f"save: cannot write table '{name}' to {path}: {e}") from e

        logger.info("saved table '%s' to %s", name, path)
        return path

    def load(self, name: str) -> dict[str, Any]:
        """Read a table's state from its file.

        Raises:
            PersistenceFailure: If the file is missing or cannot be decoded.
        """
        path = self.path_for(name)
        if not path.is_file():
            raise PersistenceFailure(f"load: no stored table '{name}' at {path}")

        try:
            with open(path) as f:
                state = json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise PersistenceFailure(f"load: cannot read table '{name}' from {path}: {e}") from e

        if not isinstance(state, dict):
            raise PersistenceFailure(f"load: {path} does not contain a table")

        logger.info("loaded table '%s' from %s", name, path)
        return state
