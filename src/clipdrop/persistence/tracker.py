# ABOUTME: Tracks the working directories minted for clipboard extractions
# ABOUTME: Persists the live directory list as JSON and owns their deletion

import shutil
import uuid
from pathlib import Path

from pydantic import BaseModel, TypeAdapter, ValidationError

from clipdrop.config import Config, get_config
from clipdrop.utils.logging import get_logger


class TrackedDirectory(BaseModel):
    """One persisted working directory entry."""

    directory: str


_ENTRIES = TypeAdapter(list[TrackedDirectory])


def normalize_path(path: Path | str) -> str:
    """Absolute path without a trailing separator, used as the identity of an entry."""
    return str(Path(path).expanduser().absolute()).rstrip("/\\") or "/"


class DirectoryTracker:
    """Creates working directories, remembers them across runs, and deletes them on request."""

    def __init__(self, state_file: Path | None = None, root: Path | None = None, config: Config | None = None):
        config = config or get_config()
        self.state_file = Path(state_file or config.state_file)
        self.root = Path(root or config.directory_root)
        self.logger = get_logger(__name__)

    def create_directory(self) -> Path:
        """Mint a fresh, empty directory under the root and start tracking it."""
        path = self.root / uuid.uuid4().hex[8:16]
        path.mkdir(parents=True, exist_ok=False)
        self.add(path)
        self.logger.info("Created working directory", directory=str(path))
        return path

    def list_directories(self) -> list[Path]:
        return [Path(entry.directory) for entry in self._load()]

    def add(self, path: Path) -> list[Path]:
        entries = self._load()
        entries.append(TrackedDirectory(directory=normalize_path(path)))
        self._save(entries)
        return self.list_directories()

    def remove(self, path: Path) -> list[Path]:
        key = normalize_path(path)
        self._save([entry for entry in self._load() if entry.directory != key])
        return self.list_directories()

    def prune(self) -> list[Path]:
        """Forget directories that no longer exist on disk."""
        entries = self._load()
        alive = [entry for entry in entries if Path(entry.directory).is_dir()]
        if len(alive) != len(entries):
            self.logger.info("Pruned missing working directories", removed=len(entries) - len(alive))
            self._save(alive)
        return [Path(entry.directory) for entry in alive]

    def delete_directory(self, path: Path) -> bool:
        """Delete a working directory tree; a directory that is already gone counts as deleted."""
        try:
            if Path(path).exists():
                shutil.rmtree(path)
        except OSError as e:
            self.logger.error("Failed to delete working directory", directory=str(path), error=str(e))
            return False

        self.remove(path)
        self.logger.info("Deleted working directory", directory=str(path))
        return True

    def flush(self) -> list[Path]:
        """Delete every tracked directory.

        Returns:
            Directories that could not be deleted and stay tracked
        """
        remaining = [path for path in self.list_directories() if not self.delete_directory(path)]
        self._save([TrackedDirectory(directory=normalize_path(path)) for path in remaining])
        return remaining

    def _load(self) -> list[TrackedDirectory]:
        try:
            if self.state_file.exists():
                return _ENTRIES.validate_json(self.state_file.read_bytes())
        except (OSError, ValidationError) as e:
            self.logger.error("Error reading state file", state_file=str(self.state_file), error=str(e))
        return []

    def _save(self, entries: list[TrackedDirectory]) -> None:
        unique: dict[str, TrackedDirectory] = {}
        for entry in entries:
            key = normalize_path(entry.directory)
            unique.setdefault(key, TrackedDirectory(directory=key))

        try:
            self.state_file.parent.mkdir(parents=True, exist_ok=True)
            self.state_file.write_bytes(_ENTRIES.dump_json(list(unique.values())))
        except OSError as e:
            self.logger.error("Error saving state file", state_file=str(self.state_file), error=str(e))
