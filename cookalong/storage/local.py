"""Guest favorites persisted on this device.

A single JSON list of recipes under a fixed well-known path, fully
overwritten on each mutation. Read problems (missing file, corrupt JSON,
invalid entries) are logged and treated as an empty list; write problems
raise LocalStorageError so the caller can roll back.
"""

import json
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from cookalong.models.errors import LocalStorageError
from cookalong.models.models import Recipe
from cookalong.utils.config import config
from cookalong.utils.logger import logger


class GuestFavoritesFile:
    """Guest favorites list stored as JSON on disk."""

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = Path(path) if path is not None else config.GUEST_FAVORITES_PATH

    def read(self) -> list[Recipe]:
        if not self.path.exists():
            return []

        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Error reading guest favorites from {self.path}: {e}")
            return []

        if not isinstance(raw, list):
            logger.warning(f"Guest favorites file {self.path} does not contain a list, ignoring it")
            return []

        recipes = []
        for entry in raw:
            try:
                recipes.append(Recipe.from_record(entry))
            except ValidationError as e:
                logger.warning(f"Skipping invalid guest favorite entry: {e.error_count()} error(s)")
        return recipes

    def write(self, recipes: list[Recipe]) -> None:
        """Overwrite the stored list.

        Raises:
            LocalStorageError: If the file cannot be written.
        """
        payload = json.dumps([r.to_record() for r in recipes], ensure_ascii=False)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp_path.write_text(payload, encoding="utf-8")
            tmp_path.replace(self.path)
        except OSError as e:
            logger.warning(f"Error writing guest favorites to {self.path}: {e}")
            raise LocalStorageError(f"Could not write guest favorites: {e}", cause=e) from e

    def clear(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Error clearing guest favorites at {self.path}: {e}")
