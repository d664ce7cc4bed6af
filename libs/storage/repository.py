"""File-per-record repository used by the order and subscription stores.

Each record is one ``<id>.json`` file in the repository directory. The
interface is deliberately small (get / list_all / save keyed by id) so the
stores can move to a transactional backend without touching callers.

Writes are not locked: concurrent saves of different ids touch different
files; concurrent saves of the same id are last-writer-wins.
"""

import json
import os
from pathlib import Path
from typing import Generic, Optional, Protocol, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from libs.common.logging import get_logger

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class Repository(Protocol[ModelT]):
    """Minimal keyed store interface."""

    def get(self, record_id: str) -> Optional[ModelT]: ...

    def list_all(self) -> list[ModelT]: ...

    def save(self, record: ModelT) -> ModelT: ...


def is_safe_key(key: str) -> bool:
    """Reject ids/slugs that could escape the store directory."""
    if not key or key.startswith("."):
        return False
    return "/" not in key and "\\" not in key and os.sep not in key


class JsonFileRepository(Generic[ModelT]):
    """Stores pydantic models as pretty-printed JSON, one file per id."""

    model: type[ModelT]
    id_field: str = "id"

    def __init__(self, directory: Path | str, model: type[ModelT] = None):
        self.directory = Path(directory)
        if model is not None:
            self.model = model

    def _ensure_dir(self) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, record_id: str) -> Path:
        return self.directory / f"{record_id}.json"

    def _load(self, path: Path) -> Optional[ModelT]:
        try:
            return self.model.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, ValueError, PydanticValidationError) as e:
            logger.warning("Skipping unreadable record %s: %s", path.name, e)
            return None

    def get(self, record_id: str) -> Optional[ModelT]:
        if not is_safe_key(record_id):
            return None
        path = self._path(record_id)
        if not path.is_file():
            return None
        return self._load(path)

    def list_all(self) -> list[ModelT]:
        """Every readable record; malformed files are skipped, not fatal."""
        if not self.directory.is_dir():
            return []
        records = []
        for path in sorted(self.directory.glob("*.json")):
            record = self._load(path)
            if record is not None:
                records.append(record)
        return records

    def save(self, record: ModelT) -> ModelT:
        record_id = getattr(record, self.id_field)
        if not is_safe_key(record_id):
            raise ValueError(f"Invalid record id: {record_id!r}")
        self._ensure_dir()
        payload = record.model_dump(mode="json", by_alias=True, exclude_none=True)
        self._path(record_id).write_text(
            json.dumps(payload, indent=2), encoding="utf-8"
        )
        return record
