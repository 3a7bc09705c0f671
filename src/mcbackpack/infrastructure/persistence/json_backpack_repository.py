"""JSON-file-backed implementation of BackpackRepository.

Each backpack lives in its own file, named after the percent-encoded
uuid, so writes to different backpacks never touch the same file.
Writes go to a temporary file in the same directory which is fsynced and
then renamed over the target; readers see either the old or the new
record, never a partial one.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from urllib.parse import quote, unquote

from mcbackpack.domain.exceptions import StorageError, ValidationError
from mcbackpack.domain.model.backpack import BackpackData
from mcbackpack.domain.repository.backpack_repository import BackpackRepository

logger = logging.getLogger(__name__)

_SUFFIX = ".json"
_TMP_PREFIX = ".tmp-"


class JsonBackpackRepository(BackpackRepository):

    def __init__(self, directory: Path) -> None:
        self._directory = directory
        self._ensure_directory()

    # --- BackpackRepository interface -----------------------------------------

    def get_by_id(self, uuid: str) -> BackpackData | None:
        path = self._path_for(uuid)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            logger.error("Failed to read backpack file %s: %s", path, exc)
            raise StorageError(f"Could not read backpack '{uuid}'") from exc
        return self._to_domain(text, path)

    def save(self, backpack: BackpackData) -> None:
        path = self._path_for(backpack.uuid)
        payload = json.dumps(self._to_raw(backpack), indent=2) + "\n"
        try:
            self._atomic_write(path, payload)
        except OSError as exc:
            logger.error("Failed to write backpack file %s: %s", path, exc)
            raise StorageError(f"Could not save backpack '{backpack.uuid}'") from exc

    def list_ids(self) -> list[str]:
        try:
            names = [
                p.name for p in self._directory.iterdir()
                if p.name.endswith(_SUFFIX) and not p.name.startswith(_TMP_PREFIX)
            ]
        except OSError as exc:
            raise StorageError(f"Could not list {self._directory}") from exc
        return sorted(unquote(name[: -len(_SUFFIX)]) for name in names)

    def close(self) -> None:
        # Files are opened per call; nothing is held between operations.
        logger.debug("JSON backpack repository at %s closed", self._directory)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(backpack: BackpackData) -> dict:
        return {
            "uuid": backpack.uuid,
            "texture": backpack.texture,
            "pwd_hash": backpack.pwd_hash,
            "size": backpack.size,
            "content": backpack.content,
        }

    @staticmethod
    def _to_domain(text: str, path: Path) -> BackpackData:
        try:
            raw = json.loads(text)
            return BackpackData(
                uuid=raw["uuid"],
                texture=raw["texture"],
                pwd_hash=raw.get("pwd_hash") or "",
                size=raw["size"],
                content=raw.get("content"),
            )
        except (ValueError, KeyError, TypeError, ValidationError) as exc:
            logger.error("Corrupt backpack file %s: %s", path, exc)
            raise StorageError(f"Corrupt backpack file: {path.name}") from exc

    # --- File helpers ---------------------------------------------------------

    def _path_for(self, uuid: str) -> Path:
        # quote() with no safe characters also encodes "/", so every uuid
        # maps to a single file inside the directory.
        return self._directory / (quote(uuid, safe="") + _SUFFIX)

    def _atomic_write(self, path: Path, payload: str) -> None:
        fd, tmp_name = tempfile.mkstemp(prefix=_TMP_PREFIX, suffix=_SUFFIX, dir=self._directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        self._sync_directory()

    def _sync_directory(self) -> None:
        # The rename itself is only durable once the directory entry is flushed.
        if os.name != "posix":
            return
        dir_fd = os.open(self._directory, os.O_RDONLY)
        try:
            os.fsync(dir_fd)
        finally:
            os.close(dir_fd)

    def _ensure_directory(self) -> None:
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError(f"Could not create data directory {self._directory}") from exc
