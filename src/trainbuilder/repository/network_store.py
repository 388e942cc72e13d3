from __future__ import annotations

import json
import logging
from pathlib import Path
import re
import tempfile
import threading

from trainbuilder.errors import NotFoundError, StorageError, ValidationError
from trainbuilder.schemas.core import Network


logger = logging.getLogger(__name__)

_ID_RE = re.compile(r"^[A-Za-z0-9-]{1,64}$")


class NetworkStore:
    """
    One JSON document per network under `<networks_dir>/<id>.json`.

    Documents are always read and written whole. Writers go through a temp file
    and `replace()` so a crash never leaves a half-written document behind.
    `lock(id)` hands out one lock per stored network for callers that need a
    load-modify-save cycle to be serialized; unknown ids raise `NotFoundError`.
    """

    def __init__(self, networks_dir: Path) -> None:
        self._dir = Path(networks_dir)
        self._dir.mkdir(parents=True, exist_ok=True)
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    @property
    def dir(self) -> Path:
        return self._dir

    def _path(self, network_id: str) -> Path:
        if not _ID_RE.match(network_id):
            raise NotFoundError("Network not found")
        return self._dir / f"{network_id}.json"

    def lock(self, network_id: str) -> threading.Lock:
        # Locks are only handed out for stored networks so unknown ids never grow the map.
        path = self._path(network_id)
        with self._locks_guard:
            lock = self._locks.get(network_id)
            if lock is None:
                if not path.exists():
                    raise NotFoundError("Network not found")
                lock = threading.Lock()
                self._locks[network_id] = lock
            return lock

    def exists(self, network_id: str) -> bool:
        try:
            return self._path(network_id).exists()
        except NotFoundError:
            return False

    def list_ids(self) -> list[str]:
        return sorted(p.stem for p in self._dir.glob("*.json"))

    def get(self, network_id: str) -> Network:
        path = self._path(network_id)
        if not path.exists():
            raise NotFoundError("Network not found")
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            return Network.from_dict(raw)
        except (OSError, ValueError, KeyError, TypeError, ValidationError) as exc:
            logger.error("Failed to read network %s from %s: %s", network_id, path, exc)
            raise StorageError(f"Failed to load network {network_id}") from exc

    def put(self, network: Network) -> None:
        path = self._path(network.id)
        serialized = json.dumps(network.to_dict(), ensure_ascii=False, indent=2)
        try:
            with tempfile.NamedTemporaryFile(
                "w", delete=False, encoding="utf-8", dir=path.parent, suffix=".tmp"
            ) as tmp:
                tmp.write(serialized)
                tmp_path = Path(tmp.name)
            tmp_path.replace(path)
        except OSError as exc:
            logger.error("Failed to write network %s to %s: %s", network.id, path, exc)
            raise StorageError(f"Failed to save network {network.id}") from exc
