"""Key-value storage behind the JSON caches.

`FileStore` keeps one pretty-printed JSON document per key under a directory
that is created on first write. `MemoryStore` is a dict with the same surface,
used in tests and for dry runs.
"""
from __future__ import annotations

import json
import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Any, Optional, Protocol

logger = logging.getLogger(__name__)

_UNSAFE_KEY_CHARS = re.compile(r"[^\w.,\- ]+")


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[Any]:
        ...

    def put(self, key: str, value: Any) -> None:
        ...


def safe_key(key: str) -> str:
    """Map an arbitrary cache key onto a single file-name component."""
    cleaned = _UNSAFE_KEY_CHARS.sub("_", key).strip(". ")
    return cleaned or "_"


class FileStore:
    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def path_for(self, key: str) -> Path:
        return self.root / f"{safe_key(key)}.json"

    def get(self, key: str) -> Optional[Any]:
        path = self.path_for(key)
        if not path.exists():
            return None
        with path.open("r", encoding="utf-8") as handle:
            return json.load(handle)

    def put(self, key: str, value: Any) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        path = self.path_for(key)
        # temp file + rename: readers only ever see complete documents
        fd, tmp_name = tempfile.mkstemp(dir=self.root, prefix=".tmp-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(value, handle, indent=2, ensure_ascii=False)
            os.replace(tmp_name, path)
        except Exception:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("Cached %s", path)


class MemoryStore:
    def __init__(self) -> None:
        self.data: dict[str, Any] = {}

    def get(self, key: str) -> Optional[Any]:
        value = self.data.get(key)
        # values are JSON snapshots, callers always get a copy
        return json.loads(json.dumps(value)) if value is not None else None

    def put(self, key: str, value: Any) -> None:
        self.data[key] = json.loads(json.dumps(value))
