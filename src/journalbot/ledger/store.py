"""
Document stores backing the journals.

What it does:
- `JsonFileStore` reads and overwrites one JSON document on disk. Writes go to a
  temp file in the same directory followed by `os.replace`, so an interrupted
  write leaves the previous document in place.
- `MemoryStore` keeps the document in memory and records every call, which lets
  tests assert load/save ordering without touching the filesystem.

There is no locking: two processes writing the same file concurrently end in
last-writer-wins.
"""

from __future__ import annotations

import copy
import json
import os
import tempfile
from typing import Any, Dict, List, Optional, Protocol, Tuple

from .errors import StorageFailure


Document = Dict[str, Any]


class DocumentStore(Protocol):
    def load(self) -> Optional[Any]:
        ...

    def save(self, doc: Any) -> None:
        ...


class JsonFileStore:
    def __init__(self, path: str):
        self.path = path

    def load(self) -> Optional[Any]:
        if not os.path.exists(self.path):
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            raise StorageFailure(self.path, f"read failed: {e}") from e

    def save(self, doc: Any) -> None:
        parent = os.path.dirname(os.path.abspath(self.path))
        tmp_path = None
        try:
            os.makedirs(parent, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=".tmp-", suffix=".json", dir=parent)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(doc, f, indent=2, ensure_ascii=False)
                f.write("\n")
            os.replace(tmp_path, self.path)
        except (OSError, TypeError, ValueError) as e:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise StorageFailure(self.path, f"write failed: {e}") from e

    def __repr__(self) -> str:
        return f"JsonFileStore({self.path!r})"


class MemoryStore:
    def __init__(self, doc: Optional[Any] = None):
        self.doc = copy.deepcopy(doc)
        self.calls: List[Tuple[str, Any]] = []

    def load(self) -> Optional[Any]:
        self.calls.append(("load", None))
        return copy.deepcopy(self.doc)

    def save(self, doc: Any) -> None:
        # Round-trip through JSON so tests see exactly what a file would hold
        self.doc = json.loads(json.dumps(doc))
        self.calls.append(("save", copy.deepcopy(self.doc)))

    @property
    def saves(self) -> int:
        return sum(1 for name, _ in self.calls if name == "save")
