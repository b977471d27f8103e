"""Flat index mapping content hashes to memo metadata.

On disk the index is one JSON object keyed by hash::

    {
        "30b2ef...": {
            "Tags": {"test": true},
            "Path": "/home/me/.local/share/memo/2022/07",
            "Modified": "09.07.2022 22:26:15"
        }
    }

Tags are a set, encoded as an object with ``true`` values.
"""

from __future__ import annotations

import logging
import os
import stat
import tempfile
import threading
from collections.abc import Iterable, Iterator
from contextlib import AbstractContextManager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from memobox.codec import JSON, Codec, Source
from memobox.errors import DecodeError, NotFoundError

logger = logging.getLogger(__name__)

INDEX_FILE = "index.dat"


def _file_mode(target: Path) -> int:
    """Mode for a rewritten file: the old file's, else 0666 minus the umask."""
    try:
        return stat.S_IMODE(target.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


@dataclass
class IndexEntry:
    """Metadata for one stored memo. ``path`` is the directory, not the file."""

    tags: set[str] = field(default_factory=set)
    path: str = ""
    modified: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> IndexEntry:
        if not isinstance(data, dict):
            raise DecodeError(f"index entry must be an object, got {type(data).__name__}")
        tags = data.get("Tags") or {}
        path = data.get("Path") or ""
        modified = data.get("Modified") or ""
        if not isinstance(tags, dict):
            raise DecodeError("index field 'Tags' must be an object of booleans")
        if not isinstance(path, str) or not isinstance(modified, str):
            raise DecodeError("index fields 'Path' and 'Modified' must be strings")
        return cls(
            tags={tag for tag, present in tags.items() if present is True},
            path=path,
            modified=modified,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "Tags": {tag: True for tag in sorted(self.tags)},
            "Path": self.path,
            "Modified": self.modified,
        }

    def has_tags(self, required: Iterable[str]) -> bool:
        return self.tags.issuperset(required)


def decode_entries(source: Source, codec: Codec = JSON) -> dict[str, IndexEntry]:
    data = codec.loads(source)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise DecodeError(f"index must be an object, got {type(data).__name__}")
    return {key: IndexEntry.from_dict(value) for key, value in data.items()}


def encode_entries(entries: dict[str, IndexEntry], codec: Codec = JSON) -> bytes:
    return codec.dumps({key: entries[key].to_dict() for key in sorted(entries)})


class Index:
    """In-memory index with load/store to a single file.

    ``load`` and ``store`` hold ``lock`` for their whole duration. The lock only
    serializes access inside one process; separate processes are not coordinated.
    """

    def __init__(
        self,
        lock: AbstractContextManager[Any] | None = None,
        codec: Codec | None = None,
    ) -> None:
        self._entries: dict[str, IndexEntry] = {}
        self._lock = lock if lock is not None else threading.Lock()
        self._codec = codec or JSON

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    @property
    def entries(self) -> dict[str, IndexEntry]:
        return dict(self._entries)

    def load(self, path: str | Path) -> None:
        """Merge the entries stored at ``path``. A missing file counts as empty."""
        with self._lock:
            try:
                data = Path(path).read_bytes()
            except FileNotFoundError:
                logger.info("No index at %s yet, starting empty", path)
                return
            self._entries.update(decode_entries(data, self._codec))
        logger.debug("Loaded %d index entries from %s", len(self._entries), path)

    def store(self, path: str | Path) -> None:
        """Overwrite ``path`` with all entries via a temp file and rename."""
        target = Path(path)
        with self._lock:
            payload = encode_entries(self._entries, self._codec)
            fd, tmp = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "wb") as f:
                    os.fchmod(f.fileno(), _file_mode(target))
                    f.write(payload)
                os.replace(tmp, target)
            except BaseException:
                Path(tmp).unlink(missing_ok=True)
                raise
        logger.debug("Stored %d index entries to %s", len(self._entries), target)

    def upsert(self, key: str, entry: IndexEntry) -> bool:
        """Insert or replace. Returns True if ``key`` was new."""
        added = key not in self._entries
        self._entries[key] = entry
        return added

    def find(self, key: str) -> IndexEntry:
        """Entry for ``key``, or an empty entry (``path == ""``) if absent."""
        return self._entries.get(key, IndexEntry())

    def delete(self, key: str) -> None:
        if key not in self._entries:
            raise NotFoundError(f"index entry for key {key} does not exist")
        del self._entries[key]
