"""Storage ingestion: hash a piped memo, file it and record it in the index."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from memobox.codec import JSON, Codec, Source
from memobox.errors import MaskedError, MemoError
from memobox.index import INDEX_FILE, Index, IndexEntry
from memobox.memo import Memo, content_hash, expand_home, memo_file, resolve_path

logger = logging.getLogger(__name__)


@dataclass
class KeepResult:
    """Outcome of ``keep``. On failure only ``error`` is set."""

    hash: str = ""
    path: Path | None = None
    added: bool = False
    entries: int = 0
    error: MaskedError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def keep(
    source: Source,
    base_path: str,
    index_file: str | Path | None = None,
    *,
    index: Index | None = None,
    codec: Codec = JSON,
) -> KeepResult:
    """Store a memo under ``<base>/<YYYY>/<MM>/<hash>.memo`` and upsert its index entry.

    The memo file is written before the index is stored, so an interrupted run
    can leave an unindexed memo file but never an index entry without a file.
    If anything fails before that point the index file is left untouched.
    """
    if index_file is None:
        index_file = Path(expand_home(base_path)) / INDEX_FILE
    index_path = Path(expand_home(str(index_file)))
    if index is None:
        index = Index(codec=codec)

    try:
        memo = Memo.read(source, codec)
        directory = resolve_path(base_path, memo.modified)
        directory.mkdir(parents=True, exist_ok=True)
        digest = content_hash(memo, codec)
        logger.debug("Hashed memo to %s", digest)

        index.load(index_path)
        entry = IndexEntry(tags=set(memo.tags), path=str(directory), modified=memo.modified)
        added = index.upsert(digest, entry)

        target = memo_file(directory, digest)
        with target.open("wb") as f:
            memo.write(f, codec)

        index_path.parent.mkdir(parents=True, exist_ok=True)
        index.store(index_path)
    except (MemoError, OSError) as e:
        logger.debug("Keeping memo failed: %s", e)
        return KeepResult(error=MaskedError(e))

    logger.info("Stored memo %s at %s (%s)", digest, target, "added" if added else "updated")
    return KeepResult(hash=digest, path=target, added=added, entries=len(index))
