"""Memo record, content hashing and the date-partitioned storage layout.

A memo is stored as ``<base>/<YYYY>/<MM>/<sha256>.memo`` where the digest is
taken over the memo's content only, so retagging a memo never changes its
identity.
"""

from __future__ import annotations

import hashlib
import logging
import os
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import IO, Any, BinaryIO

import frontmatter

from memobox.codec import JSON, Codec, Source
from memobox.errors import DecodeError, FormatError
from memobox.pipeline import masked

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%d.%m.%Y %H:%M:%S"
MEMO_SUFFIX = ".memo"


@dataclass
class Memo:
    """One note: its text, its tags and when it was captured."""

    content: str = ""
    tags: list[str] = field(default_factory=list)
    modified: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> Memo:
        if not isinstance(data, dict):
            raise DecodeError(f"memo must be an object, got {type(data).__name__}")
        tags = data.get("Tags") or []
        modified = data.get("Modified") or ""
        content = data.get("Content") or ""
        if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
            raise DecodeError("memo field 'Tags' must be a list of strings")
        if not isinstance(modified, str) or not isinstance(content, str):
            raise DecodeError("memo fields 'Modified' and 'Content' must be strings")
        return cls(content=content, tags=list(tags), modified=modified)

    def to_dict(self) -> dict[str, Any]:
        # An untagged memo is written with "Tags": null, like the original tools.
        return {
            "Tags": list(self.tags) or None,
            "Modified": self.modified,
            "Content": self.content,
        }

    @classmethod
    def read(cls, source: Source, codec: Codec = JSON) -> Memo:
        return cls.from_dict(codec.loads(source))

    def write(self, fp: BinaryIO, codec: Codec = JSON) -> None:
        """Write the memo as a single compact record (the ``.memo`` file format)."""
        fp.write(codec.dumps_line(self.to_dict()))

    def to_json(self, codec: Codec = JSON) -> bytes:
        return codec.dumps(self.to_dict())

    def timestamp(self) -> datetime:
        try:
            return datetime.strptime(self.modified, TIMESTAMP_FORMAT)
        except ValueError as e:
            raise FormatError(
                f"modified {self.modified!r} does not match 'DD.MM.YYYY hh:mm:ss'"
            ) from e


def content_hash(memo: Memo, codec: Codec = JSON) -> str:
    """SHA-256 over the encoded content, as lowercase hex."""
    return hashlib.sha256(codec.dumps_line(memo.content)).hexdigest()


def expand_home(path: str) -> str:
    """Replace a leading ``~`` with ``$HOME``. Left untouched when HOME is unset."""
    if not path.startswith("~"):
        return path
    home = os.environ.get("HOME")
    if not home:
        return path
    return home + path[1:]


def resolve_path(base_path: str, modified: str) -> Path:
    """Directory a memo with the given timestamp belongs in: ``<base>/<YYYY>/<MM>``."""
    created = Memo(modified=modified).timestamp()
    return Path(expand_home(base_path)) / f"{created.year:04d}" / f"{created.month:02d}"


def memo_file(directory: str | Path, digest: str) -> Path:
    return Path(directory) / f"{digest}{MEMO_SUFFIX}"


def _collect(stream: IO[str]) -> str:
    lines = []
    for line in stream:
        lines.append(line.removesuffix("\n").removesuffix("\r") + "\n")
    return "".join(lines)


def _frontmatter_tags(text: str) -> list[str]:
    """Tags from a leading YAML front-matter block. The text itself is not changed."""
    if not text.startswith("---") or not frontmatter.checks(text):
        return []
    try:
        metadata = frontmatter.loads(text).metadata
    except Exception:
        logger.warning("Ignoring unparsable front matter")
        return []
    if "tags" not in metadata:
        return []
    raw = metadata["tags"]
    if isinstance(raw, str):
        return [raw]
    if isinstance(raw, list) and all(isinstance(t, (str, int, float, bool)) for t in raw):
        return [str(t) for t in raw]
    logger.warning("Ignoring front-matter tags of type %s", type(raw).__name__)
    return []


@masked
def capture(stream: IO[str], now: datetime | None = None, codec: Codec = JSON) -> bytes:
    """Build a memo from every line of ``stream``, stamped with the current time.

    A leading front-matter block with a ``tags`` key pre-tags the memo; the
    block stays part of the content.
    """
    content = _collect(stream)
    tags = _frontmatter_tags(content)
    memo = Memo(
        content=content,
        tags=tags,
        modified=(now or datetime.now()).strftime(TIMESTAMP_FORMAT),
    )
    logger.debug("Captured memo with %d chars, tags=%s", len(content), tags)
    return memo.to_json(codec)


@masked
def tag_it(source: Source, tag: str, codec: Codec = JSON) -> bytes:
    """Append ``tag`` to a piped memo. An empty tag leaves the memo as it was."""
    memo = Memo.read(source, codec)
    if tag:
        memo.tags.append(tag)
    return memo.to_json(codec)
