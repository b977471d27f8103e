"""Index queries: period filter, tag filter and memo rendering.

Each query returns a ``Pipeline`` whose payload is again an index (or, for
``render``, plain text), so queries chain through pipes::

    from all | tagged work | stdout verbose
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from enum import Enum
from pathlib import Path

from memobox.codec import JSON, Codec, Source
from memobox.errors import UnknownPeriodError, UnreachablePeriodError
from memobox.index import IndexEntry, decode_entries, encode_entries
from memobox.memo import Memo, memo_file
from memobox.pipeline import masked

logger = logging.getLogger(__name__)

Entries = dict[str, IndexEntry]


class Period(str, Enum):
    """Named time windows understood by ``from``."""

    ALL = "all"
    TODAY = "today"
    YESTERDAY = "yesterday"
    THIS_WEEK = "thisweek"
    LAST_WEEK = "lastweek"
    LAST_TWO_WEEKS = "last2weeks"
    THIS_MONTH = "thismonth"
    LAST_MONTH = "lastmonth"
    LAST_TWO_MONTHS = "last2months"
    THIS_YEAR = "thisyear"
    LAST_YEAR = "lastyear"
    LAST_TWO_YEARS = "last2years"

    @classmethod
    def parse(cls, value: str | Period) -> Period:
        try:
            return cls(value)
        except ValueError:
            raise UnknownPeriodError(f"unknown period {value}") from None

    @property
    def implemented(self) -> bool:
        return self in _PERIOD_FILTERS


class Verbosity(str, Enum):
    SHORT = "short"
    LONG = "long"
    VERBOSE = "verbose"


# Only "all" has a filter so far; calendar windows still need a decision on
# week start and on whether "last2weeks" includes the current week.
_PERIOD_FILTERS: dict[Period, Callable[[Entries], Entries]] = {
    Period.ALL: lambda entries: entries,
}


@masked
def query_by_period(period: str | Period, index_file: str | Path, codec: Codec = JSON) -> bytes:
    """Read the index file and keep the entries that fall into ``period``."""
    period = Period.parse(period)
    with open(index_file, "rb") as f:
        entries = decode_entries(f, codec)

    period_filter = _PERIOD_FILTERS.get(period)
    if period_filter is None:
        raise UnreachablePeriodError(f"period {period.value!r} is not implemented yet")
    found = period_filter(entries)
    logger.debug("Period %s kept %d of %d entries", period.value, len(found), len(entries))
    return encode_entries(found, codec)


@masked
def query_by_tags(source: Source, tags: str | Iterable[str], codec: Codec = JSON) -> bytes:
    """Keep the piped index entries carrying every one of ``tags``. A bare string is one tag."""
    required = {tags} if isinstance(tags, str) else set(tags)
    entries = decode_entries(source, codec)
    found = {key: entry for key, entry in entries.items() if entry.has_tags(required)}
    logger.debug("Tags %s kept %d of %d entries", sorted(required), len(found), len(entries))
    return encode_entries(found, codec)


def _format(memo: Memo, verbosity: str) -> str:
    if verbosity == Verbosity.LONG:
        return f"\n{memo.modified}\n{memo.content}"
    if verbosity == Verbosity.VERBOSE:
        return f"\nModified: {memo.modified}\nTags: {', '.join(memo.tags)}\nMemo: {memo.content}"
    return f"\n{memo.content}"


@masked
def render(
    source: Source,
    verbosity: str | Verbosity = Verbosity.SHORT,
    codec: Codec = JSON,
) -> bytes:
    """Load the memos referenced by a piped index and print them.

    ``short`` shows the content, ``long`` adds the timestamp and ``verbose``
    labels every field. Unknown verbosities fall back to ``short``. A missing
    memo file fails the whole render.
    """
    entries = decode_entries(source, codec)
    memos = []
    for key, entry in entries.items():
        with open(memo_file(entry.path, key), "rb") as f:
            memos.append(Memo.read(f, codec))
    return "".join(_format(memo, verbosity) for memo in memos).encode("utf-8")
