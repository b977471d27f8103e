"""Front ends of the toolbox. Each reads stdin, writes stdout, reports on stderr.

Capture chain:  ``memo | tagit <tag> | keep``
Query chain:    ``from <period> | tagged <tag>... | stdout [short|long|verbose]``
"""

from __future__ import annotations

import io
import logging
import sys
from typing import IO, NoReturn

from memobox.config import load_config
from memobox.keep import keep
from memobox.memo import capture, tag_it
from memobox.pipeline import Pipeline
from memobox.query import Period, Verbosity, query_by_period, query_by_tags, render

logger = logging.getLogger(__name__)

_OK = "✓"
_NO = "✘"


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


def _args(argv: list[str] | None) -> list[str]:
    return sys.argv[1:] if argv is None else argv


def _stdin():
    return getattr(sys.stdin, "buffer", sys.stdin)


def _text_stdin() -> IO[str]:
    """stdin decoded as UTF-8 whatever the locale, matching the byte readers."""
    buffer = getattr(sys.stdin, "buffer", None)
    if buffer is None:
        return sys.stdin
    return io.TextIOWrapper(buffer, encoding="utf-8")


def _fail(message: object) -> NoReturn:
    print(message, file=sys.stderr)
    sys.exit(1)


def _emit(pipeline: Pipeline) -> None:
    """Copy a pipeline to stdout, or report its error and exit 1."""
    if pipeline.error is not None:
        _fail(pipeline.error)
    out = sys.stdout.buffer
    pipeline.write_to(out)
    out.flush()


def _from_usage() -> str:
    lines = [
        "",
        "FROM is part of the memo toolbox",
        "--------------------------------",
        "Usage: from <period> | further tools",
        "",
        "It reads the memo index and filters its entries by a period of time. The",
        "periods are described verbally. Dates or timestamps are not supported.",
        "",
        "Supported periods ...",
    ]
    for period in Period:
        mark = _OK if period.implemented else _NO
        suffix = " (default)" if period is Period.ALL else ""
        lines.append(f"  {mark} {period.value}{suffix}")
    lines += [
        "",
        "Tool chains of the toolbox ...",
        "  ... memo, tagit, keep",
        "  ... from, tagged, stdout",
        "",
    ]
    return "\n".join(lines)


def memo_main(argv: list[str] | None = None) -> None:
    """memo: turn stdin into a timestamped memo."""
    config = load_config()
    _setup_logging(config.log_level)
    _emit(capture(_text_stdin()))
    print(f"{_OK} converted", file=sys.stderr)


def tagit_main(argv: list[str] | None = None) -> None:
    """tagit <tag>: add a tag to a piped memo."""
    args = _args(argv)
    if not args:
        _fail("Sorry ... maybe you forgot the tag?")
    config = load_config()
    _setup_logging(config.log_level)
    tag = args[0]
    _emit(tag_it(_stdin(), tag))
    print(f"{_OK} tagged ... {tag}", file=sys.stderr)


def keep_main(argv: list[str] | None = None) -> None:
    """keep: store a piped memo and index it."""
    config = load_config()
    _setup_logging(config.log_level)
    result = keep(_stdin(), config.base_path, config.index_path)
    if result.error is not None:
        _fail(result.error)
    print(f"{_OK} hashed ... {result.hash}", file=sys.stderr)
    if result.added:
        print(f"{_OK} index ... added, {result.entries} entries now", file=sys.stderr)
    else:
        print(f"{_OK} index ... updated, {result.entries} entries", file=sys.stderr)
    print(f"{_OK} stored", file=sys.stderr)


def from_main(argv: list[str] | None = None) -> None:
    """from <period>: emit the index entries of a period."""
    args = _args(argv)
    period = args[0] if args else "help"
    if period == "help":
        print(_from_usage(), file=sys.stderr)
        sys.exit(0)
    config = load_config()
    _setup_logging(config.log_level)
    _emit(query_by_period(period, config.index_path))


def tagged_main(argv: list[str] | None = None) -> None:
    """tagged <tag>...: keep piped index entries carrying all tags."""
    args = _args(argv)
    if not args:
        _fail("Sorry ... maybe you forgot any tag?")
    config = load_config()
    _setup_logging(config.log_level)
    _emit(query_by_tags(_stdin(), args))


def stdout_main(argv: list[str] | None = None) -> None:
    """stdout [short|long|verbose]: print the memos of a piped index."""
    args = _args(argv)
    verbosity = args[0] if args else Verbosity.SHORT.value
    config = load_config()
    _setup_logging(config.log_level)
    _emit(render(_stdin(), verbosity))
