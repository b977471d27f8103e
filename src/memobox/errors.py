"""Error taxonomy for the memo toolbox.

Core operations raise the typed errors below; the pipeline layer wraps whatever
surfaced into a ``MaskedError`` so front ends only deal with one error value.
"""

from __future__ import annotations

DEFAULT_PREFIX = "✘ error ... "


class MemoError(Exception):
    """Base class for memo toolbox errors."""


class DecodeError(MemoError, ValueError):
    """Malformed JSON in memo or index input."""


class EncodeError(MemoError, ValueError):
    """A value could not be serialized."""


class NotFoundError(MemoError, LookupError):
    """An index entry is missing."""


class FormatError(MemoError, ValueError):
    """A timestamp does not match the fixed ``DD.MM.YYYY hh:mm:ss`` pattern."""


class UnknownPeriodError(MemoError, ValueError):
    """The period keyword is not one of the known periods."""


class UnreachablePeriodError(MemoError, NotImplementedError):
    """A validated period has no filter behind it."""


class MaskedError(Exception):
    """An error carrying a human-facing prefix plus its underlying cause."""

    def __init__(self, err: BaseException, prefix: str = DEFAULT_PREFIX) -> None:
        super().__init__(prefix, err)
        self.prefix = prefix
        self.err = err
        self.__cause__ = err

    def __str__(self) -> str:
        return f"{self.prefix}{self.err}"
