"""Byte-stream boundary between core operations and the front ends."""

from __future__ import annotations

import functools
import io
import shutil
from collections.abc import Callable
from dataclasses import dataclass
from typing import BinaryIO, ParamSpec

from memobox.errors import DEFAULT_PREFIX, MaskedError, MemoError

P = ParamSpec("P")


@dataclass
class Pipeline:
    """A producer stream plus an error slot. Exactly one of the two is set."""

    reader: BinaryIO | None = None
    error: MaskedError | None = None

    @classmethod
    def of(cls, payload: bytes) -> Pipeline:
        return cls(reader=io.BytesIO(payload))

    @classmethod
    def failed(cls, err: BaseException, prefix: str = DEFAULT_PREFIX) -> Pipeline:
        if not isinstance(err, MaskedError):
            err = MaskedError(err, prefix)
        return cls(error=err)

    @property
    def ok(self) -> bool:
        return self.error is None

    def read(self) -> bytes:
        """Drain the payload. Empty when the pipeline failed."""
        if self.error is not None or self.reader is None:
            return b""
        return self.reader.read()

    def write_to(self, output: BinaryIO) -> None:
        """Copy the payload to ``output`` followed by one newline.

        Nothing is written when the pipeline carries an error.
        """
        if self.error is not None or self.reader is None:
            return
        shutil.copyfileobj(self.reader, output)
        output.write(b"\n")


def masked(func: Callable[P, bytes]) -> Callable[P, Pipeline]:
    """Turn a bytes-producing operation into one that returns a ``Pipeline``.

    Toolbox errors and I/O errors end up in the error slot; anything else is a
    programming error and propagates.
    """

    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> Pipeline:
        try:
            return Pipeline.of(func(*args, **kwargs))
        except (MemoError, OSError) as e:
            return Pipeline.failed(e)

    return wrapper
