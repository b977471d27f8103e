"""Tests for the pipeline boundary and masked errors."""

from __future__ import annotations

import io

import pytest

from memobox.errors import DecodeError, MaskedError, MemoError
from memobox.pipeline import Pipeline, masked


class TestMaskedError:
    def test_message_has_prefix(self):
        err = MaskedError(DecodeError("bad input"))
        assert str(err) == "✘ error ... bad input"

    def test_custom_prefix(self):
        err = MaskedError(ValueError("x"), prefix="oops: ")
        assert str(err) == "oops: x"

    def test_cause_is_chained(self):
        cause = OSError("disk")
        err = MaskedError(cause)
        assert err.err is cause
        assert err.__cause__ is cause


class TestPipeline:
    def test_write_to_appends_newline(self):
        out = io.BytesIO()
        Pipeline.of(b"payload").write_to(out)
        assert out.getvalue() == b"payload\n"

    def test_failed_writes_nothing(self):
        out = io.BytesIO()
        p = Pipeline.failed(DecodeError("bad"))
        p.write_to(out)
        assert out.getvalue() == b""
        assert not p.ok
        assert p.read() == b""

    def test_failed_keeps_masked_error(self):
        err = MaskedError(DecodeError("bad"))
        assert Pipeline.failed(err).error is err


class TestMasked:
    def test_success(self):
        @masked
        def produce() -> bytes:
            return b"ok"

        assert produce().read() == b"ok"

    def test_toolbox_and_io_errors_masked(self):
        @masked
        def broken(exc: Exception) -> bytes:
            raise exc

        assert isinstance(broken(MemoError("x")).error, MaskedError)
        assert isinstance(broken(FileNotFoundError("f")).error.err, FileNotFoundError)

    def test_programming_errors_propagate(self):
        @masked
        def buggy() -> bytes:
            raise TypeError("bug")

        with pytest.raises(TypeError):
            buggy()
