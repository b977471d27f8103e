"""Tests for the command-line front ends."""

from __future__ import annotations

import io
import json
import sys
from pathlib import Path

import pytest

from memobox import cli
from memobox.__main__ import main
from memobox.memo import Memo

HELLO_HASH = "30b2efc5b47dca50dd651d291e52b237f8fe59b98f8996ac234a6ca2a0d4af80"
HELLO = Memo(content="Hello world\n", tags=["test"], modified="09.07.2022 22:26:15")


@pytest.fixture
def base(tmp_path: Path, monkeypatch) -> Path:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("MEMO_BASE_PATH", str(tmp_path / "memo"))
    monkeypatch.delenv("MEMO_INDEX_FILE", raising=False)
    monkeypatch.delenv("MEMO_LOG_LEVEL", raising=False)
    return tmp_path / "memo"


def _stdin(monkeypatch, data: bytes) -> None:
    monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(io.BytesIO(data), encoding="utf-8"))


class TestMemo:
    def test_converts_stdin(self, base: Path, monkeypatch, capsys):
        _stdin(monkeypatch, b"Hello world\n")
        cli.memo_main([])
        out, err = capsys.readouterr()
        memo = Memo.read(out)
        assert memo.content == "Hello world\n"
        assert out.endswith("}\n")
        assert "✓ converted" in err

    def test_reads_utf8_whatever_the_locale(self, base: Path, monkeypatch, capsys):
        data = "héllo\n".encode("utf-8")
        monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(io.BytesIO(data), encoding="latin-1"))
        cli.memo_main([])
        assert Memo.read(capsys.readouterr().out).content == "héllo\n"


class TestTagit:
    def test_tags(self, base: Path, monkeypatch, capsys):
        _stdin(monkeypatch, Memo(content="x\n", modified="09.07.2022 22:26:15").to_json())
        cli.tagit_main(["work"])
        out, err = capsys.readouterr()
        assert Memo.read(out).tags == ["work"]
        assert "✓ tagged ... work" in err

    def test_missing_tag(self, base: Path, capsys):
        with pytest.raises(SystemExit) as exc:
            cli.tagit_main([])
        assert exc.value.code == 1
        assert "forgot the tag" in capsys.readouterr().err

    def test_bad_input(self, base: Path, monkeypatch, capsys):
        _stdin(monkeypatch, b"not json")
        with pytest.raises(SystemExit) as exc:
            cli.tagit_main(["work"])
        assert exc.value.code == 1
        out, err = capsys.readouterr()
        assert out == ""
        assert err.startswith("✘ error ... ")


class TestKeep:
    def test_added_then_updated(self, base: Path, monkeypatch, capsys):
        _stdin(monkeypatch, HELLO.to_json())
        cli.keep_main([])
        err = capsys.readouterr().err
        assert f"✓ hashed ... {HELLO_HASH}" in err
        assert "✓ index ... added, 1 entries now" in err
        assert "✓ stored" in err

        _stdin(monkeypatch, HELLO.to_json())
        cli.keep_main([])
        assert "✓ index ... updated, 1 entries" in capsys.readouterr().err
        assert (base / "2022" / "07" / f"{HELLO_HASH}.memo").exists()

    def test_failure_exits_nonzero(self, base: Path, monkeypatch, capsys):
        _stdin(monkeypatch, b"{")
        with pytest.raises(SystemExit) as exc:
            cli.keep_main([])
        assert exc.value.code == 1
        assert "✘ error ... " in capsys.readouterr().err


class TestQueryChain:
    @pytest.fixture
    def kept(self, base: Path, monkeypatch, capsys) -> Path:
        _stdin(monkeypatch, HELLO.to_json())
        cli.keep_main([])
        capsys.readouterr()
        return base

    def test_from_all(self, kept: Path, capsys):
        cli.from_main(["all"])
        out = capsys.readouterr().out
        assert list(json.loads(out)) == [HELLO_HASH]
        assert out.endswith("}\n")

    def test_from_help(self, base: Path, capsys):
        with pytest.raises(SystemExit) as exc:
            cli.from_main(["help"])
        assert exc.value.code == 0
        err = capsys.readouterr().err
        assert "✓ all (default)" in err
        assert "✘ today" in err

    def test_from_without_args_shows_help(self, base: Path, capsys):
        with pytest.raises(SystemExit) as exc:
            cli.from_main([])
        assert exc.value.code == 0

    def test_from_unknown_period(self, kept: Path, capsys):
        with pytest.raises(SystemExit) as exc:
            cli.from_main(["blub"])
        assert exc.value.code == 1
        out, err = capsys.readouterr()
        assert out == ""
        assert "unknown period blub" in err

    def test_from_missing_index(self, base: Path, capsys):
        with pytest.raises(SystemExit) as exc:
            cli.from_main(["all"])
        assert exc.value.code == 1

    def test_tagged_and_stdout(self, kept: Path, monkeypatch, capsys):
        cli.from_main(["all"])
        index = capsys.readouterr().out.encode()

        _stdin(monkeypatch, index)
        cli.tagged_main(["test"])
        filtered = capsys.readouterr().out.encode()
        assert list(json.loads(filtered)) == [HELLO_HASH]

        _stdin(monkeypatch, filtered)
        cli.stdout_main([])
        assert capsys.readouterr().out == "\nHello world\n\n"

        _stdin(monkeypatch, filtered)
        cli.stdout_main(["verbose"])
        out = capsys.readouterr().out
        assert "Modified: 09.07.2022 22:26:15" in out
        assert "Tags: test" in out

    def test_tagged_without_tags(self, base: Path, capsys):
        with pytest.raises(SystemExit) as exc:
            cli.tagged_main([])
        assert exc.value.code == 1
        assert "forgot any tag" in capsys.readouterr().err


class TestModuleEntry:
    def test_dispatches(self, base: Path, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["from", "help"])
        assert exc.value.code == 0

    def test_unknown_tool(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["frobnicate"])
        assert exc.value.code == 1
        assert "Usage: python -m memobox" in capsys.readouterr().err
