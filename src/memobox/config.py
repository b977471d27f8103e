"""Configuration loading from environment variables and memo.toml."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from memobox.index import INDEX_FILE
from memobox.memo import expand_home

_DEFAULT_BASE_PATH = "~/.local/share/memo"
_CONFIG_FILENAME = "memo.toml"


@dataclass
class MemoConfig:
    """Top-level toolbox configuration.

    ``base_path`` is kept as written (possibly ``~``-relative); expansion
    happens when a path is resolved.
    """

    base_path: str = _DEFAULT_BASE_PATH
    index_file: str = INDEX_FILE
    log_level: str = "WARNING"

    @property
    def index_path(self) -> Path:
        """Home-expanded index file path; relative names live under ``base_path``."""
        index_file = expand_home(self.index_file)
        if os.path.isabs(index_file):
            return Path(index_file)
        return Path(expand_home(self.base_path)) / index_file


def load_config(config_path: Path | None = None) -> MemoConfig:
    """Load configuration from environment variables and optional memo.toml.

    Priority: environment variables > memo.toml > defaults.
    """
    file_data: dict = {}
    if config_path and config_path.exists():
        file_data = tomllib.loads(config_path.read_text())
    else:
        # Search current dir and ~/.config/memo/
        for candidate in [
            Path.cwd() / _CONFIG_FILENAME,
            Path.home() / ".config" / "memo" / _CONFIG_FILENAME,
        ]:
            if candidate.exists():
                file_data = tomllib.loads(candidate.read_text())
                break

    return MemoConfig(
        base_path=os.getenv("MEMO_BASE_PATH", file_data.get("base_path", _DEFAULT_BASE_PATH)),
        index_file=os.getenv("MEMO_INDEX_FILE", file_data.get("index_file", INDEX_FILE)),
        log_level=os.getenv("MEMO_LOG_LEVEL", file_data.get("log_level", "WARNING")),
    )
