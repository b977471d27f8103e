"""memobox: a pipe-friendly, content-addressed memo toolbox.

Layout:
    ~/.local/share/memo/
    ├── index.dat                      # hash -> {Tags, Path, Modified}
    └── 2022/
        └── 07/
            └── 30b2efc5...af80.memo   # one JSON memo per file, named by content hash
"""

__version__ = "0.1.0"
