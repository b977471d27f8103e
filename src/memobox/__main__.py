"""Entry point: python -m memobox <tool> [args]

- memo                          Capture stdin as a new memo
- tagit <tag>                   Tag a piped memo
- keep                          Store and index a piped memo
- from <period>                 Emit index entries of a period ("help" lists periods)
- tagged <tag>...               Keep piped entries carrying all tags
- stdout [short|long|verbose]   Print the memos of piped entries
"""

from __future__ import annotations

import sys

from memobox.cli import from_main, keep_main, memo_main, stdout_main, tagged_main, tagit_main

TOOLS = {
    "memo": memo_main,
    "tagit": tagit_main,
    "keep": keep_main,
    "from": from_main,
    "tagged": tagged_main,
    "stdout": stdout_main,
}


def main(argv: list[str] | None = None) -> None:
    args = sys.argv[1:] if argv is None else argv
    tool = TOOLS.get(args[0]) if args else None
    if tool is None:
        print("Usage: python -m memobox <tool> [args]", file=sys.stderr)
        print(f"  tools: {', '.join(TOOLS)}", file=sys.stderr)
        sys.exit(1)
    tool(args[1:])


if __name__ == "__main__":
    main()
