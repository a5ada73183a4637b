"""Terminal output helpers for the yojimbo-import CLI.

Color is disabled when stdout is not a TTY or when ``NO_COLOR`` is set.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Mapping
from functools import partial

_COLOR = not os.environ.get("NO_COLOR") and getattr(sys.stdout, "isatty", bool)()


def _ansi(code: str, text: str) -> str:
    return f"\033[{code}m{text}\033[0m" if _COLOR else text


bold = partial(_ansi, "1")
dim = partial(_ansi, "2")
green = partial(_ansi, "32")
yellow = partial(_ansi, "33")
red = partial(_ansi, "31")


def header(title: str) -> None:
    print(f"\n{bold(title)}")


def success(msg: str) -> None:
    print(f"  {green('✓')} {msg}")


def error(msg: str) -> None:
    print(f"  {red('✗')} {msg}", file=sys.stderr)


def info(msg: str) -> None:
    print(f"  {msg}")


def kv(key: str, value: object, indent: int = 2) -> None:
    print(f"{' ' * indent}{dim(f'{key}:')}  {value}")


def histogram(counts: Mapping[str, int], indent: int = 4) -> None:
    """Print ``name  count`` lines, largest first."""
    if not counts:
        return
    width = max(len(k) for k in counts)
    for name, count in sorted(counts.items(), key=lambda item: (-item[1], item[0])):
        print(f"{' ' * indent}{name.ljust(width)}  {count}")
