"""Shell output helpers: ANSI styling on real terminals, plain text elsewhere."""

from __future__ import annotations

import os
import sys
from typing import TextIO

RESET = "\033[0m"
BOLD = "\033[1m"
RED = "\033[31m"
GREEN = "\033[32m"
CYAN = "\033[36m"
CLEAR_SCREEN = "\033[2J\033[H"

CHECK_MARK = "✓"


def _is_tty(stream: TextIO) -> bool:
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def color_enabled(stream: TextIO) -> bool:
    if os.environ.get("NO_COLOR") or os.environ.get("TERM") == "dumb":
        return False
    return _is_tty(stream)


def style(text: str, *codes: str, stream: TextIO | None = None) -> str:
    if not codes or not color_enabled(stream or sys.stdout):
        return text
    return "".join(codes) + text + RESET


def print_success(message: str, stream: TextIO | None = None) -> None:
    out = stream or sys.stdout
    print(f"{style(CHECK_MARK, BOLD, GREEN, stream=out)} {message}", file=out)


def print_error(message: str, stream: TextIO | None = None) -> None:
    out = stream or sys.stderr
    print(style(message, RED, stream=out), file=out)


def print_header(message: str, stream: TextIO | None = None) -> None:
    out = stream or sys.stdout
    print(style(message, BOLD, CYAN, stream=out), file=out)


def clear_screen(stream: TextIO | None = None) -> None:
    out = stream or sys.stdout
    if _is_tty(out):
        out.write(CLEAR_SCREEN)
        out.flush()


__all__ = [
    "CLEAR_SCREEN",
    "clear_screen",
    "color_enabled",
    "print_error",
    "print_header",
    "print_success",
    "style",
]
