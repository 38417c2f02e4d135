#!/usr/bin/env python3
"""
Strip console.log(...) calls from JS/TS sources under <root>/src.

Arguments may nest parentheses two levels deep, e.g. console.log(fn(a, g(b))).
Deeper nesting is left untouched on purpose: the call is only removed when the
whole expression can be matched.
"""
from __future__ import annotations

import re

from .errors import CleanupError, ErrorCodes

CONSOLE_LOG_TOKEN = "console.log"

# args := (non-paren | "(" (non-paren | "(" non-paren* ")")* ")")*
CONSOLE_LOG_RE = re.compile(
    r"console\.log\s*\((?:[^)(]|\((?:[^)(]|\([^)(]*\))*\))*\)\s*;?\s*\n?"
)
BLANK_LINE_RE = re.compile(r"^\s*\n", re.M)
NEWLINE_RUN_RE = re.compile(r"\n{3,}")


def _blank_line(m: re.Match) -> str:
    # keep the run's own line terminator so CRLF files stay CRLF
    return "\r\n" if m.group(0).endswith("\r\n") else "\n"


def remove_console_logs(content: str) -> str:
    if not isinstance(content, str):
        raise CleanupError(
            "Invalid content type for console log removal",
            ErrorCodes.INVALID_FILE_CONTENT,
            {"contentType": type(content).__name__},
        )
    if CONSOLE_LOG_TOKEN not in content:
        return content

    result = CONSOLE_LOG_RE.sub("", content)
    result = BLANK_LINE_RE.sub(_blank_line, result)
    result = NEWLINE_RUN_RE.sub("\n\n", result)
    return result


def count_console_logs(content: str) -> int:
    # Raw token count; also counts the token inside strings/comments
    return content.count(CONSOLE_LOG_TOKEN)


def main():
    from .cleanup_run import run_cli

    run_cli(
        description="Strip console.log calls from <root>/src JS/TS files",
        tag="STRIP-LOG",
        prune_css=False,
    )


if __name__ == "__main__":
    main()
