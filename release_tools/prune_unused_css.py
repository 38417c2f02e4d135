#!/usr/bin/env python3
"""
Prune CSS rules whose single class selector is never referenced from JS/TS sources.

Only lines of the form `.name {` (multi-line rule) or `.name { ... }` (one-line rule)
are candidates. Compound (.a.b), pseudo (.a:hover), attribute, descendant and
comma-separated selectors, at-rules, and selectors whose `{` sits on the next line
are always kept.
"""
from __future__ import annotations

import logging
import re
from enum import Enum
from typing import Dict, Iterable, List, Optional, Pattern, Set

from .errors import CleanupError, ErrorCodes
from .file_scan import safe_read_file

logger = logging.getLogger(__name__)

CLASS_RE = re.compile(r"\.([a-zA-Z_][\w-]*)")
SELECTOR_LINE_RE = re.compile(r"^\s*\.([a-zA-Z_][\w-]*)\s*\{[^{}]*\}?\s*$")
QUOTE = "['\"`]"
NOT_QUOTE = "[^'\"`]"


class RuleState(Enum):
    OUTSIDE = "outside"
    INSIDE = "inside"


def extract_css_classes(css_content) -> Set[str]:
    if not isinstance(css_content, str):
        return set()
    return set(CLASS_RE.findall(css_content))


def build_usage_patterns(class_name: str) -> List[Pattern[str]]:
    """Regexes for the ways a class name shows up in application code."""
    n = re.escape(class_name)
    return [
        # 'name' / "name" / `name`
        re.compile(rf"{QUOTE}{n}{QUOTE}"),
        # className="a name b"
        re.compile(rf"className\s*=\s*{QUOTE}{NOT_QUOTE}*\b{n}\b{NOT_QUOTE}*{QUOTE}"),
        # className={cx("a name", x)}
        re.compile(rf"className\s*=\s*\{{[^}}]*{QUOTE}{NOT_QUOTE}*\b{n}\b{NOT_QUOTE}*{QUOTE}[^}}]*\}}"),
        # styles.name (CSS modules)
        re.compile(rf"styles\.{n}\b"),
        # styles['name']
        re.compile(rf"\[{QUOTE}{n}{QUOTE}\]"),
        re.compile(rf"classList\.(?:add|remove|toggle|contains)\s*\({QUOTE}{n}{QUOTE}\)"),
    ]


class ClassUsageChecker:
    """Answers "is this class referenced by any JS/TS file?".

    File contents are read at most once per checker and shared across class
    lookups. A file that cannot be read is treated as not proving usage.
    """

    def __init__(self, js_files: Iterable[str], file_cache: Optional[Dict[str, str]] = None):
        self.js_files = list(js_files)
        self.file_cache = {} if file_cache is None else file_cache
        self._unreadable: Set[str] = set()
        self._verdicts: Dict[str, bool] = {}

    def _content(self, path: str) -> Optional[str]:
        if path in self.file_cache:
            return self.file_cache[path]
        if path in self._unreadable:
            return None
        try:
            text = safe_read_file(path)
        except CleanupError as e:
            logger.debug("skipping unreadable source %s: %s", path, e.message)
            self._unreadable.add(path)
            return None
        self.file_cache[path] = text
        return text

    def is_used(self, class_name: str) -> bool:
        if class_name in self._verdicts:
            return self._verdicts[class_name]
        patterns = build_usage_patterns(class_name)
        used = False
        for path in self.js_files:
            content = self._content(path)
            if content is None:
                continue
            if any(p.search(content) for p in patterns):
                used = True
                break
        self._verdicts[class_name] = used
        return used


def is_class_used_in_js_files(class_name: str, js_files: Iterable[str],
                              file_cache: Optional[Dict[str, str]] = None) -> bool:
    return ClassUsageChecker(js_files, file_cache).is_used(class_name)


def _continues_selector_list(emitted: List[str]) -> bool:
    # `.a,` on the previous line: this selector shares its block
    for prev in reversed(emitted):
        if prev.strip():
            return prev.rstrip().endswith(",")
    return False


def remove_unused_css_classes(css_content: str, js_files: Iterable[str],
                              checker: Optional[ClassUsageChecker] = None) -> str:
    if not isinstance(css_content, str):
        raise CleanupError(
            "Invalid content type for CSS class removal",
            ErrorCodes.INVALID_FILE_CONTENT,
            {"contentType": type(css_content).__name__},
        )
    if checker is None:
        checker = ClassUsageChecker(js_files)

    out: List[str] = []
    state = RuleState.OUTSIDE
    depth = 0
    skip = False

    for line in css_content.split("\n"):
        if state is RuleState.INSIDE:
            if not skip:
                out.append(line)
            depth += line.count("{") - line.count("}")
            if depth <= 0:
                state = RuleState.OUTSIDE
                skip = False
            continue

        m = SELECTOR_LINE_RE.match(line)
        if m and _continues_selector_list(out):
            m = None
        if m:
            class_name = m.group(1)
            one_line = "}" in line
            if not checker.is_used(class_name):
                logger.debug("dropping unused rule .%s", class_name)
                if not one_line:
                    state, depth, skip = RuleState.INSIDE, 1, True
                continue
            out.append(line)
            if not one_line:
                state, depth, skip = RuleState.INSIDE, 1, False
            continue

        out.append(line)
        opened = line.count("{") - line.count("}")
        if opened > 0:
            state, depth, skip = RuleState.INSIDE, opened, False

    return "\n".join(out)


def main():
    from .cleanup_run import run_cli

    run_cli(
        description="Prune CSS rules for classes not referenced in <root>/src JS/TS files",
        tag="PRUNE-CSS",
        strip_logs=False,
    )


if __name__ == "__main__":
    main()
