#!/usr/bin/env python3
"""
Release step 3: source cleanup.

Strips console.log calls from <root>/src/**/*.{js,jsx,ts,tsx} and prunes CSS rules
for classes that no script references, then reports what changed:

  python -m release_tools.cleanup_run --root path/to/project [--dry-run] [--json]

Only files whose content actually changes are rewritten. Per-file failures are
collected in the returned stats and never stop the batch; an invalid project root
aborts before any file is touched.
"""
from __future__ import annotations

import argparse
import json
import logging
import os
import stat
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

from .errors import CleanupError, ErrorCodes, error_record
from .file_scan import CSS_EXTENSIONS, JS_EXTENSIONS, get_all_files, safe_read_file, safe_write_file
from .prune_unused_css import ClassUsageChecker, extract_css_classes, remove_unused_css_classes
from .strip_console_logs import count_console_logs, remove_console_logs

logger = logging.getLogger(__name__)


@dataclass
class CleanupStats:
    console_logs_removed: int = 0
    css_classes_removed: int = 0
    files_processed: int = 0
    errors: List[Dict[str, Any]] = field(default_factory=list)
    warnings: List[Dict[str, Any]] = field(default_factory=list)
    # resolved project root; None when validation failed
    root: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "consoleLogsRemoved": self.console_logs_removed,
            "cssClassesRemoved": self.css_classes_removed,
            "filesProcessed": self.files_processed,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
        }


def validate_project_root(project_root) -> Path:
    if not project_root:
        raise CleanupError(
            "Project root path is required", ErrorCodes.INVALID_PROJECT_ROOT, {"provided": project_root}
        )
    if not isinstance(project_root, (str, os.PathLike)):
        raise CleanupError(
            "Project root must be a string path",
            ErrorCodes.INVALID_PROJECT_ROOT,
            {"provided": type(project_root).__name__},
        )

    resolved = Path(project_root).resolve()
    try:
        st = resolved.stat()
    except FileNotFoundError:
        raise CleanupError(
            "Project root directory does not exist", ErrorCodes.INVALID_PROJECT_ROOT, {"path": str(resolved)}
        )
    except PermissionError:
        raise CleanupError(
            "Permission denied accessing project root", ErrorCodes.PERMISSION_DENIED, {"path": str(resolved)}
        )
    except OSError as e:
        raise CleanupError(
            f"Failed to access project root: {e}",
            ErrorCodes.INVALID_PROJECT_ROOT,
            {"path": str(resolved), "originalError": str(e)},
        )
    if not stat.S_ISDIR(st.st_mode):
        raise CleanupError(
            "Project root must be a directory", ErrorCodes.INVALID_PROJECT_ROOT, {"path": str(resolved)}
        )
    return resolved


def _record_failure(stats: CleanupStats, path: str, err: Exception) -> None:
    if isinstance(err, CleanupError):
        stats.errors.append(err.to_record())
    else:
        stats.errors.append(error_record(
            ErrorCodes.UNKNOWN_ERROR,
            f"Unexpected error processing {path}: {err}",
            {"path": path},
        ))
    logger.warning("cleanup failed for %s: %s", path, err)


def run(project_root, dry_run: bool = False, strip_logs: bool = True, prune_css: bool = True) -> CleanupStats:
    stats = CleanupStats()

    try:
        root = validate_project_root(project_root)
    except CleanupError as e:
        stats.errors.append(e.to_record())
        return stats
    stats.root = str(root)

    src_dir = root / "src"
    if not src_dir.is_dir():
        stats.warnings.append(error_record(
            ErrorCodes.SRC_DIR_NOT_FOUND,
            f"Source directory not found: {src_dir}",
            {"path": str(src_dir)},
        ))
        return stats

    js_result = get_all_files(src_dir, JS_EXTENSIONS)
    css_result = get_all_files(src_dir, CSS_EXTENSIONS) if prune_css else None
    for scan in (js_result, css_result):
        if scan is None:
            continue
        for e in scan.errors:
            stats.warnings.append(error_record(
                ErrorCodes.DIRECTORY_SCAN_ERROR,
                f"Failed to scan directory: {e['path']}",
                e,
            ))

    js_files = js_result.files
    # cleaned text that was not written (dry run), so the CSS pass sees post-strip sources
    pending: Dict[str, str] = {}

    if strip_logs:
        for path in js_files:
            try:
                content = safe_read_file(path)
                cleaned = remove_console_logs(content)
                if cleaned == content:
                    continue
                if dry_run:
                    pending[path] = cleaned
                else:
                    safe_write_file(path, cleaned)
                removed = count_console_logs(content) - count_console_logs(cleaned)
                stats.console_logs_removed += removed
                stats.files_processed += 1
                logger.debug("%s: removed %d console.log", path, removed)
            except Exception as e:
                _record_failure(stats, path, e)

    if prune_css:
        for path in css_result.files:
            try:
                content = safe_read_file(path)
                before = len(extract_css_classes(content))
                checker = ClassUsageChecker(js_files, file_cache=dict(pending))
                cleaned = remove_unused_css_classes(content, js_files, checker=checker)
                after = len(extract_css_classes(cleaned))
                if cleaned == content:
                    continue
                if not dry_run:
                    safe_write_file(path, cleaned)
                stats.css_classes_removed += before - after
                stats.files_processed += 1
                logger.debug("%s: removed %d css classes", path, before - after)
            except Exception as e:
                _record_failure(stats, path, e)

    logger.info(
        "cleanup done: %d console.log, %d css classes, %d files",
        stats.console_logs_removed, stats.css_classes_removed, stats.files_processed,
    )
    return stats


def parse_args(description: str, argv=None):
    p = argparse.ArgumentParser(description=description)
    p.add_argument(
        "--root",
        default=os.getenv("CLEANUP_PROJECT_ROOT") or ".",
        help="Project root containing src/ (default: $CLEANUP_PROJECT_ROOT or current directory)",
    )
    p.add_argument("--dry-run", action="store_true", help="Report only; do not modify files")
    p.add_argument("--json", action="store_true", help="Print the stats record as JSON")
    p.add_argument("--verbose", action="store_true", help="Log per-file activity")
    p.add_argument("--fail-on-error", action="store_true", help="Exit 1 when any file failed")
    return p.parse_args(argv)


def run_cli(description: str, tag: str, strip_logs: bool = True, prune_css: bool = True, argv=None) -> CleanupStats:
    load_dotenv()
    args = parse_args(description, argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    stats = run(args.root, dry_run=args.dry_run, strip_logs=strip_logs, prune_css=prune_css)

    if args.json:
        print(json.dumps(stats.to_dict(), ensure_ascii=False, indent=2))
    else:
        for w in stats.warnings:
            print(f"[WARN] {w['code']}: {w['message']}")
        for e in stats.errors:
            print(f"[ERROR] {e['code']}: {e['message']}")
        verb = "would remove" if args.dry_run else "removed"
        print(
            f"[{tag}] Cleanup complete: {verb} {stats.console_logs_removed} console.log, "
            f"{stats.css_classes_removed} CSS classes; files changed: {stats.files_processed}"
        )

    if stats.root is None or (args.fail_on_error and stats.errors):
        sys.exit(1)
    return stats


def main():
    run_cli(description="Strip console.log calls and prune unused CSS rules under <root>/src", tag="CLEANUP")


if __name__ == "__main__":
    main()
