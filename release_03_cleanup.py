#!/usr/bin/env python3
"""
Step 03: Source cleanup before the release build.

This is a thin wrapper around release_tools/cleanup_run.py so you can run:

  python release_03_cleanup.py --root path/to/project

Flags pass-through to the underlying tool:
  --dry-run        Report only; do not modify files
  --json           Print the stats record (consoleLogsRemoved, cssClassesRemoved, ...) as JSON
  --verbose        Log per-file activity
  --fail-on-error  Exit 1 when any file could not be processed

--root defaults to CLEANUP_PROJECT_ROOT (.env) or the current directory.
"""

import sys
import os


def main():
    # Ensure repo root is on sys.path so we can import release_tools.*
    repo_root = os.path.dirname(os.path.abspath(__file__))
    sys.path.insert(0, repo_root)
    from release_tools.cleanup_run import main as tool_main  # type: ignore
    tool_main()


if __name__ == "__main__":
    main()
