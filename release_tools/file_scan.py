from __future__ import annotations

import errno
import logging
import os
import shutil
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List

from .errors import CleanupError, ErrorCodes

logger = logging.getLogger(__name__)

# The engine never rewrites its own sources (e.g. when a project releases itself)
PACKAGE_SRC = Path(__file__).resolve().parent

IGNORE_DIRS = (
    "node_modules",
    "dist",
    "build",
    ".git",
    "coverage",
    ".next",
    ".cache",
)
JS_EXTENSIONS = (".js", ".jsx", ".ts", ".tsx")
CSS_EXTENSIONS = (".css",)


@dataclass
class ScanResult:
    files: List[str] = field(default_factory=list)
    errors: List[Dict[str, str]] = field(default_factory=list)


def is_package_file(file_path) -> bool:
    p = Path(file_path).resolve()
    return p == PACKAGE_SRC or PACKAGE_SRC in p.parents


def _scan_error(err: OSError) -> Dict[str, str]:
    if isinstance(err, PermissionError):
        kind = "permission_denied"
    elif isinstance(err, FileNotFoundError):
        kind = "not_found"
    else:
        kind = "unknown"
    return {
        "path": str(err.filename) if err.filename is not None else "",
        "code": errno.errorcode.get(err.errno, "") if err.errno else "",
        "message": err.strerror or str(err),
        "type": kind,
    }


def get_all_files(directory, extensions: Iterable[str]) -> ScanResult:
    """Recursively collect files under `directory` whose extension is in `extensions`.

    Ignored directories are pruned at any depth. A directory that cannot be listed
    contributes no files and one entry in `errors`; its siblings are still scanned.
    """
    wanted = {e.lower() for e in extensions}
    result = ScanResult()

    def on_error(err: OSError) -> None:
        info = _scan_error(err)
        logger.debug("scan failed for %s: %s", info["path"], info["message"])
        result.errors.append(info)

    for dirpath, dirnames, filenames in os.walk(str(directory), onerror=on_error):
        dirnames[:] = [d for d in dirnames if d not in IGNORE_DIRS]
        for name in filenames:
            ext = os.path.splitext(name)[1].lower()
            if ext not in wanted:
                continue
            full_path = os.path.join(dirpath, name)
            # symlinked files may point outside the scanned tree
            if os.path.islink(full_path) or is_package_file(full_path):
                continue
            result.files.append(full_path)
    return result


def safe_read_file(file_path) -> str:
    path = str(file_path)
    try:
        # newline='' keeps CRLF files intact on rewrite
        with open(path, "r", encoding="utf-8", newline="") as f:
            return f.read()
    except FileNotFoundError:
        raise CleanupError(f"File not found: {path}", ErrorCodes.FILE_READ_ERROR, {"path": path})
    except PermissionError:
        raise CleanupError(
            f"Permission denied reading file: {path}", ErrorCodes.PERMISSION_DENIED, {"path": path}
        )
    except IsADirectoryError:
        raise CleanupError(
            f"Path is a directory, not a file: {path}", ErrorCodes.FILE_READ_ERROR, {"path": path}
        )
    except UnicodeDecodeError as e:
        raise CleanupError(
            f"File is not valid UTF-8 text: {path}",
            ErrorCodes.INVALID_FILE_CONTENT,
            {"path": path, "originalError": str(e)},
        )
    except OSError as e:
        raise CleanupError(
            f"Failed to read file: {e}",
            ErrorCodes.FILE_READ_ERROR,
            {"path": path, "originalError": str(e)},
        )


def safe_write_file(file_path, content: str) -> None:
    """Replace the whole file; on any failure the original content stays in place."""
    path = str(file_path)
    tmp_path = None
    try:
        if os.path.exists(path) and not os.access(path, os.W_OK):
            raise PermissionError(errno.EACCES, "Permission denied", path)
        fd, tmp_path = tempfile.mkstemp(
            dir=os.path.dirname(path) or ".", prefix=f".{os.path.basename(path)}.", suffix=".tmp"
        )
        os.close(fd)
        with open(tmp_path, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        if os.path.exists(path):
            shutil.copymode(path, tmp_path)
        os.replace(tmp_path, path)
        tmp_path = None
    except PermissionError:
        raise CleanupError(
            f"Permission denied writing to file: {path}", ErrorCodes.PERMISSION_DENIED, {"path": path}
        )
    except OSError as e:
        if e.errno == errno.ENOSPC:
            raise CleanupError(
                f"No space left on device when writing: {path}", ErrorCodes.FILE_WRITE_ERROR, {"path": path}
            )
        if e.errno == errno.EROFS:
            raise CleanupError(
                f"Read-only file system, cannot write: {path}", ErrorCodes.FILE_WRITE_ERROR, {"path": path}
            )
        raise CleanupError(
            f"Failed to write file: {e}",
            ErrorCodes.FILE_WRITE_ERROR,
            {"path": path, "originalError": str(e)},
        )
    finally:
        if tmp_path is not None and os.path.exists(tmp_path):
            os.remove(tmp_path)
