from .cleanup_run import CleanupStats, run
from .errors import CleanupError, ErrorCodes

__all__ = ["CleanupStats", "CleanupError", "ErrorCodes", "run"]
