import functools
import logging

from profiler.errors.exceptions import VisitorAnalysisError
from utils.exit_handler import safe_exit

logger = logging.getLogger(__name__)


def exit_on_failure(func):
    """Turn a pipeline error into a clean process exit carrying its catalog code."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except VisitorAnalysisError as e:
            logger.error(f"🚨 [{e.component}] {e.message}")
            safe_exit(e.code, e.message)
    return wrapper
