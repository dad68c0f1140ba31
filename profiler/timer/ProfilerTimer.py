# Profiler context manager
import logging
import time
import traceback
from datetime import timedelta
from functools import wraps

logger = logging.getLogger(__name__)


class ProfilerTimer:
    def __init__(self, module, function, message="", category="general", context=None):
        self.module = module
        self.function = function
        self.message = message
        self.category = category
        self.context = context or {}
        self.record = {}

    def __enter__(self):
        self.start_time = time.time()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        end_time = time.time()
        duration_ms = round((end_time - self.start_time) * 1000, 3)
        duration_readable = str(timedelta(milliseconds=duration_ms))

        self.status = "failed" if exc_type else "completed"
        self.record = {
            "module": self.module,
            "function": self.function,
            "message": self.message,
            "category": self.category,
            "duration_ms": duration_ms,
            "duration_readable": duration_readable,
            "status": self.status,
            "error": str(exc_val) if exc_type else None,
            "traceback": "".join(traceback.format_exception(exc_type, exc_val, exc_tb)) if exc_type else None,
            **self.context,
        }

        if exc_type:
            logger.warning(f"⏱️ [{self.category}] {self.module}.{self.function} failed after {duration_readable}: {exc_val}")
        else:
            logger.info(f"⏱️ [{self.category}] {self.module}.{self.function} completed in {duration_readable}")
        # never suppress the exception
        return False

    @staticmethod
    def timer(module, function, message="", category="general"):
        def decorator(func):
            @wraps(func)
            def wrapper(*args, **kwargs):
                with ProfilerTimer(module, function, message, category):
                    return func(*args, **kwargs)
            return wrapper
        return decorator
