import logging
import re
import sys
import traceback
import warnings

logger = logging.getLogger("profiler.hooks")


def log_warning(message, category, filename, lineno, file=None, line=None):
    tb = f"{filename}:{lineno} - {category.__name__}: {message}"
    logger.warning(f"⚠️ [Warning Intercepted] {clean_error_message(tb)}")


def log_uncaught_exception(exc_type, exc_value, exc_tb):
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc_value, exc_tb)
        return
    tb_str = ''.join(traceback.format_exception(exc_type, exc_value, exc_tb))
    logger.critical(f"🚨 [Uncaught Exception] {clean_error_message(str(exc_value))}\n{tb_str}")


def init_error_hooks():
    # Warnings
    warnings.showwarning = log_warning
    # Uncaught Exceptions
    sys.excepthook = log_uncaught_exception


def clean_error_message(message):
    # Remove non-printable or non-ASCII characters
    return re.sub(r'[^\x20-\x7E]+', '', message)
