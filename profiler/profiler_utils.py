# profiler_utils.py
import functools
from contextlib import nullcontext

from profiler.profiler_switch import profiling_switch
from profiler.timer.ProfilerTimer import ProfilerTimer

CATEGORIES = {"general", "dataset", "series_builder", "decomposition", "model_selection", "reporting"}


def conditional_timer(module, function, message="", category="general", context=None):
    if not profiling_switch.enabled:
        return nullcontext()
    if category not in CATEGORIES:
        category = "unknown"
    return ProfilerTimer(module=module, function=function, message=message, category=category, context=context)


def profiled_function(category: str, message_template: str = "{message}"):
    """
    Decorator to time a function when profiling is switched on.

    Args:
        category (str): e.g. 'dataset', 'decomposition'
        message_template (str): Supports {message}, the first line of the docstring.
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            doc = (func.__doc__ or "").strip().splitlines()
            message = message_template.format(message=doc[0] if doc else func.__name__)
            module = f"{func.__module__.replace('.', '/')}.py"
            with conditional_timer(module, func.__name__, message, category):
                return func(*args, **kwargs)
        return wrapper
    return decorator
