"""Run non-critical operations without letting their failures escape.

Favorites storage is best effort: a corrupt or unwritable store must never break
recipe display, so those operations go through `safe_execute_sync`.
"""

from typing import Callable, Optional, TypeVar

from leftover_recipes.utils.logger import logger

T = TypeVar("T")

_LOG_LEVELS = ("debug", "warning", "error")


def _log_failure(operation_name: str, exception: Exception, log_level: str) -> None:
    level = log_level if log_level in _LOG_LEVELS else "warning"
    getattr(logger, level)(f"{operation_name}: {exception}")


def safe_execute_sync(
    func: Callable[[], T],
    operation_name: str,
    log_level: str = "warning",
    default_return: Optional[T] = None,
    reraise: bool = False,
) -> Optional[T]:
    """Call `func`, logging and absorbing any exception it raises.

    Args:
        func: Zero-argument callable.
        operation_name: Prefix for the log line, e.g. "Failed to save favorite recipe".
        log_level: "debug", "warning" or "error"; anything else logs a warning.
        default_return: Returned in place of a result when `func` fails.
        reraise: Log, then propagate the exception instead of returning.

    Returns:
        The result of `func`, or `default_return` if it raised.
    """
    try:
        return func()
    except Exception as e:
        _log_failure(operation_name, e, log_level)
        if reraise:
            raise
        return default_return
