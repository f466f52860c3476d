import functools
import inspect
import time
from typing import Any, Callable, Optional, TypeVar

from loguru import logger

C = TypeVar("C", bound=Callable[..., Any])


def log_execution(enabled: bool = True, level: str = "DEBUG") -> Callable[[C], C]:
    """
    Decorator factory that logs how long the decorated function took.

    Failures are logged with the exception type and re-raised unchanged.

    Args:
        enabled (bool): Flag to enable or disable logging.
        level (str): Loguru level the timing record is emitted at.

    Returns:
        Callable: A decorator that wraps the target function or method.
    """

    def decorator(func: C) -> C:
        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                start_time = time.perf_counter()
                error: Optional[BaseException] = None
                try:
                    return await func(*args, **kwargs)
                except BaseException as exc:
                    error = exc
                    raise
                finally:
                    if enabled:
                        _log_execution_details(func, start_time, level, error)

            return async_wrapper  # type: ignore

        @functools.wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            start_time = time.perf_counter()
            error: Optional[BaseException] = None
            try:
                return func(*args, **kwargs)
            except BaseException as exc:
                error = exc
                raise
            finally:
                if enabled:
                    _log_execution_details(func, start_time, level, error)

        return sync_wrapper  # type: ignore

    return decorator


def _log_execution_details(
    f: Callable[..., Any],
    start: float,
    level: str,
    error: Optional[BaseException],
) -> None:
    """
    Logs execution details of the function or method.

    Args:
        f (Callable): The function or method that ran.
        start (float): Start time of the function execution.
        level (str): Level to log at.
        error (Optional[BaseException]): The exception it raised, if any.
    """
    execution_time = time.perf_counter() - start
    outcome = f"failed with {type(error).__name__}" if error else "completed"
    logger.log(
        level,
        f"{f.__qualname__} {outcome} in {execution_time:f} seconds",
    )
