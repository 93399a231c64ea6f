"""
Performance tracing decorator for pipeline stages.

Works on plain functions and on coroutine functions.
"""

import time
import asyncio
import functools
from typing import Callable, Any
from lsp2gxl.logging_config import logger


def _log_exit(func_name: str, start_time: float) -> None:
    duration = time.perf_counter() - start_time
    logger.bind(
        function=func_name,
        duration_seconds=duration,
        status="success",
    ).info(f"TRACE_EXIT: {func_name} completed in {duration:.4f}s")


def _log_failure(func_name: str, start_time: float, error: Exception) -> None:
    duration = time.perf_counter() - start_time
    logger.bind(
        function=func_name,
        duration_seconds=duration,
        status="error",
        exception_type=type(error).__name__,
    ).error(f"TRACE_EXIT: {func_name} failed after {duration:.4f}s with {type(error).__name__}: {str(error)}")


def trace(func: Callable) -> Callable:
    """
    Decorator that logs function entry, exit, and execution time.

    Usage:
        @trace
        def build(self):
            ...

        @trace
        async def run(provider):
            ...

    Exceptions are logged and re-raised unchanged.
    """
    func_name = func.__qualname__

    if asyncio.iscoroutinefunction(func):
        @functools.wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            logger.debug(f"TRACE_ENTER: {func_name}")
            start_time = time.perf_counter()
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                _log_failure(func_name, start_time, e)
                raise
            _log_exit(func_name, start_time)
            return result

        return async_wrapper

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        logger.debug(f"TRACE_ENTER: {func_name}")
        start_time = time.perf_counter()
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            _log_failure(func_name, start_time, e)
            raise
        _log_exit(func_name, start_time)
        return result

    return wrapper
