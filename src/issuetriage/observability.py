"""Observability utilities for pipeline nodes.

Provides logging, timing, and tracing for LangGraph nodes.
"""

import functools
import inspect
import sys
import time
from typing import Any, Callable, TypeVar

from langsmith import traceable

F = TypeVar("F", bound=Callable[..., Any])


def _log(message: str, level: str = "info", node: str = "node") -> None:
    """Log message to stderr so it never mixes with interactive prompts."""
    prefix = {
        "info": "ℹ️",
        "success": "✅",
        "error": "❌",
        "warning": "⚠️",
        "start": "🚀",
        "end": "🏁",
    }.get(level, "")
    print(f"{prefix} [{node}] {message}", file=sys.stderr, flush=True)


def _format_elapsed(elapsed: float) -> str:
    return f"{elapsed:.2f}s" if elapsed >= 1 else f"{elapsed * 1000:.0f}ms"


def traced_node(
    name: str,
    *,
    run_type: str = "chain",
    log_output: bool = True,
) -> Callable[[F], F]:
    """Decorator to add tracing and logging to a LangGraph node.

    Combines LangSmith tracing with timing and logging. Works for both
    plain and ``async def`` nodes.

    Args:
        name: Name for the trace (e.g., "check_pr", "summarize").
        run_type: LangSmith run type ("chain", "llm", "tool").
        log_output: Whether to log output keys.

    Example:
        @traced_node("check_pr")
        async def check_pr_node(state: PipelineState) -> dict:
            ...
    """

    def decorator(func: F) -> F:
        traced_func = traceable(name=name, run_type=run_type)(func)

        def _completed(result: Any, start_time: float) -> None:
            elapsed_str = _format_elapsed(time.perf_counter() - start_time)
            if log_output and isinstance(result, dict):
                _log(
                    f"Completed in {elapsed_str}, output: {list(result.keys())}",
                    "success",
                    name,
                )
            else:
                _log(f"Completed in {elapsed_str}", "success", name)

        def _failed(exc: Exception, start_time: float) -> None:
            elapsed = time.perf_counter() - start_time
            _log(f"Failed after {elapsed:.2f}s: {exc}", "error", name)

        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(state: dict, *args: Any, **kwargs: Any) -> dict:
                _log("Starting...", "start", name)
                start_time = time.perf_counter()
                try:
                    result = await traced_func(state, *args, **kwargs)
                except Exception as e:
                    _failed(e, start_time)
                    raise
                _completed(result, start_time)
                return result

            return async_wrapper  # type: ignore

        @functools.wraps(func)
        def wrapper(state: dict, *args: Any, **kwargs: Any) -> dict:
            _log("Starting...", "start", name)
            start_time = time.perf_counter()
            try:
                result = traced_func(state, *args, **kwargs)
            except Exception as e:
                _failed(e, start_time)
                raise
            _completed(result, start_time)
            return result

        return wrapper  # type: ignore

    return decorator


def log_node_event(node: str, event: str, level: str = "info", **data: Any) -> None:
    """Log a custom event from within a node.

    Args:
        node: Node name.
        event: Event description.
        level: Log level (info, success, error, warning).
        **data: Additional data to log.

    Example:
        log_node_event("check_pr", "skipping issue", issue_number=42)
    """
    if data:
        data_str = ", ".join(f"{k}={v}" for k, v in data.items())
        _log(f"{event} ({data_str})", level, node)
    else:
        _log(event, level, node)
