"""Tracing helpers: span decorator for async service methods."""

from collections.abc import Callable
from functools import wraps
from typing import Any

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

# Only these keyword arguments are copied onto spans.
_SPAN_ATTR_KEYS = frozenset(
    {"user_id", "organization_id", "branch_id", "team_id", "role_id", "slug", "permission"}
)


def traced(operation_name: str | None = None) -> Callable:
    """Wrap an async function in a span named operation_name (default module.func).

    Exceptions mark the span as error and propagate unchanged. Without a
    configured tracer provider the spans are no-ops.
    """

    def decorator(func: Callable) -> Callable:
        tracer = trace.get_tracer(__name__)
        span_name = operation_name or f"{func.__module__}.{func.__qualname__}"

        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            with tracer.start_as_current_span(span_name) as span:
                for key, value in kwargs.items():
                    if key in _SPAN_ATTR_KEYS and value is not None:
                        span.set_attribute(f"arg.{key}", str(value))
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    span.set_status(Status(StatusCode.ERROR, str(e)))
                    span.record_exception(e)
                    raise
                span.set_status(Status(StatusCode.OK))
                return result

        return wrapper

    return decorator
