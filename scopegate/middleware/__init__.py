"""HTTP middleware: request ID and request context headers.

Applied in main app; order matters (first added = outermost).
"""

from scopegate.middleware.context import ContextMiddleware
from scopegate.middleware.request_id import RequestIDMiddleware

__all__ = [
    "ContextMiddleware",
    "RequestIDMiddleware",
]
