from __future__ import annotations

from contextvars import ContextVar

# Request correlation for logs; set by RequestContextMiddleware.
# Sync endpoints run in a threadpool that copies the context, so the id follows them.
request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)
