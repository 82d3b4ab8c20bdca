"""
Per-request logging context for the HTTP API
"""

import json
import re
import time
from collections.abc import Callable
from typing import Any

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from .logging import clear_request_context, get_logger, set_request_context

logger = get_logger(__name__)

GRAPHQL_PATH = "/graphql"
REDACTED = "[REDACTED]"

# Query parameter names containing any of these are never logged
SENSITIVE_KEYS = (
    "password",
    "token",
    "secret",
    "auth",
    "key",
    "jwt",
    "session",
    "cookie",
    "credential",
)

# GraphQL documents may carry tokens or message text
GRAPHQL_PARAMS = ("query", "variables", "extensions")

_OPERATION_PATTERN = re.compile(r"\b(query|mutation|subscription)\s+(\w+)")


def sanitize_query_params(params: dict[str, Any]) -> dict[str, Any]:
    return {
        key: REDACTED if any(word in key.lower() for word in SENSITIVE_KEYS) else value
        for key, value in params.items()
    }


def operation_name_from_document(query: str) -> str:
    """Loggable name of a GraphQL document; mutations and subscriptions are prefixed."""
    if "__schema" in query or "IntrospectionQuery" in query:
        return "__introspection"

    match = _OPERATION_PATTERN.search(query)
    if not match:
        return "unnamed_operation"
    kind, name = match.groups()
    return name if kind == "query" else f"{kind}:{name}"


def _operation_name(payload: dict[str, Any]) -> str | None:
    name = payload.get("operationName")
    if isinstance(name, str) and name:
        return name
    query = payload.get("query")
    if isinstance(query, str) and query:
        return operation_name_from_document(query)
    return None


async def extract_graphql_operation_name(request: Request) -> str | None:
    if request.url.path != GRAPHQL_PATH:
        return None

    if request.method == "GET":
        return _operation_name(dict(request.query_params))

    if request.method == "POST" and request.headers.get("content-type", "").startswith(
        "application/json"
    ):
        try:
            payload = json.loads(await request.body() or b"{}")
        except json.JSONDecodeError:
            return None
        if isinstance(payload, dict):
            return _operation_name(payload)

    return None


class LoggingContextMiddleware(BaseHTTPMiddleware):
    """Binds a request id for the duration of each request and logs its outcome."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = set_request_context(request.headers.get("x-request-id"))
        started = time.perf_counter()
        path = request.url.path

        try:
            params = sanitize_query_params(dict(request.query_params))
            if path == GRAPHQL_PATH:
                params.update({k: REDACTED for k in GRAPHQL_PARAMS if k in params})
            operation = await extract_graphql_operation_name(request)

            logger.info(
                "Request started",
                method=request.method,
                path=path,
                query_params=params or None,
                graphql_operation=operation,
                remote_addr=request.client.host if request.client else None,
            )

            response = await call_next(request)
        except Exception as e:
            logger.error("Request failed", method=request.method, path=path, error=str(e))
            raise
        else:
            response.headers["x-request-id"] = request_id
            logger.info(
                "Request completed",
                method=request.method,
                path=path,
                status_code=response.status_code,
                graphql_operation=operation,
                duration_ms=round((time.perf_counter() - started) * 1000, 1),
            )
            return response
        finally:
            clear_request_context()
