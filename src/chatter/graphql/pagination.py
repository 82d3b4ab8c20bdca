"""
Relay-style cursor pagination over SQLAlchemy selects.

Cursors are opaque URL-safe base64 strings encoding ``(created_at, id)`` of a
node. Rows are ordered newest first on ``(created_at DESC, id DESC)``;
``first``/``after`` page towards older rows and ``last``/``before`` towards
newer ones.
"""

import base64
import binascii
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Generic, TypeVar
from uuid import UUID

import strawberry
from sqlalchemy import Select, tuple_
from sqlalchemy.orm import InstrumentedAttribute

from ..config import settings

T = TypeVar("T")
R = TypeVar("R")

_SEPARATOR = "|"


class PaginationError(ValueError):
    """Raised for contradictory page arguments or malformed cursors."""


@strawberry.type
class PageInfo:
    has_next_page: bool
    has_previous_page: bool
    start_cursor: str | None = None
    end_cursor: str | None = None


@strawberry.type
class Edge(Generic[T]):
    cursor: str
    node: T


@strawberry.type
class Connection(Generic[T]):
    edges: list[Edge[T]]
    page_info: PageInfo


def encode_cursor(created_at: datetime, id: UUID) -> str:
    raw = f"{created_at.isoformat()}{_SEPARATOR}{id}"
    return base64.urlsafe_b64encode(raw.encode()).decode()


def decode_cursor(cursor: str) -> tuple[datetime, UUID]:
    try:
        raw = base64.urlsafe_b64decode(cursor.encode()).decode()
        created_at, _, id = raw.partition(_SEPARATOR)
        return datetime.fromisoformat(created_at), UUID(id)
    except (binascii.Error, UnicodeError, ValueError):
        raise PaginationError(f"Invalid cursor: {cursor!r}") from None


@dataclass(frozen=True)
class PageWindow:
    """A resolved page request: how many rows, which way, and between which keys."""

    limit: int
    backward: bool = False
    after: tuple[datetime, UUID] | None = None
    before: tuple[datetime, UUID] | None = None


def relay_to_window(
    after: str | None = None,
    before: str | None = None,
    first: int | None = None,
    last: int | None = None,
) -> PageWindow:
    """Translate Relay connection arguments into a page window.

    Raises:
        PaginationError: If both ``first`` and ``last`` are given, a count is
            negative, or a cursor cannot be decoded
    """
    if first is not None and last is not None:
        raise PaginationError("Pass either 'first' or 'last', not both")
    for name, count in (("first", first), ("last", last)):
        if count is not None and count < 0:
            raise PaginationError(f"'{name}' must not be negative")

    requested = last if last is not None else first
    if requested is None:
        requested = settings.default_page_size

    return PageWindow(
        limit=min(requested, settings.max_page_size),
        backward=last is not None,
        after=decode_cursor(after) if after else None,
        before=decode_cursor(before) if before else None,
    )


def apply_window(
    stmt: Select,
    window: PageWindow,
    created_at: InstrumentedAttribute,
    id: InstrumentedAttribute,
) -> Select:
    """Restrict, order and limit `stmt` for `window`; one extra row is fetched."""
    key = tuple_(created_at, id)
    if window.after is not None:
        stmt = stmt.where(key < tuple_(*window.after))
    if window.before is not None:
        stmt = stmt.where(key > tuple_(*window.before))

    if window.backward:
        stmt = stmt.order_by(created_at.asc(), id.asc())
    else:
        stmt = stmt.order_by(created_at.desc(), id.desc())

    return stmt.limit(window.limit + 1)


def build_connection(
    rows: Sequence[R],
    window: PageWindow,
    to_node: Callable[[R], Any],
    key: Callable[[R], tuple[datetime, UUID]] | None = None,
) -> Connection:
    """Turn rows fetched with `apply_window` into a connection, newest first."""
    key = key or (lambda row: (row.created_at, row.id))
    has_more = len(rows) > window.limit
    page = list(rows[: window.limit])
    if window.backward:
        page.reverse()

    edges = [Edge(cursor=encode_cursor(*key(row)), node=to_node(row)) for row in page]

    if window.backward:
        has_next_page = window.before is not None
        has_previous_page = has_more
    else:
        has_next_page = has_more
        has_previous_page = window.after is not None

    return Connection(
        edges=edges,
        page_info=PageInfo(
            has_next_page=has_next_page,
            has_previous_page=has_previous_page,
            start_cursor=edges[0].cursor if edges else None,
            end_cursor=edges[-1].cursor if edges else None,
        ),
    )
