"""Table requests: the chainable read builder and the immediate write paths."""

import datetime
import decimal
import json
import uuid
from typing import TYPE_CHECKING, Any, Generator

import httpx

from .exceptions import QueryStateError, ShopAdminError
from .types import DeleteResult, Filter, QueryDescriptor, ReadResult, SingleResult, WriteResult

if TYPE_CHECKING:
    from .client import Client

COUNT_MODES = ("exact", "planned", "estimated")
RETURN_REPRESENTATION = {"Prefer": "return=representation", "Content-Type": "application/json"}

# Characters that force a value inside in.(...) to be double-quoted.
_RESERVED = set(',()"')


def format_value(value: Any) -> str:
    """Render a Python value the way the REST layer spells it in a filter."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _list_item(value: Any) -> str:
    text = format_value(value)
    if _RESERVED.intersection(text):
        escaped = text.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return text


def serialize_filter(flt: Filter) -> str:
    """Return the ``operator.value`` half of a ``column=operator.value`` pair."""
    op, value = flt.operator, flt.value
    if op == "in":
        return "in.(" + ",".join(_list_item(v) for v in value) + ")"
    if op == "contains":
        return "cs." + json.dumps(value, separators=(",", ":"))
    if op == "textSearch":
        return f"fts.{value}"
    return f"{op}.{format_value(value)}"


def filter_params(filters: tuple[Filter, ...] | list[Filter]) -> list[tuple[str, str]]:
    """Serialize filters in order; the service ANDs them together."""
    return [(flt.column, serialize_filter(flt)) for flt in filters]


def match_filters(mapping: dict[str, Any]) -> list[Filter]:
    return [Filter(column, "eq", value) for column, value in mapping.items()]


def build_params(descriptor: QueryDescriptor) -> list[tuple[str, str]]:
    """Query parameters of a read, in the order they are sent.

    When a row range is set it is sent as a header and wins over ``limit``,
    which is then left out.
    """
    params = [("select", descriptor.projection)]
    params.extend(filter_params(descriptor.filters))
    if descriptor.order_by is not None:
        direction = "asc" if descriptor.order_by.ascending else "desc"
        params.append(("order", f"{descriptor.order_by.column}.{direction}"))
    if descriptor.limit is not None and descriptor.range is None:
        params.append(("limit", str(descriptor.limit)))
    return params


def build_headers(descriptor: QueryDescriptor) -> dict[str, str]:
    headers: dict[str, str] = {}
    if descriptor.range is not None:
        headers["Range-Unit"] = "items"
        headers["Range"] = f"{descriptor.range.start}-{descriptor.range.end}"
    if descriptor.count is not None:
        headers["Prefer"] = f"count={descriptor.count}"
    return headers


def _encode(value: Any) -> Any:
    if isinstance(value, (datetime.datetime, datetime.date, datetime.time)):
        return value.isoformat()
    if isinstance(value, (decimal.Decimal, uuid.UUID)):
        return str(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def json_body(payload: Any) -> bytes:
    """Encode a write payload; dates become ISO strings, decimals and UUIDs strings."""
    return json.dumps(payload, default=_encode).encode("utf-8")


def _parse_count(content_range: str | None) -> int | None:
    # "0-24/3573", "*/0", or "0-24/*" when the total is unknown
    if not content_range or "/" not in content_range:
        return None
    total = content_range.rsplit("/", 1)[1]
    return int(total) if total.isdigit() else None


def _rows(response: httpx.Response) -> list[dict[str, Any]]:
    if not response.content:
        return []
    body = response.json()
    if isinstance(body, dict):
        return [body]
    return body


class QueryBuilder:
    """A deferred read against one table.

    Each chain method returns a new builder over a new
    :class:`~shopadmin.types.QueryDescriptor`, so every intermediate stage
    can still be extended or executed on its own. Nothing is sent until
    :meth:`execute` (or ``await builder``) or :meth:`single`. After that the
    builder is spent: chaining from it or running it again raises
    :class:`~shopadmin.exceptions.QueryStateError`.

    Example:
        >>> result = await (
        ...     client.from_("orders")
        ...     .select("id, total_amount, status")
        ...     .eq("status", "completed")
        ...     .order("created_at", ascending=False)
        ...     .limit(20)
        ... )
    """

    def __init__(self, client: "Client", descriptor: QueryDescriptor):
        self._client = client
        self._descriptor = descriptor
        self._executed = False

    @property
    def descriptor(self) -> QueryDescriptor:
        return self._descriptor

    @property
    def executed(self) -> bool:
        return self._executed

    def __repr__(self) -> str:
        state = "executed" if self._executed else "building"
        return f"<QueryBuilder {self._descriptor.table} {state}>"

    def _ensure_building(self) -> None:
        if self._executed:
            raise QueryStateError(f"Query on {self._descriptor.table!r} was already executed")

    def _chain(self, descriptor: QueryDescriptor) -> "QueryBuilder":
        self._ensure_building()
        return QueryBuilder(self._client, descriptor)

    def _filter(self, column: str, operator: str, value: Any) -> "QueryBuilder":
        return self._chain(self._descriptor.with_filter(column, operator, value))

    def eq(self, column: str, value: Any) -> "QueryBuilder":
        return self._filter(column, "eq", value)

    def neq(self, column: str, value: Any) -> "QueryBuilder":
        return self._filter(column, "neq", value)

    def gt(self, column: str, value: Any) -> "QueryBuilder":
        return self._filter(column, "gt", value)

    def lt(self, column: str, value: Any) -> "QueryBuilder":
        return self._filter(column, "lt", value)

    def gte(self, column: str, value: Any) -> "QueryBuilder":
        return self._filter(column, "gte", value)

    def lte(self, column: str, value: Any) -> "QueryBuilder":
        return self._filter(column, "lte", value)

    def is_(self, column: str, value: Any) -> "QueryBuilder":
        return self._filter(column, "is", value)

    def in_(self, column: str, values: list[Any] | tuple[Any, ...]) -> "QueryBuilder":
        if isinstance(values, (str, bytes)):
            raise TypeError("in_() expects a sequence of values, not a string")
        return self._filter(column, "in", tuple(values))

    def contains(self, column: str, value: Any) -> "QueryBuilder":
        return self._filter(column, "contains", value)

    def text_search(self, column: str, query: str) -> "QueryBuilder":
        return self._filter(column, "textSearch", query)

    def order(self, column: str, *, ascending: bool = True) -> "QueryBuilder":
        return self._chain(self._descriptor.with_order(column, ascending))

    def limit(self, count: int) -> "QueryBuilder":
        return self._chain(self._descriptor.with_limit(count))

    def range(self, start: int, end: int) -> "QueryBuilder":
        """Restrict to rows ``start`` through ``end`` inclusive (zero-based)."""
        return self._chain(self._descriptor.with_range(start, end))

    def build_params(self) -> list[tuple[str, str]]:
        return build_params(self._descriptor)

    def build_headers(self) -> dict[str, str]:
        return build_headers(self._descriptor)

    def _start(self) -> None:
        self._ensure_building()
        self._executed = True

    async def execute(self) -> ReadResult:
        """Send the request.

        Returns:
            ReadResult with the list of rows, or the error.
        """
        self._start()
        return await _read(self._client, self._descriptor)

    def __await__(self) -> Generator[Any, None, ReadResult]:
        return self.execute().__await__()

    async def single(self) -> SingleResult:
        """Fetch at most one row and return it unwrapped.

        Returns:
            SingleResult whose ``data`` is the row itself, or None when no row
            matched. A failed fetch keeps its error.
        """
        self._start()
        descriptor = self._descriptor.with_limit(1)
        if descriptor.range is not None:
            descriptor = descriptor.with_range(descriptor.range.start, descriptor.range.start)
        result = await _read(self._client, descriptor)
        if result.data:
            return SingleResult(data=result.data[0], error=None)
        return SingleResult(data=None, error=result.error)


async def _read(client: "Client", descriptor: QueryDescriptor) -> ReadResult:
    method = "HEAD" if descriptor.head else "GET"
    try:
        response = await client._request(
            method,
            f"/rest/v1/{descriptor.table}",
            params=build_params(descriptor),
            headers=client._headers(bearer=client.key, extra=build_headers(descriptor)),
        )
        data = [] if descriptor.head else _rows(response)
    except (ShopAdminError, ValueError) as e:
        return ReadResult(data=None, error=client._error(e, f"Query on {descriptor.table} failed"))
    count = _parse_count(response.headers.get("content-range")) if descriptor.count else None
    return ReadResult(data=data, error=None, count=count)


class TableClient:
    """Entry point returned by ``client.from_(table)``."""

    def __init__(self, client: "Client", table: str):
        self._client = client
        self.table = table

    @property
    def path(self) -> str:
        return f"/rest/v1/{self.table}"

    def select(self, columns: str = "*", *, count: str | None = None, head: bool = False) -> QueryBuilder:
        """Start a read.

        Args:
            columns: Projection, e.g. "id, name, price".
            count: Ask the service for a row total ("exact", "planned" or
                "estimated"); it is returned as ``ReadResult.count``.
            head: Send HEAD and skip the rows; useful together with ``count``.
        """
        if count is not None and count not in COUNT_MODES:
            raise ValueError(f"count must be one of {COUNT_MODES}, got {count!r}")
        descriptor = QueryDescriptor(table=self.table, projection=columns, count=count, head=head)
        return QueryBuilder(self._client, descriptor)

    async def insert(self, rows: dict[str, Any] | list[dict[str, Any]]) -> WriteResult:
        """Insert one row or a list of rows and return what was created."""
        try:
            response = await self._client._request(
                "POST",
                self.path,
                content=json_body(rows),
                headers=self._client._headers(bearer=self._client.key, extra=RETURN_REPRESENTATION),
            )
            data = _rows(response)
        except (ShopAdminError, ValueError, TypeError) as e:
            return WriteResult(data=None, error=self._client._error(e, f"Insert into {self.table} failed"))
        return WriteResult(data=data, error=None)

    def update(self, values: dict[str, Any]) -> "UpdateTarget":
        """Describe a PATCH; finish it with ``.eq(...)`` or ``.match(...)``."""
        return UpdateTarget(self, values)

    def delete(self) -> "DeleteTarget":
        """Describe a DELETE; finish it with ``.eq(...)`` or ``.match(...)``."""
        return DeleteTarget(self)

    async def _write(
        self,
        method: str,
        filters: list[Filter],
        **kwargs: Any,
    ) -> httpx.Response:
        if not filters:
            raise ShopAdminError(f"Refusing to {method} every row of {self.table}; pass a filter")
        return await self._client._request(method, self.path, params=filter_params(filters), **kwargs)


class UpdateTarget:
    def __init__(self, table: TableClient, values: dict[str, Any]):
        self._table = table
        self._values = values

    async def eq(self, column: str, value: Any) -> WriteResult:
        return await self.match({column: value})

    async def match(self, filters: dict[str, Any]) -> WriteResult:
        """PATCH every row whose columns equal ``filters``."""
        client = self._table._client
        try:
            response = await self._table._write(
                "PATCH",
                match_filters(filters),
                content=json_body(self._values),
                headers=client._headers(bearer=client.key, extra=RETURN_REPRESENTATION),
            )
            data = _rows(response)
        except (ShopAdminError, ValueError, TypeError) as e:
            return WriteResult(data=None, error=client._error(e, f"Update of {self._table.table} failed"))
        return WriteResult(data=data, error=None)


class DeleteTarget:
    def __init__(self, table: TableClient):
        self._table = table

    async def eq(self, column: str, value: Any) -> DeleteResult:
        return await self.match({column: value})

    async def match(self, filters: dict[str, Any]) -> DeleteResult:
        """DELETE every row whose columns equal ``filters``. The body is ignored."""
        client = self._table._client
        try:
            await self._table._write(
                "DELETE",
                match_filters(filters),
                headers=client._headers(bearer=client.key),
            )
        except ShopAdminError as e:
            return DeleteResult(error=client._error(e, f"Delete from {self._table.table} failed"))
        return DeleteResult(error=None)


__all__ = [
    "DeleteTarget",
    "QueryBuilder",
    "TableClient",
    "UpdateTarget",
    "build_headers",
    "build_params",
    "serialize_filter",
]
