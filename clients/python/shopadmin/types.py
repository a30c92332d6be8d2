"""Type definitions for the shopadmin client."""

from dataclasses import dataclass, field, replace
from typing import Any

from .exceptions import ShopAdminError, UpstreamStatusError

# Filter operators understood by the REST layer, keyed by builder method.
OPERATORS = ("eq", "neq", "gt", "lt", "gte", "lte", "is", "in", "contains", "textSearch")


@dataclass(frozen=True)
class Filter:
    """A single ``column=operator.value`` predicate."""

    column: str
    operator: str
    value: Any

    def __post_init__(self) -> None:
        if self.operator not in OPERATORS:
            raise ValueError(f"Unknown filter operator: {self.operator!r}")


@dataclass(frozen=True)
class OrderBy:
    column: str
    ascending: bool = True


@dataclass(frozen=True)
class RowRange:
    """Inclusive row window sent as a ``Range`` header."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0 or self.end < self.start:
            raise ValueError(f"Invalid range: {self.start}-{self.end}")


@dataclass(frozen=True)
class QueryDescriptor:
    """Accumulated, not-yet-executed description of a read request.

    Every ``with_*`` method returns a copy; a descriptor never changes after
    construction, so earlier builder stages stay valid.
    """

    table: str
    projection: str = "*"
    filters: tuple[Filter, ...] = ()
    order_by: OrderBy | None = None
    limit: int | None = None
    range: RowRange | None = None
    count: str | None = None
    head: bool = False

    def with_filter(self, column: str, operator: str, value: Any) -> "QueryDescriptor":
        return replace(self, filters=self.filters + (Filter(column, operator, value),))

    def with_order(self, column: str, ascending: bool = True) -> "QueryDescriptor":
        return replace(self, order_by=OrderBy(column, ascending))

    def with_limit(self, count: int) -> "QueryDescriptor":
        if count < 0:
            raise ValueError(f"Invalid limit: {count}")
        return replace(self, limit=count)

    def with_range(self, start: int, end: int) -> "QueryDescriptor":
        return replace(self, range=RowRange(start, end))


@dataclass
class User:
    """The authenticated account attached to a session."""

    id: str
    email: str | None = None
    is_admin: bool = False
    display_name: str | None = None
    raw: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "User":
        return cls(
            id=data.get("id", ""),
            email=data.get("email"),
            is_admin=bool(data.get("is_admin", False)),
            display_name=data.get("display_name"),
            raw=dict(data),
        )

    def to_dict(self) -> dict[str, Any]:
        data = dict(self.raw)
        data.update(
            id=self.id,
            email=self.email,
            is_admin=self.is_admin,
            display_name=self.display_name,
        )
        return data


@dataclass
class Session:
    """An access token together with its user."""

    access_token: str
    user: User
    token_type: str = "bearer"
    refresh_token: str | None = None
    expires_in: int | None = None
    expires_at: int | None = None

    @classmethod
    def from_response(cls, response: dict[str, Any]) -> "Session":
        """Create Session from an auth token response.

        Raises:
            ValueError: The response lacks the token or the user.
        """
        token = response.get("access_token")
        user = response.get("user")
        if not token or not isinstance(user, dict) or not user.get("id"):
            raise ValueError("Malformed session: access_token and user are required")
        return cls(
            access_token=token,
            user=User.from_dict(user),
            token_type=response.get("token_type", "bearer"),
            refresh_token=response.get("refresh_token"),
            expires_in=response.get("expires_in"),
            expires_at=response.get("expires_at"),
        )

    from_dict = from_response

    def to_dict(self) -> dict[str, Any]:
        return {
            "access_token": self.access_token,
            "token_type": self.token_type,
            "refresh_token": self.refresh_token,
            "expires_in": self.expires_in,
            "expires_at": self.expires_at,
            "user": self.user.to_dict(),
        }


@dataclass
class ErrorInfo:
    """Human-readable failure description carried by every result envelope."""

    message: str
    status: int | None = None
    code: str | None = None
    details: str | None = None
    hint: str | None = None

    @classmethod
    def from_exception(cls, exc: BaseException, secret: str | None = None) -> "ErrorInfo":
        """Build an ErrorInfo, scrubbing ``secret`` from every text field."""

        def scrub(text: str | None) -> str | None:
            if text and secret:
                return text.replace(secret, "***")
            return text

        if isinstance(exc, ShopAdminError):
            message = exc.message
            status, code = exc.status, exc.code
        else:
            message = str(exc) or exc.__class__.__name__
            status = code = None
        details = hint = None
        if isinstance(exc, UpstreamStatusError):
            details, hint = exc.details, exc.hint
        return cls(
            message=scrub(message) or "",
            status=status,
            code=code,
            details=scrub(details),
            hint=scrub(hint),
        )


class _Envelope:
    error: ErrorInfo | None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class ReadResult(_Envelope):
    """Result of a select: a list of rows, or an error."""

    data: list[dict[str, Any]] | None = None
    error: ErrorInfo | None = None
    count: int | None = None


@dataclass
class SingleResult(_Envelope):
    """Result of ``single()``: one row (not a list), None, or an error."""

    data: dict[str, Any] | None = None
    error: ErrorInfo | None = None


@dataclass
class WriteResult(_Envelope):
    """Result of an insert or update: the rows the service returned."""

    data: list[dict[str, Any]] | None = None
    error: ErrorInfo | None = None


@dataclass
class DeleteResult(_Envelope):
    """Result of a delete or sign-out: only the error field."""

    error: ErrorInfo | None = None


@dataclass
class AuthResult(_Envelope):
    data: Session | None = None
    error: ErrorInfo | None = None


@dataclass
class SessionResult(_Envelope):
    session: Session | None = None
    error: ErrorInfo | None = None

    @property
    def data(self) -> dict[str, Session | None]:
        return {"session": self.session}


@dataclass
class UploadResult(_Envelope):
    data: dict[str, Any] | None = None
    error: ErrorInfo | None = None


@dataclass(frozen=True)
class PublicUrl:
    public_url: str

    @property
    def data(self) -> dict[str, str]:
        return {"publicUrl": self.public_url}
