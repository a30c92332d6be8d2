"""shopadmin client exceptions.

These are raised inside the client and converted to :class:`~shopadmin.types.ErrorInfo`
at every public operation. Only :class:`ConfigurationError` and
:class:`QueryStateError` ever reach calling code as exceptions.
"""


class ShopAdminError(Exception):
    """Base exception for shopadmin errors."""

    def __init__(self, message: str, code: str | None = None, status: int | None = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status = status


class TransportError(ShopAdminError):
    """The request never produced an HTTP response."""

    pass


class UpstreamStatusError(ShopAdminError):
    """The service answered with a non-2xx status."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        status: int | None = None,
        details: str | None = None,
        hint: str | None = None,
        body: str | None = None,
    ):
        super().__init__(message, code, status)
        self.details = details
        self.hint = hint
        self.body = body


class AuthorizationError(ShopAdminError):
    """Signed in, but the account is not an administrator."""

    pass


class QueryStateError(ShopAdminError, RuntimeError):
    """A query builder was used after it was executed."""

    pass


class ConfigurationError(ShopAdminError, ValueError):
    """Missing or invalid endpoint/credential."""

    pass
