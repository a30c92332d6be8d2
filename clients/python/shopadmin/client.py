"""Connection handle for the hosted data platform."""

import logging
from typing import Any

import httpx

from .auth import AuthClient
from .exceptions import ConfigurationError, TransportError, UpstreamStatusError
from .query import TableClient
from .session_store import SESSION_SLOT, FileSessionStore, SessionStore
from .storage import StorageClient
from .types import ErrorInfo, ReadResult, Session

logger = logging.getLogger(__name__)


class Client:
    """Async client for the platform's REST, auth and storage APIs.

    Construction never touches the network; failures surface when an
    operation runs, as the ``error`` field of its result.

    Args:
        url: Project endpoint (e.g., "https://xyz.supabase.co").
        key: API key sent as ``apikey`` and as the bearer credential.
        session_store: Durable slot store for the signed-in session.
            Defaults to a :class:`~shopadmin.session_store.FileSessionStore`.
        timeout: Request timeout in seconds; the transport default when None.
        http_client: Pre-built ``httpx.AsyncClient`` to send requests with.
            The caller keeps ownership of it.

    Example:
        >>> client = Client("https://xyz.supabase.co", "anon-key")
        >>> result = await client.from_("orders").select("*").eq("status", "completed")
        >>> print(f"Found {len(result.data)} orders")
    """

    def __init__(
        self,
        url: str,
        key: str,
        *,
        session_store: SessionStore | None = None,
        timeout: float | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        if not isinstance(url, str) or not url.strip():
            raise ConfigurationError("A project URL is required")
        if not isinstance(key, str) or not key.strip():
            raise ConfigurationError("An API key is required")
        self._url = url.strip().rstrip("/")
        self._key = key.strip()
        self._session: Session | None = None
        self.session_store = session_store if session_store is not None else FileSessionStore()

        if http_client is not None:
            self._client = http_client
            self._owns_client = False
        else:
            kwargs: dict[str, Any] = {}
            if timeout is not None:
                kwargs["timeout"] = timeout
            self._client = httpx.AsyncClient(**kwargs)
            self._owns_client = True

        self.auth = AuthClient(self)
        self.storage = StorageClient(self)

    @property
    def url(self) -> str:
        return self._url

    @property
    def key(self) -> str:
        return self._key

    @property
    def session(self) -> Session | None:
        return self._session

    def __repr__(self) -> str:
        return f"Client(url={self._url!r})"

    async def close(self) -> None:
        """Close the HTTP client if this handle created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "Client":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    def from_(self, table: str) -> TableClient:
        """Start a request against ``table``."""
        if not table:
            raise ValueError("A table name is required")
        return TableClient(self, table)

    table = from_

    async def check_connection(self, table: str = "products") -> ReadResult:
        """Verify the endpoint and key by counting the rows of ``table``.

        Returns:
            ReadResult whose ``count`` is the exact number of rows.
        """
        result = await self.from_(table).select("*", count="exact", head=True).execute()
        if result.ok:
            logger.info("Connected to %s, %s rows in %s", self._url, result.count, table)
        return result

    def _set_session(self, session: Session | None) -> None:
        """Replace the session wholesale, in memory and in the durable slot."""
        self._session = session
        if session is None:
            self.session_store.remove(SESSION_SLOT)
        else:
            self.session_store.save(SESSION_SLOT, session.to_dict())

    def _headers(self, *, bearer: str | None = None, extra: dict[str, str] | None = None) -> dict[str, str]:
        headers = {"apikey": self._key}
        if bearer is not None:
            headers["Authorization"] = f"Bearer {bearer}"
        if extra:
            headers.update(extra)
        return headers

    def _error(self, exc: BaseException, context: str) -> ErrorInfo:
        """Convert an internal failure to the ErrorInfo handed to callers."""
        error = ErrorInfo.from_exception(exc, secret=self._key)
        logger.warning("%s: %s", context, error.message)
        return error

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: list[tuple[str, str]] | None = None,
        headers: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        """Send one request and return the response.

        Raises:
            TransportError: No response was received.
            UpstreamStatusError: The response status was not 2xx.
        """
        url = f"{self._url}{path}"
        logger.debug("%s %s", method, path)
        try:
            response = await self._client.request(method, url, params=params, headers=headers, **kwargs)
            response.raise_for_status()
            return response
        except httpx.HTTPStatusError as e:
            raise _status_error(e.response)
        except httpx.HTTPError as e:
            raise TransportError(f"Request to {path} failed: {e}")


def _status_error(response: httpx.Response) -> UpstreamStatusError:
    """Fold a non-2xx response into an UpstreamStatusError."""
    status = response.status_code
    text = response.text.strip() if response.content else ""
    body: Any = None
    if response.content:
        try:
            body = response.json()
        except ValueError:
            body = None
    if isinstance(body, dict):
        message = (
            body.get("error_description")
            or body.get("message")
            or body.get("msg")
            or body.get("error")
            or f"Request failed with status {status}"
        )
        code = body.get("code") or body.get("error_code")
        return UpstreamStatusError(
            str(message),
            str(code) if code is not None else None,
            status,
            details=body.get("details"),
            hint=body.get("hint"),
            body=text,
        )
    message = f"Request failed with status {status}"
    if text:
        message = f"{message}: {text[:200]}"
    return UpstreamStatusError(message, status=status, body=text)


def create_client(url: str, key: str, **options: Any) -> Client:
    """Create a :class:`Client`; keyword options are passed through."""
    return Client(url, key, **options)
