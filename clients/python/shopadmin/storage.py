"""Object storage: uploads and public URLs."""

import logging
import mimetypes
import secrets
import time
from dataclasses import dataclass
from pathlib import Path
from typing import IO, TYPE_CHECKING, Any

from .exceptions import ShopAdminError, UpstreamStatusError
from .types import PublicUrl, UploadResult

if TYPE_CHECKING:
    from .client import Client

logger = logging.getLogger(__name__)

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def unique_object_name(filename: str) -> str:
    """Return a collision-resistant object name keeping ``filename``'s extension.

    The service does not coordinate concurrent uploads to the same name, so
    callers generate one of these per upload.

    Example:
        >>> unique_object_name("photo.JPG")
        '1760870400123-k3j9x0q2mz1a.JPG'
    """
    suffix = "".join(secrets.choice(_BASE36) for _ in range(12))
    stem = f"{int(time.time() * 1000)}-{suffix}"
    ext = Path(filename).suffix
    return f"{stem}{ext}"


@dataclass
class UploadOptions:
    """Per-upload settings.

    Args:
        cache_control: Seconds the object may be cached, sent as max-age.
        upsert: Overwrite an existing object with the same name.
        content_type: MIME type; guessed from the name when None.
    """

    cache_control: int | str | None = None
    upsert: bool = False
    content_type: str | None = None

    @classmethod
    def coerce(cls, options: "UploadOptions | dict[str, Any] | None") -> "UploadOptions":
        if options is None:
            return cls()
        if isinstance(options, cls):
            return options
        return cls(**options)


class StorageClient:
    """Storage API wrapper available as ``client.storage``."""

    def __init__(self, client: "Client"):
        self._client = client

    def from_(self, bucket: str) -> "BucketClient":
        if not bucket:
            raise ValueError("A bucket name is required")
        return BucketClient(self._client, bucket)


class BucketClient:
    def __init__(self, client: "Client", bucket: str):
        self._client = client
        self.bucket = bucket

    async def upload(
        self,
        path: str,
        file: bytes | IO[bytes] | Path,
        options: UploadOptions | dict[str, Any] | None = None,
    ) -> UploadResult:
        """Upload ``file`` as ``path`` inside the bucket.

        Args:
            path: Object name, e.g. from :func:`unique_object_name`.
            file: Raw bytes, a binary file object or a filesystem path.
            options: :class:`UploadOptions` or a dict of its fields.

        Returns:
            UploadResult with the service's response (normally ``{"Key": ...}``),
            or an error whose message carries the HTTP status.
        """
        client = self._client
        try:
            opts = UploadOptions.coerce(options)
            content = Path(file).read_bytes() if isinstance(file, Path) else file
            content_type = (
                opts.content_type or mimetypes.guess_type(path)[0] or "application/octet-stream"
            )
            extra = {"x-upsert": "true" if opts.upsert else "false"}
            if opts.cache_control is not None:
                extra["cache-control"] = f"max-age={opts.cache_control}"
            response = await client._request(
                "POST",
                f"/storage/v1/object/{self.bucket}/{path}",
                files={"file": (Path(path).name, content, content_type)},
                headers=client._headers(bearer=client.key, extra=extra),
            )
            data = response.json() if response.content else {}
        except UpstreamStatusError as e:
            failure = UpstreamStatusError(
                f"Upload failed: {e.status} {e.body or e.message}".rstrip(),
                e.code,
                e.status,
            )
            return UploadResult(data=None, error=client._error(failure, f"Upload to {self.bucket} failed"))
        except (ShopAdminError, ValueError, TypeError, OSError) as e:
            return UploadResult(data=None, error=client._error(e, f"Upload to {self.bucket} failed"))
        logger.info("Uploaded %s to bucket %s", path, self.bucket)
        return UploadResult(data=data, error=None)

    def get_public_url(self, path: str) -> PublicUrl:
        """Public URL of ``path``; no request is made, the object may not exist."""
        return PublicUrl(f"{self._client.url}/storage/v1/object/public/{self.bucket}/{path}")
