"""shopadmin Python Client.

An async client for the admin dashboard's hosted data platform: REST tables,
password auth with admin gating, and object storage.

Usage:
    from shopadmin import create_client

    client = create_client("https://xyz.supabase.co", "service-key")

    # Sign in (administrators only)
    result = await client.auth.sign_in("admin@example.com", "secret")

    # Query rows
    orders = await (
        client.from_("orders")
        .select("*")
        .eq("status", "completed")
        .order("created_at", ascending=False)
    )

    # Fetch one row
    product = await client.from_("products").select("*").eq("id", 7).single()

    # Insert, update, delete
    await client.from_("products").insert([{"name": "Mug", "price": 9.5}])
    await client.from_("products").update({"price": 8.0}).eq("id", 7)
    await client.from_("order_items").delete().eq("order_id", 3)

Every operation returns a result envelope with ``data`` and ``error``
instead of raising.
"""

from .client import Client, create_client
from .config import ConfigStore, SupabaseConfig, client_from_config
from .edits import merge_edits, update_row
from .exceptions import (
    AuthorizationError,
    ConfigurationError,
    QueryStateError,
    ShopAdminError,
    TransportError,
    UpstreamStatusError,
)
from .session_store import FileSessionStore, MemorySessionStore
from .storage import UploadOptions, unique_object_name
from .types import (
    AuthResult,
    DeleteResult,
    ErrorInfo,
    PublicUrl,
    QueryDescriptor,
    ReadResult,
    Session,
    SessionResult,
    SingleResult,
    UploadResult,
    User,
    WriteResult,
)

__version__ = "0.1.0"
__all__ = [
    "Client",
    "create_client",
    "ConfigStore",
    "SupabaseConfig",
    "client_from_config",
    "merge_edits",
    "update_row",
    "ShopAdminError",
    "TransportError",
    "UpstreamStatusError",
    "AuthorizationError",
    "QueryStateError",
    "ConfigurationError",
    "FileSessionStore",
    "MemorySessionStore",
    "UploadOptions",
    "unique_object_name",
    "AuthResult",
    "DeleteResult",
    "ErrorInfo",
    "PublicUrl",
    "QueryDescriptor",
    "ReadResult",
    "Session",
    "SessionResult",
    "SingleResult",
    "UploadResult",
    "User",
    "WriteResult",
]
