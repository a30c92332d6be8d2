"""Endpoint and key configuration for the dashboard.

Values saved with :meth:`ConfigStore.set_supabase_config` take priority;
otherwise ``SUPABASE_URL`` and ``SUPABASE_SERVICE_ROLE_KEY`` are read from
the environment.
"""

import json
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .exceptions import ConfigurationError
from .session_store import default_home

logger = logging.getLogger(__name__)

URL_ENV = "SUPABASE_URL"
KEY_ENV = "SUPABASE_SERVICE_ROLE_KEY"


@dataclass(frozen=True)
class SupabaseConfig:
    url: str
    key: str

    @property
    def is_configured(self) -> bool:
        return bool(self.url and self.key)

    def __repr__(self) -> str:
        # never print the key
        return f"SupabaseConfig(url={self.url!r}, is_configured={self.is_configured})"


class ConfigStore:
    """JSON file holding ``supabase.url`` and ``supabase.key``.

    Args:
        path: Config file; ``<shopadmin home>/config.json`` by default.
        environ: Mapping consulted for the fallback variables
            (``os.environ`` by default).
    """

    def __init__(self, path: str | Path | None = None, environ: Mapping[str, str] | None = None):
        self.path = Path(path) if path else default_home() / "config.json"
        self._environ = environ if environ is not None else os.environ

    def _read(self) -> dict[str, Any]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except json.JSONDecodeError:
            logger.warning("Ignoring malformed config file %s", self.path)
            return {}
        return data if isinstance(data, dict) else {}

    def get_supabase_config(self) -> SupabaseConfig:
        stored = self._read()
        stored_url = stored.get("supabase.url") or ""
        stored_key = stored.get("supabase.key") or ""
        config = SupabaseConfig(
            url=stored_url or self._environ.get(URL_ENV, ""),
            key=stored_key or self._environ.get(KEY_ENV, ""),
        )
        if config.is_configured:
            source = "stored configuration" if stored_url and stored_key else "environment variables"
            logger.debug("Using configuration from %s", source)
        return config

    def set_supabase_config(self, url: str, key: str) -> SupabaseConfig:
        data = self._read()
        data["supabase.url"] = url
        data["supabase.key"] = key
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        return SupabaseConfig(url=url, key=key)


def client_from_config(store: ConfigStore | None = None, **options: Any):
    """Build a :class:`~shopadmin.client.Client` from the stored configuration.

    Raises:
        ConfigurationError: No URL or key is configured.
    """
    from .client import Client

    config = (store or ConfigStore()).get_supabase_config()
    if not config.is_configured:
        raise ConfigurationError(
            f"Not configured: save a URL and key or set {URL_ENV} and {KEY_ENV}"
        )
    return Client(config.url, config.key, **options)
