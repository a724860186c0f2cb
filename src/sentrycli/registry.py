"""Per-profile client pool.

One ``ClientRegistry`` lives for the whole process (or REPL session). It owns
the loaded configuration together with one lazily created client per profile
name. ``clear_all`` drops both at once, so the next lookup re-reads the
configuration file and never pairs fresh settings with a stale client.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from pathlib import Path

from .config import (
    ClientOptions,
    SentryConfig,
    find_project_root,
    load_config,
    resolve_client_options,
)
from .logging import get_logger
from .sentry_rest import SentryRestClient

ClientFactory = Callable[[ClientOptions], SentryRestClient]
ConfigLoader = Callable[[Path], SentryConfig]


def build_client(options: ClientOptions) -> SentryRestClient:
    return SentryRestClient(
        token=options.auth_token,
        organization=options.organization,
        base_url=options.base_url,
    )


class ClientRegistry:
    def __init__(
        self,
        root: str | Path | None = None,
        *,
        loader: ConfigLoader = load_config,
        client_factory: ClientFactory = build_client,
    ) -> None:
        self.root = Path(root) if root is not None else find_project_root()
        self._loader = loader
        self._factory = client_factory
        self._config: SentryConfig | None = None
        self._clients: dict[str, SentryRestClient] = {}
        self._lock = threading.Lock()
        self.logger = get_logger()

    def init(self) -> SentryConfig:
        """Return the cached configuration, loading it on first use.

        Load failures propagate and leave nothing cached.
        """
        with self._lock:
            return self._ensure_config()

    def _ensure_config(self) -> SentryConfig:
        if self._config is None:
            self._config = self._loader(self.root)
            self.logger.debug("configuration cached", root=str(self.root))
        return self._config

    def get_client(self, profile_name: str) -> SentryRestClient:
        with self._lock:
            client = self._clients.get(profile_name)
            if client is not None:
                return client
            options = resolve_client_options(self._ensure_config(), profile_name)
            client = self._factory(options)
            self._clients[profile_name] = client
            self.logger.info(
                "client created",
                profile=profile_name,
                organization=options.organization,
                base_url=options.base_url,
            )
            return client

    def has_client(self, profile_name: str) -> bool:
        with self._lock:
            return profile_name in self._clients

    def __len__(self) -> int:
        with self._lock:
            return len(self._clients)

    def clear_all(self) -> None:
        with self._lock:
            clients = list(self._clients.values())
            self._clients.clear()
            self._config = None
        for client in clients:
            close = getattr(client, "close", None)
            if callable(close):
                close()
        if clients:
            self.logger.info("client pool cleared", released=len(clients))


__all__ = ["ClientRegistry", "build_client"]
