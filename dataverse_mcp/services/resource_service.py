# -*- coding: utf-8 -*-
"""Location: ./dataverse_mcp/services/resource_service.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Resource publishing root object.

Owns the content store, catalog, identifier generator and notifier and wires
the publisher and resolver on top of them. Other components receive a
``ResourceService`` instead of reaching for module-level state.

Examples:
    >>> import asyncio
    >>> svc = ResourceService(public_base_url="http://LocalHost:3001/")
    >>> url = asyncio.run(svc.publisher.publish_markdown("n", "| a |", "Top 5 contacts"))
    >>> url
    'http://localhost:3001/dynamic/1.md'
    >>> [r.uri for r in svc.list_resources()]
    ['file://files/1.md']
"""

# Standard
from pathlib import Path
from typing import List, Optional

# First-Party
from dataverse_mcp.config import Settings
from dataverse_mcp.models import normalize_base_url, ReadResourceResult, Resource
from dataverse_mcp.services.content_store import ContentStore
from dataverse_mcp.services.identifier_service import IdentifierGenerator
from dataverse_mcp.services.notification_service import ResourceNotifier
from dataverse_mcp.services.publisher_service import ResourcePublisher
from dataverse_mcp.services.resource_catalog import ResourceCatalog
from dataverse_mcp.services.resolver_service import ResourceResolver

DEFAULT_PUBLIC_BASE_URL = "http://localhost:3001"


class ResourceService:
    """Publishing and resolution of ephemeral resources."""

    def __init__(
        self,
        public_base_url: str = DEFAULT_PUBLIC_BASE_URL,
        static_dir: Optional[Path] = None,
        scheme: str = "file",
        namespace: str = "files",
        notification_timeout: Optional[float] = 5.0,
    ) -> None:
        """Create empty store and catalog and the services using them.

        Args:
            public_base_url: Absolute http(s) prefix of public keys. Resource
                URIs travel through MCP as URLs, so relative bases are refused.
            static_dir: Static assets directory for the HTTP gateway.
            scheme: URI scheme of internal keys.
            namespace: Namespace of internal keys.
            notification_timeout: Seconds one subscriber may take to accept a
                notification; None waits indefinitely.

        Raises:
            ValueError: If ``public_base_url`` is empty or not an absolute http(s) URL.
        """
        self.store = ContentStore()
        self.catalog = ResourceCatalog()
        self.ids = IdentifierGenerator(scheme=scheme, namespace=namespace)
        self.notifier = ResourceNotifier(send_timeout=notification_timeout)
        self.publisher = ResourcePublisher(self.store, self.catalog, self.ids, self.notifier, public_base_url=normalize_base_url(public_base_url))
        self.resolver = ResourceResolver(self.store, self.catalog, static_dir=static_dir)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ResourceService":
        """Build a service from application settings.

        Args:
            settings: Application settings.

        Returns:
            ResourceService: Configured service.
        """
        return cls(
            public_base_url=settings.resolved_public_base_url,
            static_dir=settings.static_dir,
            scheme=settings.resource_scheme,
            namespace=settings.resource_namespace,
            notification_timeout=settings.notification_timeout,
        )

    def list_resources(self) -> List[Resource]:
        """List all cataloged resources.

        Returns:
            List[Resource]: Catalog snapshot.
        """
        return self.catalog.list()

    def read_resource(self, uri: str) -> ReadResourceResult:
        """Read a resource by internal or public key.

        Args:
            uri: Resource key.

        Returns:
            ReadResourceResult: Resource contents.
        """
        return self.resolver.read_resource(uri)
