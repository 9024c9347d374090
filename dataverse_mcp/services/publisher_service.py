# -*- coding: utf-8 -*-
"""Location: ./dataverse_mcp/services/publisher_service.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Resource publisher.

Turns generated content into addressable MCP resources:

1. issue a fresh identifier and build the internal and public keys,
2. store one shared entry under both keys,
3. catalog the resource under its canonical key,
4. emit ``list_changed`` and ``updated`` notifications.

Steps 1-3 run without awaiting, so a cancelled tool call either publishes
completely or not at all, and an observer reacting to a notification always
finds the content already resolvable.

Markdown resources are cataloged under their internal ``file://`` key while
the caller receives the public URL; HTML resources are cataloged under the
public URL.
"""

# Standard
import logging
from typing import Optional, Protocol

# First-Party
from dataverse_mcp.models import ContentKind, normalize_base_url, Resource
from dataverse_mcp.services.content_store import ContentStore, ResourceEntry
from dataverse_mcp.services.identifier_service import IdentifierGenerator, IssuedKey
from dataverse_mcp.services.resource_catalog import ResourceCatalog

logger = logging.getLogger(__name__)

DYNAMIC_PATH = "/dynamic"


class NotificationChannel(Protocol):
    """Receiver of catalog change signals."""

    async def resource_list_changed(self) -> object:
        """Signal that the catalog listing changed."""

    async def resource_updated(self, uri: str) -> object:
        """Signal that the resource cataloged under ``uri`` changed.

        Args:
            uri: Canonical key of the resource.
        """


class ResourcePublisher:
    """Publishes generated markdown and HTML as resources."""

    def __init__(
        self,
        store: ContentStore,
        catalog: ResourceCatalog,
        id_generator: IdentifierGenerator,
        notifier: Optional[NotificationChannel] = None,
        public_base_url: str = "",
    ) -> None:
        """Initialize the publisher.

        Args:
            store: Content store receiving payloads.
            catalog: Catalog receiving metadata.
            id_generator: Source of identifiers and internal keys.
            notifier: Channel for change notifications; None disables them.
            public_base_url: Prefix of public keys, normalized with
                ``normalize_base_url``; ``""`` for bare ``/dynamic/...`` paths.

        Raises:
            ValueError: If ``public_base_url`` is set but not an absolute http(s) URL.
        """
        self._store = store
        self._catalog = catalog
        self._ids = id_generator
        self._notifier = notifier
        self.public_base_url = normalize_base_url(public_base_url) if public_base_url else ""

    def public_key_for(self, issued: IssuedKey) -> str:
        """Public HTTP address of an issued key.

        Args:
            issued: The issued identifier.

        Returns:
            str: ``<base-url>/dynamic/<id>.<ext>``.

        Examples:
            >>> from dataverse_mcp.services.identifier_service import IssuedKey
            >>> p = ResourcePublisher(ContentStore(), ResourceCatalog(), IdentifierGenerator(), public_base_url="http://localhost:3001/")
            >>> p.public_key_for(IssuedKey(3, "html", "file://files/3.html"))
            'http://localhost:3001/dynamic/3.html'
        """
        return f"{self.public_base_url}{DYNAMIC_PATH}/{issued.file_name}"

    async def publish_markdown(self, name: str, content: str, description: str) -> str:
        """Publish a markdown document.

        Args:
            name: Display name and title.
            content: Markdown text.
            description: Description shown in the catalog.

        Returns:
            str: Public URL of the document.
        """
        issued, public_key = self._store_content(ContentKind.MARKDOWN, name, content, description)
        await self._register(Resource(uri=issued.internal_key, name=name, title=name, description=description, mime_type=ContentKind.MARKDOWN.value))
        return public_key

    async def publish_html(self, name: str, content: str, description: str) -> str:
        """Publish an HTML page.

        Args:
            name: Display name and title.
            content: HTML text.
            description: Description shown in the catalog.

        Returns:
            str: Public URL of the page, which is also its catalog key.
        """
        _, public_key = self._store_content(ContentKind.HTML, name, content, description)
        await self._register(Resource(uri=public_key, name=name, title=name, description=description, mime_type=ContentKind.HTML.value))
        return public_key

    def _store_content(self, kind: ContentKind, name: str, content: str, description: str) -> tuple[IssuedKey, str]:
        """Issue keys and store the payload under both of them.

        Args:
            kind: Content kind of the payload.
            name: Display name.
            content: Text payload.
            description: Catalog description.

        Returns:
            tuple[IssuedKey, str]: Issued key and public key.
        """
        issued = self._ids.next(kind.extension)
        public_key = self.public_key_for(issued)
        entry = ResourceEntry(
            content_kind=kind,
            text=content,
            id=issued.id,
            internal_key=issued.internal_key,
            public_key=public_key,
            display_name=name,
            description=description,
        )
        self._store.put_entry((issued.internal_key, public_key), entry)
        return issued, public_key

    async def _register(self, resource: Resource) -> None:
        """Catalog ``resource`` and announce the change.

        Args:
            resource: Metadata keyed by its canonical URI.
        """
        self._catalog.upsert(resource.uri, resource)
        logger.info(f"Published {resource.mime_type} resource {resource.uri} ({resource.description!r})")

        if self._notifier is None:
            return
        try:
            await self._notifier.resource_list_changed()
        except Exception as e:
            logger.warning(f"list_changed notification failed for {resource.uri}: {e}")
        try:
            await self._notifier.resource_updated(resource.uri)
        except Exception as e:
            logger.warning(f"updated notification failed for {resource.uri}: {e}")
