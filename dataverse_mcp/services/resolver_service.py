# -*- coding: utf-8 -*-
"""Location: ./dataverse_mcp/services/resolver_service.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Resource resolution.

Two ways to get published content back:

- ``read_resource`` answers MCP ``resources/read`` for internal or public keys.
- ``resolve_dynamic_file`` answers ``GET /dynamic/{file}``. A static asset
  with the requested name always wins over published content.
"""

# Standard
import base64
from dataclasses import dataclass
import logging
import mimetypes
from pathlib import Path
from typing import Optional

# First-Party
from dataverse_mcp.models import BlobResourceContents, ContentKind, ReadResourceResult, TextResourceContents
from dataverse_mcp.services.content_store import ContentStore
from dataverse_mcp.services.resource_catalog import ResourceCatalog

logger = logging.getLogger(__name__)

PATH_SEPARATORS = ("/", "\\")
SERVABLE_MIME_TYPES = frozenset(kind.value for kind in ContentKind)


class ResourceError(Exception):
    """Base class for resource resolution errors."""


class ResourceNotFoundError(ResourceError):
    """Raised when a key is neither cataloged nor stored.

    Examples:
        >>> str(ResourceNotFoundError("file://files/9.md"))
        'Unknown resource: file://files/9.md'
    """

    def __init__(self, uri: str):
        """Initialize with the unknown key.

        Args:
            uri: The key that was requested.
        """
        self.uri = uri
        super().__init__(f"Unknown resource: {uri}")


class NoStoredContentError(ResourceError):
    """Raised when a cataloged key has no stored content.

    Catalog and store only diverge through a programming error.
    """

    def __init__(self, uri: str):
        """Initialize with the cataloged key.

        Args:
            uri: The key that was requested.
        """
        self.uri = uri
        super().__init__(f"No stored content for resource: {uri}")


class InvalidPathError(ResourceError):
    """Raised when a requested file name contains a path separator."""

    def __init__(self, file_name: str):
        """Initialize with the rejected name.

        Args:
            file_name: The rejected file name.
        """
        self.file_name = file_name
        super().__init__(f"Invalid file name: {file_name!r}")


@dataclass(frozen=True)
class ResolvedFile:
    """Bytes and media type served for a ``/dynamic`` request.

    Attributes:
        media_type: Response media type.
        content: Payload bytes, None when ``path`` should be streamed instead.
        path: Static asset to serve, when the request hit one.
    """

    media_type: str
    content: Optional[bytes] = None
    path: Optional[Path] = None

    @property
    def is_static(self) -> bool:
        """Whether the request was served from the static assets directory.

        Returns:
            bool: True for static assets.
        """
        return self.path is not None


class ResourceResolver:
    """Looks published content up by catalog key or public file name."""

    def __init__(self, store: ContentStore, catalog: ResourceCatalog, static_dir: Optional[Path] = None) -> None:
        """Initialize the resolver.

        Args:
            store: Content store to read payloads from.
            catalog: Catalog to search.
            static_dir: Directory of static assets served before dynamic content.
        """
        self._store = store
        self._catalog = catalog
        self.static_dir = Path(static_dir) if static_dir is not None else None

    def read_resource(self, uri: str) -> ReadResourceResult:
        """Read a resource by internal or public key.

        Args:
            uri: Any key the resource was stored or cataloged under.

        Returns:
            ReadResourceResult: One text or base64 blob content item.

        Raises:
            ResourceNotFoundError: When the key is neither cataloged nor stored.
            NoStoredContentError: When the key is cataloged but nothing is stored under it.
        """
        resource = self._catalog.lookup(uri)
        entry = self._store.get(uri)
        if entry is None:
            if resource is None:
                raise ResourceNotFoundError(uri)
            raise NoStoredContentError(uri)

        mime_type = ContentKind(entry.content_kind).value
        if ContentKind(entry.content_kind).is_textual:
            contents = TextResourceContents(uri=uri, mime_type=mime_type, text=entry.as_text())
        else:
            contents = BlobResourceContents(uri=uri, mime_type=mime_type, blob=base64.b64encode(entry.as_bytes()).decode("ascii"))
        return ReadResourceResult(contents=[contents])

    def static_file(self, file_name: str) -> Optional[Path]:
        """Find a static asset named exactly ``file_name``.

        Args:
            file_name: Separator-free file name.

        Returns:
            Optional[Path]: The asset path, or None.
        """
        if self.static_dir is None:
            return None
        candidate = self.static_dir / file_name
        return candidate if candidate.is_file() else None

    def resolve_dynamic_file(self, file_name: str) -> ResolvedFile:
        """Resolve ``GET /dynamic/{file_name}``.

        Args:
            file_name: Requested file name, e.g. ``3.html``.

        Returns:
            ResolvedFile: Static asset or published payload.

        Raises:
            InvalidPathError: When ``file_name`` contains a path separator.
            ResourceNotFoundError: When nothing matches.
        """
        if not file_name or any(sep in file_name for sep in PATH_SEPARATORS):
            raise InvalidPathError(file_name)

        static = self.static_file(file_name)
        if static is not None:
            media_type = mimetypes.guess_type(static.name)[0] or "application/octet-stream"
            return ResolvedFile(media_type=media_type, path=static)

        if ContentKind.from_extension(Path(file_name).suffix) is None:
            raise ResourceNotFoundError(file_name)

        resource = self._catalog.find_by_file_name(file_name)
        if resource is None or resource.mime_type not in SERVABLE_MIME_TYPES:
            raise ResourceNotFoundError(file_name)

        entry = self._store.get(resource.uri)
        if entry is None:
            logger.error(f"Catalog entry {resource.uri} has no stored content")
            raise ResourceNotFoundError(file_name)

        return ResolvedFile(media_type=ContentKind(entry.content_kind).value, content=entry.as_bytes())
