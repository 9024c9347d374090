# -*- coding: utf-8 -*-
"""Location: ./dataverse_mcp/services/resource_catalog.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Resource catalog.

The catalog is the listing MCP clients see through ``resources/list``. It
only holds metadata; payloads live in the ``ContentStore``. Entries are
added by the publisher and never removed, and ``list`` returns them in
insertion order.
"""

# Standard
import threading
from typing import Dict, List, Optional

# First-Party
from dataverse_mcp.models import Resource


class ResourceCatalog:
    """Thread-safe, insertion-ordered canonical key to ``Resource`` mapping."""

    def __init__(self) -> None:
        self._items: Dict[str, Resource] = {}
        self._lock = threading.Lock()

    def list(self) -> List[Resource]:
        """Snapshot of all cataloged resources.

        Returns:
            List[Resource]: Metadata in insertion order.

        Examples:
            >>> catalog = ResourceCatalog()
            >>> catalog.upsert("file://files/1.md", Resource(uri="file://files/1.md", name="a"))
            >>> [r.uri for r in catalog.list()]
            ['file://files/1.md']
        """
        with self._lock:
            return list(self._items.values())

    def upsert(self, key: str, metadata: Resource) -> None:
        """Register ``metadata`` under ``key``.

        Args:
            key: Canonical key of the resource.
            metadata: Resource metadata.
        """
        with self._lock:
            self._items[key] = metadata

    def lookup(self, key: str) -> Optional[Resource]:
        """Find the metadata cataloged under ``key``.

        Args:
            key: Canonical key.

        Returns:
            Optional[Resource]: Metadata, or None when not cataloged.
        """
        with self._lock:
            return self._items.get(key)

    def find_by_file_name(self, file_name: str) -> Optional[Resource]:
        """Find the first entry whose key ends with ``/<file_name>``.

        Matching is case-insensitive.

        Args:
            file_name: Last path segment, e.g. ``3.html``.

        Returns:
            Optional[Resource]: Matching metadata, or None.

        Examples:
            >>> catalog = ResourceCatalog()
            >>> catalog.upsert("http://h/dynamic/3.html", Resource(uri="http://h/dynamic/3.html", name="r"))
            >>> catalog.find_by_file_name("3.HTML").uri
            'http://h/dynamic/3.html'
            >>> catalog.find_by_file_name("13.html") is None
            True
        """
        suffix = f"/{file_name}".lower()
        for resource in self.list():
            if resource.uri.lower().endswith(suffix):
                return resource
        return None

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
