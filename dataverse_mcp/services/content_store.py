# -*- coding: utf-8 -*-
"""Location: ./dataverse_mcp/services/content_store.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

In-memory content store for published resources.

Every key a client may resolve (internal ``file://`` key or public
``/dynamic`` URL) maps to a ``ResourceEntry``. One entry can be stored
under several keys; the keys then share the same object, so both
addresses always yield identical bytes.

Examples:
    >>> store = ContentStore()
    >>> entry = store.put("file://files/1.md", ContentKind.MARKDOWN, text="# hi")
    >>> store.get("file://files/1.md").as_bytes()
    b'# hi'
    >>> store.get("file://files/404.md") is None
    True
"""

# Standard
from dataclasses import dataclass
import threading
from typing import Dict, Iterable, Optional

# First-Party
from dataverse_mcp.models import ContentKind


@dataclass(frozen=True)
class ResourceEntry:
    """One published artifact.

    Attributes:
        content_kind: How the payload is interpreted and served.
        text: Text payload, when the artifact is textual.
        binary: Binary payload; derived from ``text`` on demand when absent.
        id: Identifier assigned at publish time, 0 for entries put directly.
        internal_key: ``file://`` key of the artifact, if any.
        public_key: Public ``/dynamic`` URL of the artifact, if any.
        display_name: Name shown in the catalog.
        description: Description shown in the catalog.
    """

    content_kind: ContentKind
    text: Optional[str] = None
    binary: Optional[bytes] = None
    id: int = 0
    internal_key: Optional[str] = None
    public_key: Optional[str] = None
    display_name: Optional[str] = None
    description: Optional[str] = None

    def __post_init__(self) -> None:
        if (self.text is None) == (self.binary is None):
            raise ValueError("ResourceEntry needs exactly one of text or binary")

    def as_bytes(self) -> bytes:
        """Payload as bytes, UTF-8 encoding text payloads.

        Returns:
            bytes: The raw payload.
        """
        if self.binary is not None:
            return self.binary
        return self.text.encode("utf-8")

    def as_text(self) -> str:
        """Payload as text, UTF-8 decoding binary payloads.

        Returns:
            str: The textual payload.
        """
        if self.text is not None:
            return self.text
        return self.binary.decode("utf-8", errors="replace")


class ContentStore:
    """Thread-safe key to ``ResourceEntry`` mapping.

    Callers never lock; ``put`` and ``get`` may be called from any number of
    threads and event loop tasks at once.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, ResourceEntry] = {}
        self._lock = threading.Lock()

    def put(self, key: str, content_kind: ContentKind, text: Optional[str] = None, binary: Optional[bytes] = None) -> ResourceEntry:
        """Insert or overwrite the entry stored under ``key``.

        Args:
            key: Opaque lookup key.
            content_kind: Kind of the payload.
            text: Text payload.
            binary: Binary payload, mutually exclusive with ``text``.

        Returns:
            ResourceEntry: The stored entry.
        """
        entry = ResourceEntry(content_kind=ContentKind(content_kind), text=text, binary=binary)
        self.put_entry((key,), entry)
        return entry

    def put_entry(self, keys: Iterable[str], entry: ResourceEntry) -> None:
        """Store a single entry under every key in ``keys`` atomically.

        Args:
            keys: Keys that should resolve to ``entry``.
            entry: Shared entry object.
        """
        keys = tuple(keys)
        with self._lock:
            for key in keys:
                self._entries[key] = entry

    def get(self, key: str) -> Optional[ResourceEntry]:
        """Look up the entry for ``key``.

        Args:
            key: Opaque lookup key.

        Returns:
            Optional[ResourceEntry]: The entry, or None when the key is unknown.
        """
        with self._lock:
            return self._entries.get(key)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
