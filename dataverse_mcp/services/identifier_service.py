# -*- coding: utf-8 -*-
"""Location: ./dataverse_mcp/services/identifier_service.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Identifier generation for published resources.

Identifiers are process-wide, start at 1 and increase strictly by one per
call, regardless of how many threads or tasks ask concurrently.

Examples:
    >>> gen = IdentifierGenerator()
    >>> key = gen.next("md")
    >>> key.id, key.internal_key, key.file_name
    (1, 'file://files/1.md', '1.md')
    >>> gen.next("html").internal_key
    'file://files/2.html'
"""

# Standard
from dataclasses import dataclass
import threading


@dataclass(frozen=True)
class IssuedKey:
    """A freshly issued identifier and the internal key built from it.

    Attributes:
        id: Decimal identifier, unique for the process lifetime.
        extension: File extension embedded in the key.
        internal_key: ``<scheme>://<namespace>/<id>.<extension>``.
    """

    id: int
    extension: str
    internal_key: str

    @property
    def file_name(self) -> str:
        """Last path segment of the key, e.g. ``3.html``.

        Returns:
            str: ``<id>.<extension>``.
        """
        return f"{self.id}.{self.extension}"


class IdentifierGenerator:
    """Issues collision-free, strictly increasing identifiers."""

    def __init__(self, scheme: str = "file", namespace: str = "files") -> None:
        """Initialize the generator with the counter at 0.

        Scheme and namespace are lowercased, as URL parsing on the MCP side
        does for scheme and host.

        Args:
            scheme: URI scheme of internal keys.
            namespace: Authority segment of internal keys.
        """
        self.scheme = scheme.lower()
        self.namespace = namespace.lower()
        self._counter = 0
        self._lock = threading.Lock()

    def next_id(self) -> int:
        """Atomically increment the counter and return the new value.

        Returns:
            int: The next identifier.
        """
        with self._lock:
            self._counter += 1
            return self._counter

    def next(self, extension: str) -> IssuedKey:
        """Issue a new identifier and format its internal key.

        Args:
            extension: File extension of the resource (``md``, ``html``).

        Returns:
            IssuedKey: The identifier with its internal key.
        """
        resource_id = self.next_id()
        return IssuedKey(id=resource_id, extension=extension, internal_key=f"{self.scheme}://{self.namespace}/{resource_id}.{extension}")

    @property
    def last_id(self) -> int:
        """Most recently issued identifier, 0 before the first call.

        Returns:
            int: Current counter value.
        """
        with self._lock:
            return self._counter
