# -*- coding: utf-8 -*-
"""Location: ./dataverse_mcp/models.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Resource type definitions.
This module defines the types shared by the resource publishing services:
  - Content kinds and their MIME types
  - Catalog metadata for published resources
  - Resource contents returned by a catalog read
  - Resource change notifications

Examples:
    >>> ContentKind.HTML.value
    'text/html'
    >>> ContentKind.from_extension("MD")
    <ContentKind.MARKDOWN: 'text/markdown'>
    >>> r = Resource(uri="file://files/1.md", name="n", mime_type="text/markdown")
    >>> r.model_dump(by_alias=True, exclude_none=True)
    {'uri': 'file://files/1.md', 'name': 'n', 'mimeType': 'text/markdown'}
"""

# Standard
from enum import Enum
from typing import List, Literal, Optional, Union

# Third-Party
from pydantic import AnyHttpUrl, BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

_BASE_URL_ADAPTER = TypeAdapter(AnyHttpUrl)


def normalize_base_url(url: str) -> str:
    """Canonical form of an absolute http(s) base URL.

    Matches what URL parsing in the MCP SDK produces: lowercase host, no
    default port. Public resource keys are built from this form.

    Args:
        url: Absolute ``http`` or ``https`` URL.

    Returns:
        str: Normalized URL without trailing slash.

    Raises:
        ValueError: If ``url`` is empty, relative or not http(s).

    Examples:
        >>> normalize_base_url("http://MyHost:3001/")
        'http://myhost:3001'
        >>> normalize_base_url("https://Crm.Example.com:443")
        'https://crm.example.com'
        >>> normalize_base_url("http://crm.example.com:80/mcp/")
        'http://crm.example.com/mcp'
        >>> normalize_base_url("/dynamic")
        Traceback (most recent call last):
        ...
        ValueError: Not an absolute http(s) URL: '/dynamic'
    """
    try:
        parsed = _BASE_URL_ADAPTER.validate_python(url)
    except ValidationError as e:
        raise ValueError(f"Not an absolute http(s) URL: {url!r}") from e
    return str(parsed).rstrip("/")


def to_camel_case(s: str) -> str:
    """Convert a string from snake_case to camelCase.

    Args:
        s (str): The string to be converted, which is assumed to be in snake_case.

    Returns:
        str: The string converted to camelCase.

    Examples:
        >>> to_camel_case("mime_type")
        'mimeType'
        >>> to_camel_case("uri")
        'uri'
    """
    return "".join(word.capitalize() if i else word for i, word in enumerate(s.split("_")))


class BaseModelWithConfigDict(BaseModel):
    """Base model serializing field names as camelCase, as MCP expects."""

    model_config = ConfigDict(
        alias_generator=to_camel_case,
        populate_by_name=True,
        use_enum_values=True,
        extra="ignore",
    )


class ContentKind(str, Enum):
    """Kind of content held by a published resource, valued by MIME type.

    Attributes:
        PLAIN_TEXT (str): Plain text.
        MARKDOWN (str): Markdown documents such as formatted query results.
        HTML (str): HTML pages such as chart reports.

    Examples:
        >>> ContentKind("text/plain") is ContentKind.PLAIN_TEXT
        True
        >>> ContentKind.MARKDOWN.is_textual
        True
        >>> ContentKind.HTML.extension
        'html'
    """

    PLAIN_TEXT = "text/plain"
    MARKDOWN = "text/markdown"
    HTML = "text/html"

    @property
    def is_textual(self) -> bool:
        """Whether content of this kind is returned as text rather than base64.

        Returns:
            bool: True for ``text/*`` kinds.
        """
        return self.value.startswith("text/")

    @property
    def extension(self) -> str:
        """File extension used in resource keys.

        Returns:
            str: Extension without leading dot.
        """
        return _EXTENSIONS[self]

    @classmethod
    def from_extension(cls, extension: str) -> Optional["ContentKind"]:
        """Look up the kind served for a file extension.

        Args:
            extension: Extension with or without leading dot, any case.

        Returns:
            Optional[ContentKind]: The kind, or None when the extension is not served dynamically.

        Examples:
            >>> ContentKind.from_extension(".html")
            <ContentKind.HTML: 'text/html'>
            >>> ContentKind.from_extension("png") is None
            True
        """
        ext = extension.lower().lstrip(".")
        for kind, known in _EXTENSIONS.items():
            if known == ext:
                return kind
        return None


_EXTENSIONS = {
    ContentKind.PLAIN_TEXT: "txt",
    ContentKind.MARKDOWN: "md",
    ContentKind.HTML: "html",
}


class Resource(BaseModelWithConfigDict):
    """Catalog metadata of a published resource (no payload).

    Attributes:
        uri (str): Canonical key the resource is cataloged under.
        name (str): Display name.
        title (Optional[str]): Human-readable title.
        description (Optional[str]): Description shown in the listing.
        mime_type (Optional[str]): Content kind, serialized as ``mimeType``.
    """

    uri: str
    name: str
    title: Optional[str] = None
    description: Optional[str] = None
    mime_type: Optional[str] = None


class ResourceContents(BaseModelWithConfigDict):
    """Base class for resource contents.

    Attributes:
        uri (str): The key the contents were read under.
        mime_type (Optional[str]): The MIME type, serialized as ``mimeType``.
    """

    uri: str
    mime_type: Optional[str] = None


class TextResourceContents(ResourceContents):
    """Text contents of a resource.

    Attributes:
        text (str): The textual content of the resource.
    """

    text: str


class BlobResourceContents(ResourceContents):
    """Binary contents of a resource.

    Attributes:
        blob (str): Base64-encoded binary data of the resource.
    """

    blob: str


class ReadResourceResult(BaseModel):
    """Result of a catalog read."""

    contents: List[Union[TextResourceContents, BlobResourceContents]] = Field(default_factory=list)


class ResourceUpdateNotification(BaseModel):
    """Notification of resource changes.

    Attributes:
        method (Literal["notifications/resources/updated"]): The notification method.
        uri (str): The URI of the updated resource.
    """

    method: Literal["notifications/resources/updated"] = "notifications/resources/updated"
    uri: str


class ResourceListChangedNotification(BaseModel):
    """Notification of resource list changes.

    Attributes:
        method (Literal["notifications/resources/list_changed"]): The notification method.
    """

    method: Literal["notifications/resources/list_changed"] = "notifications/resources/list_changed"


ResourceNotification = Union[ResourceListChangedNotification, ResourceUpdateNotification]
