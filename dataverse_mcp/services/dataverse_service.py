# -*- coding: utf-8 -*-
"""Location: ./dataverse_mcp/services/dataverse_service.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Dataverse Web API client.

A small asynchronous client for the parts of the Dataverse Web API the tools
need: FetchXML queries, WhoAmI and record creation. Authentication uses the
OAuth2 client-credentials flow against Microsoft Entra ID; the access token
is cached until shortly before it expires.
"""

# Standard
import asyncio
import logging
import re
import time
from typing import Any, Dict, List, Optional
from urllib.parse import quote
import xml.etree.ElementTree as ET

# Third-Party
import httpx

# First-Party
from dataverse_mcp.config import Settings

logger = logging.getLogger(__name__)

# Refresh tokens this many seconds before they expire
TOKEN_EXPIRY_MARGIN = 60

_ENTITY_ID_RE = re.compile(r"\(([0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12})\)")


class DataverseError(Exception):
    """Raised when the Dataverse Web API or token endpoint rejects a request.

    Examples:
        >>> str(DataverseError("Bad FetchXML", status_code=400))
        '400: Bad FetchXML'
        >>> str(DataverseError("offline"))
        'offline'
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        """Initialize the error.

        Args:
            message: Error message reported by the service.
            status_code: HTTP status code, if a response was received.
        """
        self.message = message
        self.status_code = status_code
        super().__init__(f"{status_code}: {message}" if status_code is not None else message)


def fetch_entity_name(fetch_xml: str) -> str:
    """Extract the primary entity logical name from a FetchXML query.

    Args:
        fetch_xml: FetchXML document.

    Returns:
        str: Logical name of the ``<entity>`` element.

    Raises:
        DataverseError: If the document is malformed or has no entity.

    Examples:
        >>> fetch_entity_name('<fetch top="5"><entity name="contact"><attribute name="fullname"/></entity></fetch>')
        'contact'
        >>> fetch_entity_name("<fetch/>")
        Traceback (most recent call last):
        ...
        dataverse_mcp.services.dataverse_service.DataverseError: FetchXML has no <entity name="..."> element
    """
    try:
        root = ET.fromstring(fetch_xml)
    except ET.ParseError as e:
        raise DataverseError(f"Invalid FetchXML: {e}") from e
    entity = root.find("entity")
    if entity is None or not entity.get("name"):
        raise DataverseError('FetchXML has no <entity name="..."> element')
    return entity.get("name")


def parse_entity_id(header: Optional[str]) -> Optional[str]:
    """Extract the record id from an ``OData-EntityId`` header.

    Args:
        header: Header value, e.g. ``https://org/api/data/v9.2/contacts(<guid>)``.

    Returns:
        Optional[str]: The GUID, or None.

    Examples:
        >>> parse_entity_id("https://org.crm.dynamics.com/api/data/v9.2/contacts(00000000-0000-0000-0000-000000000001)")
        '00000000-0000-0000-0000-000000000001'
        >>> parse_entity_id(None) is None
        True
    """
    if not header:
        return None
    match = _ENTITY_ID_RE.search(header)
    return match.group(1) if match else None


class DataverseClient:
    """Asynchronous Dataverse Web API client."""

    def __init__(
        self,
        url: str,
        tenant_id: str,
        client_id: str,
        client_secret: str,
        api_version: str = "v9.2",
        timeout: float = 30.0,
        authority: str = "https://login.microsoftonline.com",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize the client.

        Args:
            url: Environment URL, e.g. ``https://org.crm.dynamics.com``.
            tenant_id: Entra ID tenant.
            client_id: Application (client) id.
            client_secret: Client secret.
            api_version: Web API version.
            timeout: Request timeout in seconds.
            authority: OAuth2 authority host.
            transport: Optional httpx transport, used by tests.
        """
        self.url = url.rstrip("/")
        self.api_url = f"{self.url}/api/data/{api_version}"
        self.token_url = f"{authority.rstrip('/')}/{tenant_id}/oauth2/v2.0/token"
        self._client_id = client_id
        self._client_secret = client_secret
        self._http = httpx.AsyncClient(timeout=timeout, transport=transport)
        self._token: Optional[str] = None
        self._token_expires_at = 0.0
        self._token_lock = asyncio.Lock()
        self._entity_sets: Dict[str, str] = {}

    @classmethod
    def from_settings(cls, settings: Settings) -> "DataverseClient":
        """Build a client from application settings.

        Args:
            settings: Application settings.

        Returns:
            DataverseClient: Configured client.

        Raises:
            ValueError: If a Dataverse setting is missing.
        """
        settings.require_dataverse()
        return cls(
            url=settings.dataverse_url,
            tenant_id=settings.dataverse_tenant_id,
            client_id=settings.dataverse_client_id,
            client_secret=settings.dataverse_secret.get_secret_value(),
            api_version=settings.dataverse_api_version,
            timeout=settings.dataverse_timeout,
            authority=settings.dataverse_authority,
        )

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._http.aclose()

    async def _access_token(self) -> str:
        """Return a valid bearer token, requesting a new one when needed.

        Returns:
            str: Access token.

        Raises:
            DataverseError: If the token endpoint rejects the credentials.
        """
        async with self._token_lock:
            if self._token and time.monotonic() < self._token_expires_at:
                return self._token

            response = await self._http.post(
                self.token_url,
                data={
                    "grant_type": "client_credentials",
                    "client_id": self._client_id,
                    "client_secret": self._client_secret,
                    "scope": f"{self.url}/.default",
                },
            )
            if response.status_code != 200:
                raise DataverseError(_error_message(response), status_code=response.status_code)

            payload = response.json()
            self._token = payload["access_token"]
            self._token_expires_at = time.monotonic() + int(payload.get("expires_in", 3600)) - TOKEN_EXPIRY_MARGIN
            logger.debug("Acquired Dataverse access token")
            return self._token

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Send an authenticated Web API request.

        Args:
            method: HTTP method.
            path: Path relative to the Web API root.
            **kwargs: Extra arguments for ``httpx.AsyncClient.request``.

        Returns:
            httpx.Response: Successful response.

        Raises:
            DataverseError: On non-2xx responses.
        """
        token = await self._access_token()
        headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
            "OData-MaxVersion": "4.0",
            "OData-Version": "4.0",
            **kwargs.pop("headers", {}),
        }
        response = await self._http.request(method, f"{self.api_url}/{path}", headers=headers, **kwargs)
        if response.is_error:
            raise DataverseError(_error_message(response), status_code=response.status_code)
        return response

    async def entity_set_name(self, logical_name: str) -> str:
        """Resolve the Web API entity set name of a table.

        Args:
            logical_name: Table logical name, e.g. ``contact``.

        Returns:
            str: Entity set name, e.g. ``contacts``.
        """
        if logical_name not in self._entity_sets:
            response = await self._request("GET", f"EntityDefinitions(LogicalName='{logical_name}')?$select=EntitySetName")
            self._entity_sets[logical_name] = response.json()["EntitySetName"]
        return self._entity_sets[logical_name]

    async def fetch(self, fetch_xml: str) -> List[Dict[str, Any]]:
        """Execute a FetchXML query.

        Args:
            fetch_xml: FetchXML document.

        Returns:
            List[Dict[str, Any]]: Result rows, including formatted value annotations.
        """
        entity_set = await self.entity_set_name(fetch_entity_name(fetch_xml))
        response = await self._request(
            "GET",
            f"{entity_set}?fetchXml={quote(fetch_xml)}",
            headers={"Prefer": 'odata.include-annotations="*"'},
        )
        rows = response.json().get("value", [])
        logger.info(f"FetchXML query on {entity_set} returned {len(rows)} rows")
        return rows

    async def who_am_i(self) -> Dict[str, Any]:
        """Execute the WhoAmI function.

        Returns:
            Dict[str, Any]: ``UserId``, ``BusinessUnitId`` and ``OrganizationId``.
        """
        payload = (await self._request("GET", "WhoAmI")).json()
        return {key: payload.get(key) for key in ("UserId", "BusinessUnitId", "OrganizationId")}

    async def create(self, entity_set: str, record: Dict[str, Any]) -> Optional[str]:
        """Create a record.

        Args:
            entity_set: Entity set name, e.g. ``contacts``.
            record: Column values.

        Returns:
            Optional[str]: Id of the new record.
        """
        response = await self._request("POST", entity_set, json=record)
        return parse_entity_id(response.headers.get("OData-EntityId"))


def _error_message(response: httpx.Response) -> str:
    """Best-effort error message from a Web API or token endpoint response.

    Args:
        response: Failed response.

    Returns:
        str: Message from the JSON body, or the raw text.
    """
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return error["message"]
        if body.get("error_description"):
            return body["error_description"]
        if isinstance(error, str):
            return error
    return response.text
