# -*- coding: utf-8 -*-
"""Location: ./dataverse_mcp/server.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

MCP protocol handlers.

Registers the Dataverse tools and the published-resource catalog on a
low-level ``mcp.server.Server``:

- ``tools/list`` and ``tools/call`` dispatch to ``DataverseTools``.
- ``resources/list`` and ``resources/read`` serve the resource catalog.
- ``resources/subscribe`` registers the calling session for change
  notifications; sessions that call a tool or list resources are
  registered too, so the publishing session always hears about its own
  resources.
"""

# Standard
import base64
import logging
from typing import Any, Dict, List, Optional

# Third-Party
from mcp import types
from mcp.server import NotificationOptions, Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.server.models import InitializationOptions
from mcp.shared.exceptions import McpError
from pydantic import AnyUrl, ValidationError

# First-Party
from dataverse_mcp import __version__
from dataverse_mcp.models import TextResourceContents
from dataverse_mcp.services.notification_service import SessionSubscriber
from dataverse_mcp.services.resolver_service import NoStoredContentError, ResourceNotFoundError
from dataverse_mcp.services.resource_service import ResourceService
from dataverse_mcp.tools.dataverse_tools import (
    BulkCreateRandomContactsRequest,
    CreateReportRequest,
    DataverseTools,
    ExecuteFetchRequest,
)

logger = logging.getLogger(__name__)

# JSON-RPC error code for unknown resources
RESOURCE_NOT_FOUND = -32002

TOOLS: List[types.Tool] = [
    types.Tool(
        name="execute_fetch",
        description=(
            "Executes an FetchXML request using the supplied expression that needs to be a valid FetchXml expression. "
            "Also supply a description of the query in natural language. Returns the result as a JSON string, if there are "
            "less than 21 results, otherwise give the user the option (through MCP elicitation) of returning a Resource Uri "
            "to the result instead. If the request fails, the response will be prepended with [ERROR] and the error should be "
            "presented to the user."
        ),
        inputSchema=ExecuteFetchRequest.model_json_schema(),
    ),
    types.Tool(
        name="create_report",
        description=(
            "Executes an FetchXML request using the supplied expression that needs to be a valid FetchXml expression, then "
            "create a report using Chart.js that visualizes the result and returns a link to the report. If the request fails, "
            "the response will be prepended with [ERROR] and the error should be presented to the user."
        ),
        inputSchema=CreateReportRequest.model_json_schema(),
    ),
    types.Tool(
        name="who_am_i",
        description="Executes a WhoAmI request against Dataverse.",
        inputSchema={"type": "object", "properties": {}},
    ),
    types.Tool(
        name="bulk_create_random_contacts",
        description="Bulk creates a number of random contact records in Dataverse. Parameter count (1-100).",
        inputSchema=BulkCreateRandomContactsRequest.model_json_schema(),
    ),
]


def _text(text: str) -> List[types.TextContent]:
    """Wrap tool output as MCP text content.

    Args:
        text: Tool output.

    Returns:
        List[types.TextContent]: Single text block.
    """
    return [types.TextContent(type="text", text=text)]


class DataverseMcpServer(Server):
    """Low-level server announcing resource ``listChanged`` and ``subscribe`` support."""

    def create_initialization_options(
        self,
        notification_options: Optional[NotificationOptions] = None,
        experimental_capabilities: Optional[Dict[str, Dict[str, Any]]] = None,
    ) -> InitializationOptions:
        """Initialization options with resource list notifications enabled.

        Args:
            notification_options: Overrides the announced notifications.
            experimental_capabilities: Experimental capabilities to announce.

        Returns:
            InitializationOptions: Options for the ``initialize`` response.
        """
        return super().create_initialization_options(notification_options or NotificationOptions(resources_changed=True), experimental_capabilities or {})

    def get_capabilities(self, notification_options: NotificationOptions, experimental_capabilities: Dict[str, Dict[str, Any]]) -> types.ServerCapabilities:
        """Server capabilities, with resource subscriptions.

        Args:
            notification_options: Announced notifications.
            experimental_capabilities: Experimental capabilities.

        Returns:
            types.ServerCapabilities: Capabilities for the ``initialize`` response.
        """
        capabilities = super().get_capabilities(notification_options, experimental_capabilities)
        if capabilities.resources is not None:
            capabilities.resources.subscribe = True
        return capabilities


def create_mcp_server(resource_service: ResourceService, tools: DataverseTools, name: str = "dataverse-mcp") -> Server:
    """Create the MCP server and register all handlers.

    Args:
        resource_service: Published resources.
        tools: Dataverse tool implementations.
        name: Server name announced to clients.

    Returns:
        Server: Configured low-level MCP server.
    """
    server = DataverseMcpServer(name, version=__version__)

    def _subscribe_current_session() -> Any:
        session = server.request_context.session
        resource_service.notifier.subscribe(SessionSubscriber(session))
        return session

    @server.list_tools()
    async def handle_list_tools() -> List[types.Tool]:
        """List the Dataverse tools."""
        return TOOLS

    @server.call_tool()
    async def handle_call_tool(name: str, arguments: Dict[str, Any]) -> List[types.TextContent]:
        """Dispatch a tool call."""
        session = _subscribe_current_session()
        meta = server.request_context.meta
        progress_token = meta.progressToken if meta is not None else None
        arguments = arguments or {}
        logger.info(f"Tool call {name}")

        try:
            if name == "execute_fetch":
                return _text(await tools.execute_fetch(session, ExecuteFetchRequest(**arguments)))
            if name == "create_report":
                return _text(await tools.create_report(session, CreateReportRequest(**arguments)))
            if name == "who_am_i":
                return _text(await tools.who_am_i())
            if name == "bulk_create_random_contacts":
                request = BulkCreateRandomContactsRequest(**arguments)
                return _text(await tools.bulk_create_random_contacts(session, request, progress_token=progress_token))
        except ValidationError as e:
            logger.warning(f"Invalid arguments for {name}: {e}")
            return _text(f"[ERROR] Invalid arguments for {name}: {e}")

        return _text(f"[ERROR] Unknown tool: {name}")

    @server.list_resources()
    async def handle_list_resources() -> List[types.Resource]:
        """List published resources."""
        _subscribe_current_session()
        return [
            types.Resource(uri=AnyUrl(r.uri), name=r.name, title=r.title, description=r.description, mimeType=r.mime_type)
            for r in resource_service.list_resources()
        ]

    @server.read_resource()
    async def handle_read_resource(uri: AnyUrl) -> List[ReadResourceContents]:
        """Read a published resource by internal or public key."""
        key = str(uri)
        try:
            result = resource_service.read_resource(key)
        except ResourceNotFoundError as e:
            raise McpError(types.ErrorData(code=RESOURCE_NOT_FOUND, message=str(e), data={"uri": key})) from e
        except NoStoredContentError as e:
            logger.error(str(e))
            raise McpError(types.ErrorData(code=types.INTERNAL_ERROR, message=str(e), data={"uri": key})) from e

        contents = []
        for item in result.contents:
            if isinstance(item, TextResourceContents):
                contents.append(ReadResourceContents(content=item.text, mime_type=item.mime_type))
            else:
                contents.append(ReadResourceContents(content=base64.b64decode(item.blob), mime_type=item.mime_type))
        return contents

    @server.subscribe_resource()
    async def handle_subscribe_resource(uri: AnyUrl) -> None:
        """Register the calling session for resource notifications."""
        _subscribe_current_session()

    @server.unsubscribe_resource()
    async def handle_unsubscribe_resource(uri: AnyUrl) -> None:
        """Drop the calling session from resource notifications."""
        resource_service.notifier.unsubscribe(SessionSubscriber(server.request_context.session))

    return server
