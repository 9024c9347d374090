# -*- coding: utf-8 -*-
"""Location: ./tests/unit/dataverse_mcp/test_mcp_server.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Unit tests for the MCP protocol handlers.
"""

# Standard
from unittest.mock import AsyncMock, MagicMock

# Third-Party
from mcp import types
from mcp.server.lowlevel.server import request_ctx
from mcp.shared.context import RequestContext
from mcp.shared.exceptions import McpError
from pydantic import AnyUrl
import pytest

# First-Party
from dataverse_mcp.models import Resource
from dataverse_mcp.server import RESOURCE_NOT_FOUND, TOOLS, create_mcp_server
from dataverse_mcp.services.notification_service import SessionSubscriber
from dataverse_mcp.services.resource_service import ResourceService

BASE_URL = "http://localhost:3001"


@pytest.fixture
def resource_service():
    return ResourceService(public_base_url=BASE_URL)


@pytest.fixture
def tools():
    fake = MagicMock()
    fake.execute_fetch = AsyncMock(return_value='[{"fullname":"Alex Smith"}]')
    fake.create_report = AsyncMock(return_value="report")
    fake.who_am_i = AsyncMock(return_value='{"UserId":"u"}')
    fake.bulk_create_random_contacts = AsyncMock(return_value="[]")
    return fake


@pytest.fixture
def server(resource_service, tools):
    return create_mcp_server(resource_service, tools)


@pytest.fixture
def session():
    fake = MagicMock()
    fake.send_resource_updated = AsyncMock()
    fake.send_resource_list_changed = AsyncMock()
    return fake


@pytest.fixture
def context(session):
    token = request_ctx.set(
        RequestContext(request_id=1, meta=types.RequestParams.Meta(progressToken="progress-1"), session=session, lifespan_context=None)
    )
    yield
    request_ctx.reset(token)


async def _call_tool(server, name, arguments):
    request = types.CallToolRequest(method="tools/call", params=types.CallToolRequestParams(name=name, arguments=arguments))
    result = await server.request_handlers[types.CallToolRequest](request)
    return result.root


async def _read(server, uri):
    request = types.ReadResourceRequest(method="resources/read", params=types.ReadResourceRequestParams(uri=AnyUrl(uri)))
    result = await server.request_handlers[types.ReadResourceRequest](request)
    return result.root


def test_tool_schemas():
    by_name = {tool.name: tool for tool in TOOLS}
    assert set(by_name) == {"execute_fetch", "create_report", "who_am_i", "bulk_create_random_contacts"}
    assert set(by_name["execute_fetch"].inputSchema["required"]) == {"fetch_xml", "query_description"}
    assert by_name["bulk_create_random_contacts"].inputSchema["properties"]["count"]["type"] == "integer"


@pytest.mark.asyncio
async def test_list_tools(server):
    result = await server.request_handlers[types.ListToolsRequest](types.ListToolsRequest(method="tools/list"))
    assert [t.name for t in result.root.tools] == [t.name for t in TOOLS]


@pytest.mark.asyncio
async def test_call_tool_dispatches_and_subscribes(server, tools, resource_service, session, context):
    result = await _call_tool(server, "execute_fetch", {"fetch_xml": "<fetch/>", "query_description": "d"})

    assert result.content[0].text == '[{"fullname":"Alex Smith"}]'
    request = tools.execute_fetch.call_args.args[1]
    assert request.fetch_xml == "<fetch/>"
    assert resource_service.notifier.subscribers == [SessionSubscriber(session)]


@pytest.mark.asyncio
async def test_call_tool_passes_progress_token(server, tools, context):
    await _call_tool(server, "bulk_create_random_contacts", {"count": 5})

    assert tools.bulk_create_random_contacts.call_args.kwargs["progress_token"] == "progress-1"
    assert tools.bulk_create_random_contacts.call_args.args[1].count == 5


@pytest.mark.asyncio
async def test_call_unknown_tool(server, context):
    result = await _call_tool(server, "drop_database", {})
    assert result.content[0].text == "[ERROR] Unknown tool: drop_database"


@pytest.mark.asyncio
async def test_publish_notifies_subscribed_session(server, resource_service, session, context):
    await _call_tool(server, "who_am_i", {})

    url = await resource_service.publisher.publish_html("n", "<p/>", "d")

    session.send_resource_list_changed.assert_awaited_once()
    session.send_resource_updated.assert_awaited_once()
    assert str(session.send_resource_updated.call_args.args[0]) == url


@pytest.mark.asyncio
async def test_list_resources(server, resource_service, context):
    await resource_service.publisher.publish_markdown("2025-06-01 10:00:00", "| a |", "Top 5 contacts")

    result = await server.request_handlers[types.ListResourcesRequest](types.ListResourcesRequest(method="resources/list"))

    (resource,) = result.root.resources
    assert str(resource.uri) == "file://files/1.md"
    assert resource.name == "2025-06-01 10:00:00"
    assert resource.description == "Top 5 contacts"
    assert resource.mimeType == "text/markdown"


@pytest.mark.asyncio
async def test_read_resource(server, resource_service):
    url = await resource_service.publisher.publish_html("n", "<html/>", "d")

    result = await _read(server, url)

    assert result.contents[0].text == "<html/>"
    assert result.contents[0].mimeType == "text/html"


@pytest.mark.asyncio
async def test_read_unknown_resource(server):
    with pytest.raises(McpError) as exc:
        await _read(server, "file://files/99.md")
    assert exc.value.error.code == RESOURCE_NOT_FOUND
    assert exc.value.error.message == "Unknown resource: file://files/99.md"


@pytest.mark.asyncio
async def test_read_cataloged_resource_without_content(server, resource_service):
    resource_service.catalog.upsert("file://files/5.md", Resource(uri="file://files/5.md", name="n", mime_type="text/markdown"))
    with pytest.raises(McpError) as exc:
        await _read(server, "file://files/5.md")
    assert exc.value.error.code == types.INTERNAL_ERROR
    assert exc.value.error.message == "No stored content for resource: file://files/5.md"


@pytest.mark.asyncio
async def test_unsubscribe(server, resource_service, context):
    subscribe = types.SubscribeRequest(method="resources/subscribe", params=types.SubscribeRequestParams(uri=AnyUrl("file://files/1.md")))
    unsubscribe = types.UnsubscribeRequest(method="resources/unsubscribe", params=types.UnsubscribeRequestParams(uri=AnyUrl("file://files/1.md")))

    await server.request_handlers[types.SubscribeRequest](subscribe)
    assert len(resource_service.notifier.subscribers) == 1
    await server.request_handlers[types.UnsubscribeRequest](unsubscribe)
    assert resource_service.notifier.subscribers == []


def test_capabilities_announce_resource_notifications(server):
    options = server.create_initialization_options()
    assert options.capabilities.resources.listChanged is True
    assert options.capabilities.resources.subscribe is True
    assert options.capabilities.tools is not None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "base_url",
    ["http://localhost:3001", "http://crm.example.com:80", "http://MyHost:3001", "https://Crm.Example.com:443/", "https://crm.example.com/mcp/"],
)
async def test_every_listed_uri_reads_back(tools, context, base_url):
    resource_service = ResourceService(public_base_url=base_url)
    server = create_mcp_server(resource_service, tools)
    html_url = await resource_service.publisher.publish_html("report", "<html/>", "d")
    md_url = await resource_service.publisher.publish_markdown("table", "| a |", "d")

    listed = await server.request_handlers[types.ListResourcesRequest](types.ListResourcesRequest(method="resources/list"))

    uris = [str(r.uri) for r in listed.root.resources]
    assert uris == [html_url, "file://files/2.md"]
    for uri in uris + [md_url]:
        result = await _read(server, uri)
        assert result.contents[0].text in ("<html/>", "| a |")
