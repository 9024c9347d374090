# -*- coding: utf-8 -*-
"""Location: ./dataverse_mcp/main.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Dataverse MCP Server application.
Builds the FastAPI application serving:

- ``/mcp/``: MCP over Streamable HTTP (tools, resources, notifications)
- ``/dynamic/{file}``: published resources and static assets over plain HTTP
- ``/health``: liveness check

Run with ``dataverse-mcp`` or ``uvicorn dataverse_mcp.main:app``.
"""

# Standard
from contextlib import asynccontextmanager
import logging
import sys
from typing import AsyncIterator, Dict, Optional

# Third-Party
from fastapi import FastAPI
from mcp.server.streamable_http_manager import StreamableHTTPSessionManager
from starlette.types import Receive, Scope, Send

# First-Party
from dataverse_mcp import __version__
from dataverse_mcp.config import Settings, settings
from dataverse_mcp.routers.dynamic import router as dynamic_router
from dataverse_mcp.server import create_mcp_server
from dataverse_mcp.services.dataverse_service import DataverseClient
from dataverse_mcp.services.resource_service import ResourceService
from dataverse_mcp.tools.dataverse_tools import DataverseTools

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stderr)],
)
logger = logging.getLogger(__name__)


def create_app(
    app_settings: Optional[Settings] = None,
    resource_service: Optional[ResourceService] = None,
    tools: Optional[DataverseTools] = None,
) -> FastAPI:
    """Create the FastAPI application.

    Args:
        app_settings: Settings; defaults to the cached global settings.
        resource_service: Resource publishing root; a fresh one is built when omitted.
        tools: Tool implementations; built from settings when omitted.

    Returns:
        FastAPI: The application.
    """
    app_settings = app_settings or settings
    resource_service = resource_service or ResourceService.from_settings(app_settings)
    tools = tools or DataverseTools(lambda: DataverseClient.from_settings(app_settings), resource_service.publisher, app_settings)

    mcp_server = create_mcp_server(resource_service, tools, name=app_settings.app_name)
    session_manager = StreamableHTTPSessionManager(app=mcp_server, event_store=None, stateless=False)

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        async with session_manager.run():
            logger.info(f"Dataverse MCP Server {__version__} started; resources published under {app_settings.resolved_public_base_url}/dynamic")
            try:
                yield
            finally:
                await tools.aclose()
                logger.info("Dataverse MCP Server shutting down")

    app = FastAPI(title="Dataverse MCP Server", version=__version__, lifespan=lifespan)
    app.state.settings = app_settings
    app.state.resource_service = resource_service
    app.state.tools = tools

    async def handle_streamable_http(scope: Scope, receive: Receive, send: Send) -> None:
        await session_manager.handle_request(scope, receive, send)

    @app.get("/health", tags=["Health"])
    async def health() -> Dict[str, str]:
        """Liveness check.

        Returns:
            Dict[str, str]: Status payload.
        """
        return {"status": "healthy", "resources": str(len(resource_service.catalog))}

    app.include_router(dynamic_router)
    app.mount("/mcp", handle_streamable_http)
    return app


app = create_app()
