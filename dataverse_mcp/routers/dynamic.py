# -*- coding: utf-8 -*-
"""Location: ./dataverse_mcp/routers/dynamic.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Dynamic resource HTTP router.
Serves ``GET /dynamic/{file}``: static assets first, then published
markdown and HTML resources, 404 otherwise.
"""

# Standard
import logging

# Third-Party
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import FileResponse, Response

# First-Party
from dataverse_mcp.services.resolver_service import ResourceError, ResourceResolver

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/dynamic", tags=["Resources"])


def get_resolver(request: Request) -> ResourceResolver:
    """Resolver dependency.

    Args:
        request: Incoming request.

    Returns:
        ResourceResolver: The application's resolver.
    """
    return request.app.state.resource_service.resolver


@router.get("/{file}")
def get_dynamic_file(file: str, resolver: ResourceResolver = Depends(get_resolver)) -> Response:
    """Serve a static asset or published resource by file name.

    Runs in the worker thread pool, concurrently with MCP tool calls
    publishing new resources.

    Args:
        file: File name such as ``3.html``.
        resolver: Resource resolver.

    Returns:
        Response: The file with its media type.

    Raises:
        HTTPException: 404 for invalid names, unknown files and missing content.
    """
    try:
        resolved = resolver.resolve_dynamic_file(file)
    except ResourceError as e:
        logger.debug(f"Dynamic file miss for {file!r}: {e}")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")

    if resolved.is_static:
        return FileResponse(path=resolved.path, media_type=resolved.media_type)
    return Response(content=resolved.content, media_type=resolved.media_type)
