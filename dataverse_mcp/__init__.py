# -*- coding: utf-8 -*-
"""Location: ./dataverse_mcp/__init__.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Dataverse MCP Server.
An MCP tool server for Dataverse that publishes generated query results and
chart reports as MCP resources, also reachable over plain HTTP.
"""

__author__ = "Dataverse MCP Server Contributors"
__version__ = "0.1.0"
__license__ = "Apache-2.0"
__doc__ = "Dataverse MCP tool server with ephemeral resource publishing"
__all__ = ["__author__", "__version__", "__license__"]
