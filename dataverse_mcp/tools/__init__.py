# -*- coding: utf-8 -*-
"""Location: ./dataverse_mcp/tools/__init__.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Dataverse MCP tool implementations.
"""
