# -*- coding: utf-8 -*-
"""Location: ./dataverse_mcp/services/__init__.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Services for resource publishing and Dataverse access.
"""
