# -*- coding: utf-8 -*-
"""Location: ./tests/unit/dataverse_mcp/test_main_app.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Unit tests for the application factory.
"""

# Standard
from unittest.mock import AsyncMock, MagicMock

# Third-Party
from fastapi.testclient import TestClient
import pytest

# First-Party
from dataverse_mcp.config import Settings
from dataverse_mcp.main import create_app
from dataverse_mcp.services.resource_service import ResourceService


@pytest.fixture
def tools():
    fake = MagicMock()
    fake.aclose = AsyncMock()
    return fake


@pytest.fixture
def resource_service(tmp_path):
    return ResourceService(public_base_url="http://testserver", static_dir=tmp_path)


def test_health_and_dynamic_routes(resource_service, tools):
    app = create_app(Settings(), resource_service=resource_service, tools=tools)

    with TestClient(app) as client:
        assert client.get("/health").json() == {"status": "healthy", "resources": "0"}
        assert client.get("/dynamic/1.html").status_code == 404

    tools.aclose.assert_awaited_once()


@pytest.mark.asyncio
async def test_published_resource_reachable_over_http(resource_service, tools):
    app = create_app(Settings(), resource_service=resource_service, tools=tools)
    url = await resource_service.publisher.publish_html("n", "<p>report</p>", "d")

    client = TestClient(app)
    response = client.get(url)

    assert response.status_code == 200
    assert response.text == "<p>report</p>"
    assert client.get("/health").json()["resources"] == "1"


def test_app_state(resource_service, tools):
    settings = Settings()
    app = create_app(settings, resource_service=resource_service, tools=tools)
    assert app.state.settings is settings
    assert app.state.resource_service is resource_service
    assert app.state.tools is tools
