# -*- coding: utf-8 -*-
"""Location: ./tests/unit/dataverse_mcp/services/test_resource_catalog.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Unit tests for the resource catalog.
"""

# First-Party
from dataverse_mcp.models import Resource
from dataverse_mcp.services.resource_catalog import ResourceCatalog


def _resource(uri, name="r"):
    return Resource(uri=uri, name=name, title=name, description="d", mime_type="text/html")


def test_empty_catalog():
    catalog = ResourceCatalog()
    assert catalog.list() == []
    assert catalog.lookup("file://files/1.md") is None
    assert len(catalog) == 0


def test_list_keeps_insertion_order():
    catalog = ResourceCatalog()
    uris = ["file://files/2.md", "http://h/dynamic/1.html", "file://files/3.md"]
    for uri in uris:
        catalog.upsert(uri, _resource(uri))
    assert [r.uri for r in catalog.list()] == uris


def test_upsert_replaces_metadata():
    catalog = ResourceCatalog()
    catalog.upsert("k", _resource("k", "first"))
    catalog.upsert("k", _resource("k", "second"))
    assert len(catalog) == 1
    assert catalog.lookup("k").name == "second"


def test_list_returns_snapshot():
    catalog = ResourceCatalog()
    snapshot = catalog.list()
    catalog.upsert("k", _resource("k"))
    assert snapshot == []


def test_find_by_file_name_is_case_insensitive():
    catalog = ResourceCatalog()
    catalog.upsert("http://localhost:3001/dynamic/7.html", _resource("http://localhost:3001/dynamic/7.html"))
    assert catalog.find_by_file_name("7.HTML").uri == "http://localhost:3001/dynamic/7.html"


def test_find_by_file_name_matches_whole_segment():
    catalog = ResourceCatalog()
    catalog.upsert("file://files/17.md", _resource("file://files/17.md"))
    assert catalog.find_by_file_name("7.md") is None
    assert catalog.find_by_file_name("17.md").uri == "file://files/17.md"


def test_find_by_file_name_first_match_wins():
    catalog = ResourceCatalog()
    catalog.upsert("file://files/1.md", _resource("file://files/1.md", "a"))
    catalog.upsert("res://other/1.md", _resource("res://other/1.md", "b"))
    assert catalog.find_by_file_name("1.md").name == "a"
