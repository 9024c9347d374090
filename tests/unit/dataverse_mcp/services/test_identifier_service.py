# -*- coding: utf-8 -*-
"""Location: ./tests/unit/dataverse_mcp/services/test_identifier_service.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Unit tests for identifier generation.
"""

# Standard
from concurrent.futures import ThreadPoolExecutor

# Third-Party
import pytest

# First-Party
from dataverse_mcp.services.identifier_service import IdentifierGenerator, IssuedKey


def test_first_id_is_one():
    gen = IdentifierGenerator()
    assert gen.last_id == 0
    assert gen.next_id() == 1
    assert gen.last_id == 1


def test_ids_strictly_increase():
    gen = IdentifierGenerator()
    ids = [gen.next_id() for _ in range(50)]
    assert ids == list(range(1, 51))


def test_internal_key_format():
    gen = IdentifierGenerator()
    key = gen.next("md")
    assert key == IssuedKey(id=1, extension="md", internal_key="file://files/1.md")
    assert key.file_name == "1.md"


def test_custom_scheme_and_namespace():
    gen = IdentifierGenerator(scheme="res", namespace="reports")
    assert gen.next("html").internal_key == "res://reports/1.html"


def test_extensions_share_one_sequence():
    gen = IdentifierGenerator()
    assert [gen.next(ext).id for ext in ("md", "html", "md")] == [1, 2, 3]


@pytest.mark.parametrize("workers,per_worker", [(8, 250), (32, 50)])
def test_concurrent_ids_are_dense_and_unique(workers, per_worker):
    gen = IdentifierGenerator()

    def take(_):
        return [gen.next_id() for _ in range(per_worker)]

    with ThreadPoolExecutor(max_workers=workers) as pool:
        batches = list(pool.map(take, range(workers)))

    issued = [i for batch in batches for i in batch]
    total = workers * per_worker
    assert len(issued) == total
    assert set(issued) == set(range(1, total + 1))
    # Each caller observes its own ids in increasing order
    for batch in batches:
        assert batch == sorted(batch)
    assert gen.last_id == total


def test_generators_are_independent():
    a, b = IdentifierGenerator(), IdentifierGenerator()
    a.next_id()
    a.next_id()
    assert b.next_id() == 1


def test_scheme_and_namespace_lowercased():
    gen = IdentifierGenerator(scheme="File", namespace="Files")
    assert gen.next("md").internal_key == "file://files/1.md"
