"""
Engine kernel test configuration.

Shared fixtures: the built-in registry, an empty document and a fresh id
allocator so block ids are predictable (block-1, block-2, ...) per test.
"""

import pytest

from engine.kernel.blocks import default_registry
from engine.kernel.document import Document, IdAllocator


@pytest.fixture
def registry():
    return default_registry()


@pytest.fixture
def empty_doc():
    return Document.empty()


@pytest.fixture
def allocator():
    return IdAllocator()
