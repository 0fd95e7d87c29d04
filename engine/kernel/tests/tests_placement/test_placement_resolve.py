"""
Editor Placement -- Drop Resolution Tests

The placement resolver is the single source of truth for where a drop
lands. It validates the target container, refuses drops that would create
a cycle, and clamps the pointer's index estimate into range.

When a block is dragged within its own container, the pointer index was
measured with the block still in the list, so positions after it shift
down by one.
"""

import pytest

from engine.kernel.commands import create_and_insert
from engine.kernel.errors import (
    CycleRejectedError,
    InvariantViolationError,
    NotAContainerError,
    NotFoundError,
    ParentNotFoundError,
    UnknownTypeError,
)
from engine.kernel.placement import resolve
from engine.kernel.types import ROOT_ID, DropIntent, PlacementResult

# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def doc(empty_doc, allocator):
    """root → [block-1 Text, block-2 Container → [block-3 Text], block-4 Text]"""
    d = empty_doc
    d = create_and_insert(d, ROOT_ID, "Text", allocator=allocator).document
    d = create_and_insert(d, ROOT_ID, "Container", allocator=allocator).document
    d = create_and_insert(d, "block-2", "Text", allocator=allocator).document
    d = create_and_insert(d, ROOT_ID, "Text", allocator=allocator).document
    return d


# ============================================================================
# New blocks from the sidebar
# ============================================================================


class TestNewBlock:
    def test_accepted(self, doc):
        placed = resolve(doc, DropIntent(container_id=ROOT_ID, index=1, block_type="Heading"))
        assert placed.accepted
        assert placed.unwrap() == (ROOT_ID, 1)

    def test_index_clamped_high(self, doc):
        placed = resolve(doc, DropIntent(container_id=ROOT_ID, index=99, block_type="Text"))
        assert placed.index == 3

    def test_index_clamped_low(self, doc):
        placed = resolve(doc, DropIntent(container_id="block-2", index=-4, block_type="Text"))
        assert placed.unwrap() == ("block-2", 0)

    def test_unknown_type(self, doc):
        placed = resolve(doc, DropIntent(container_id=ROOT_ID, index=0, block_type="Mystery"))
        assert not placed.accepted
        assert isinstance(placed.error, UnknownTypeError)

    def test_missing_container(self, doc):
        placed = resolve(doc, DropIntent(container_id="ghost", index=0, block_type="Text"))
        assert isinstance(placed.error, ParentNotFoundError)

    def test_leaf_container(self, doc):
        placed = resolve(doc, DropIntent(container_id="block-1", index=0, block_type="Text"))
        assert isinstance(placed.error, NotAContainerError)

    def test_unwrap_refused_raises(self, doc):
        placed = resolve(doc, DropIntent(container_id="block-1", index=0, block_type="Text"))
        with pytest.raises(NotAContainerError):
            placed.unwrap()

    def test_unwrap_without_target_raises(self):
        with pytest.raises(InvariantViolationError):
            PlacementResult(accepted=True).unwrap()


# ============================================================================
# Existing blocks being moved
# ============================================================================


class TestExistingBlock:
    def test_into_other_container(self, doc):
        placed = resolve(doc, DropIntent(container_id="block-2", index=0, block_id="block-4"))
        assert placed.unwrap() == ("block-2", 0)

    def test_same_container_forward_adjusted(self, doc):
        # pointer below block-4 (index 3) while dragging block-1 (index 0)
        placed = resolve(doc, DropIntent(container_id=ROOT_ID, index=3, block_id="block-1"))
        assert placed.unwrap() == (ROOT_ID, 2)

    def test_same_container_backward_unchanged(self, doc):
        placed = resolve(doc, DropIntent(container_id=ROOT_ID, index=0, block_id="block-4"))
        assert placed.unwrap() == (ROOT_ID, 0)

    def test_into_own_descendant(self, doc):
        placed = resolve(doc, DropIntent(container_id="block-2", index=0, block_id="block-2"))
        assert isinstance(placed.error, CycleRejectedError)

    def test_missing_block(self, doc):
        placed = resolve(doc, DropIntent(container_id=ROOT_ID, index=0, block_id="ghost"))
        assert isinstance(placed.error, NotFoundError)


class TestMalformedIntent:
    def test_neither_source(self, doc):
        placed = resolve(doc, DropIntent(container_id=ROOT_ID, index=0))
        assert not placed.accepted

    def test_both_sources(self, doc):
        placed = resolve(doc, DropIntent(container_id=ROOT_ID, index=0, block_type="Text", block_id="block-1"))
        assert not placed.accepted

    def test_resolver_does_not_touch_document(self, doc):
        before = doc.snapshot()
        resolve(doc, DropIntent(container_id=ROOT_ID, index=3, block_id="block-1"))
        assert doc.snapshot() == before
