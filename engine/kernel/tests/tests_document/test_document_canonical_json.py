"""
Editor Document -- Canonical JSON Round-Trip Tests

Export is a nested {id, type, style, props, children} tree with sorted
keys. Loading it back must give a Document equal to the one exported, and
exporting that again must give the identical string.

Leaves are exported with `children: []`, so the loader relies on the
registry to tell an empty container from a leaf.
"""

import json

import pytest

from engine.kernel.commands import create_and_insert
from engine.kernel.document import Document, from_canonical_json
from engine.kernel.errors import InvariantViolationError
from engine.kernel.renderer import to_canonical_json, to_canonical_tree

# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def newsletter(empty_doc, allocator):
    """
    root
      Heading
      Container
        Text
        Button
      Container (empty)
      Spacer
    """
    doc = empty_doc
    doc = create_and_insert(doc, "root", "Heading", props={"text": "Weekly news", "level": "h1"}, allocator=allocator).document
    result = create_and_insert(doc, "root", "Container", style={"backgroundColor": "#F9FAFB"}, allocator=allocator)
    doc, box = result.document, result.block_id
    doc = create_and_insert(doc, box, "Text", props={"text": "Ünïcode ✓"}, allocator=allocator).document
    doc = create_and_insert(doc, box, "Button", props={"text": "Read", "url": "https://example.com"}, allocator=allocator).document
    doc = create_and_insert(doc, "root", "Container", allocator=allocator).document
    doc = create_and_insert(doc, "root", "Spacer", props={"height": 24}, allocator=allocator).document
    return doc


# ============================================================================
# Round-trip
# ============================================================================


class TestRoundTrip:
    def test_load_of_export_equals_original(self, newsletter):
        assert from_canonical_json(to_canonical_json(newsletter)) == newsletter

    def test_export_is_idempotent(self, newsletter):
        exported = to_canonical_json(newsletter)
        assert to_canonical_json(from_canonical_json(exported)) == exported

    def test_empty_container_stays_container(self, newsletter):
        loaded = from_canonical_json(to_canonical_json(newsletter))
        empty_box = loaded["block-5"]
        assert empty_box.type == "Container"
        assert empty_box.children_ids == ()

    def test_leaf_stays_leaf(self, newsletter):
        loaded = from_canonical_json(to_canonical_json(newsletter))
        assert loaded["block-6"].children_ids is None

    def test_accepts_parsed_dict(self, newsletter):
        assert from_canonical_json(to_canonical_tree(newsletter)) == newsletter

    def test_indented_export_loads(self, newsletter):
        assert from_canonical_json(to_canonical_json(newsletter, indent=2)) == newsletter


# ============================================================================
# Export shape
# ============================================================================


class TestExportShape:
    def test_keys_sorted_and_compact(self, empty_doc):
        assert to_canonical_json(empty_doc) == (
            '{"children":[],"id":"root",'
            '"props":{},"style":{},"type":"EmailLayout"}'
        )

    def test_children_in_document_order(self, newsletter):
        tree = to_canonical_tree(newsletter)
        assert [c["type"] for c in tree["children"]] == ["Heading", "Container", "Container", "Spacer"]
        assert [c["type"] for c in tree["children"][1]["children"]] == ["Text", "Button"]

    def test_leaves_have_empty_children(self, newsletter):
        tree = to_canonical_tree(newsletter)
        assert tree["children"][0]["children"] == []

    def test_non_ascii_kept_verbatim(self, newsletter):
        assert "Ünïcode ✓" in to_canonical_json(newsletter)

    def test_independent_of_insertion_order(self, newsletter):
        shuffled = Document(dict(reversed(list(newsletter.items()))))
        assert to_canonical_json(shuffled) == to_canonical_json(newsletter)


# ============================================================================
# Malformed input
# ============================================================================


class TestMalformed:
    def test_not_json(self):
        with pytest.raises(InvariantViolationError):
            from_canonical_json("{not json")

    def test_wrong_root_id(self):
        with pytest.raises(InvariantViolationError):
            from_canonical_json({"id": "main", "type": "EmailLayout", "children": []})

    def test_node_without_type(self):
        with pytest.raises(InvariantViolationError):
            from_canonical_json({"id": "root", "type": "EmailLayout", "children": [{"id": "x"}]})

    def test_duplicate_ids(self):
        data = {
            "id": "root",
            "type": "EmailLayout",
            "children": [
                {"id": "x", "type": "Text", "children": []},
                {"id": "x", "type": "Text", "children": []},
            ],
        }
        with pytest.raises(InvariantViolationError) as exc_info:
            from_canonical_json(json.dumps(data))
        assert "block 'x' appears more than once" in exc_info.value.violations

    def test_children_under_leaf_type(self):
        data = {
            "id": "root",
            "type": "EmailLayout",
            "children": [
                {"id": "t", "type": "Text", "children": [{"id": "u", "type": "Text", "children": []}]},
            ],
        }
        with pytest.raises(InvariantViolationError):
            from_canonical_json(data)
