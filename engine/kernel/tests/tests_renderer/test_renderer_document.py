"""
Editor Renderer -- Full Document and Determinism Tests

render_document wraps the markup in a complete HTML email. Rendering is a
pure function of the Document: repeated renders are byte-identical and the
Document is never modified.
"""

from engine.kernel.commands import create_and_insert
from engine.kernel.document import Document
from engine.kernel.renderer import escape, render_document, to_canonical_json, to_markup
from engine.kernel.types import ROOT_ID

# ============================================================================
# Helpers
# ============================================================================


def build_email(allocator):
    doc = Document.empty(root_props={"canvasColor": "#FFFFFF"})
    doc = create_and_insert(doc, ROOT_ID, "Heading", props={"text": "Welcome", "level": "h1"}, allocator=allocator).document
    result = create_and_insert(doc, ROOT_ID, "ColumnsContainer", props={"columnsGap": 8}, allocator=allocator)
    doc, cols = result.document, result.block_id
    for label in ("Left", "Right"):
        result = create_and_insert(doc, cols, "Container", allocator=allocator)
        doc = create_and_insert(result.document, result.block_id, "Text", props={"text": label}, allocator=allocator).document
    doc = create_and_insert(doc, ROOT_ID, "Button", props={"text": "Start", "url": "https://example.com"}, allocator=allocator).document
    return doc


# ============================================================================
# Document wrapper
# ============================================================================


class TestRenderDocument:
    def test_structure(self, allocator):
        html = render_document(build_email(allocator))
        assert html.startswith("<!DOCTYPE html>")
        assert '<meta charset="utf-8">' in html
        assert html.rstrip().endswith("</html>")

    def test_title_escaped(self, empty_doc):
        html = render_document(empty_doc, title="News & <Updates>")
        assert "<title>News &amp; &lt;Updates&gt;</title>" in html

    def test_no_title_tag_without_title(self, empty_doc):
        assert "<title>" not in render_document(empty_doc)

    def test_body_is_markup(self, allocator):
        doc = build_email(allocator)
        assert to_markup(doc) in render_document(doc)

    def test_content_order(self, allocator):
        html = to_markup(build_email(allocator))
        positions = [html.index(s) for s in ("Welcome", "Left", "Right", "Start")]
        assert positions == sorted(positions)


# ============================================================================
# Determinism and purity
# ============================================================================


class TestDeterminism:
    def test_repeated_markup_identical(self, allocator):
        doc = build_email(allocator)
        first = to_markup(doc)
        for _ in range(50):
            assert to_markup(doc) == first

    def test_repeated_json_identical(self, allocator):
        doc = build_email(allocator)
        first = to_canonical_json(doc)
        for _ in range(50):
            assert to_canonical_json(doc) == first

    def test_rendering_does_not_modify_document(self, allocator):
        doc = build_email(allocator)
        before = doc.snapshot()
        render_document(doc, title="x")
        to_canonical_json(doc)
        assert doc.snapshot() == before

    def test_subtree_render(self, allocator):
        doc = build_email(allocator)
        html = to_markup(doc, "block-2")
        assert "Left" in html and "Right" in html
        assert "Welcome" not in html


class TestEscape:
    def test_quotes(self):
        assert escape('"a"') == "&quot;a&quot;"

    def test_non_string(self):
        assert escape(42) == "42"
