"""
Editor Registry -- Schema and Capability Tests

The registry is the only component that looks inside style/props payloads.
It answers three questions per block type:
  - is this type known?
  - may it own children?
  - does this payload satisfy its schema?

Unknown types and bad payloads come back as error values, never raised.
Registration after freeze() is the one thing that does raise.
"""

import pytest

from engine.kernel.blocks import BlockStyle, EmptyProps, default_registry
from engine.kernel.errors import RegistryFrozenError, SchemaValidationError, UnknownTypeError
from engine.kernel.registry import BlockSchema, SchemaRegistry

# ============================================================================
# Built-in registry
# ============================================================================


class TestDefaultRegistry:
    def test_is_frozen(self, registry):
        assert registry.frozen

    def test_is_shared(self):
        assert default_registry() is default_registry()

    def test_knows_every_builtin_type(self, registry):
        assert registry.types() == [
            "Avatar",
            "Button",
            "ColumnsContainer",
            "Container",
            "Divider",
            "EmailLayout",
            "Heading",
            "Html",
            "Image",
            "Spacer",
            "Text",
        ]

    def test_containers(self, registry):
        for block_type in ("Container", "ColumnsContainer", "EmailLayout"):
            assert registry.can_have_children(block_type), block_type

    def test_leaves(self, registry):
        for block_type in ("Text", "Heading", "Button", "Image", "Avatar", "Divider", "Spacer", "Html"):
            assert not registry.can_have_children(block_type), block_type

    def test_unknown_type_is_not_a_container(self, registry):
        assert not registry.can_have_children("Mystery")

    def test_register_after_freeze_raises(self, registry):
        with pytest.raises(RegistryFrozenError):
            registry.register("Extra", BlockSchema(props=EmptyProps, style=BlockStyle))
        assert "Extra" not in registry


# ============================================================================
# Validation
# ============================================================================


class TestValidate:
    def test_valid_payload(self, registry):
        assert registry.validate("Text", {"text": "Hello"}, {"fontSize": 16}) is None

    def test_empty_payloads_are_valid(self, registry):
        assert registry.validate("Divider", {}, {}) is None

    def test_unknown_type(self, registry):
        error = registry.validate("Mystery", {}, {})
        assert isinstance(error, UnknownTypeError)
        assert error.code == "UNKNOWN_BLOCK_TYPE"

    def test_bad_prop_value(self, registry):
        error = registry.validate("Heading", {"level": "h9"}, {})
        assert isinstance(error, SchemaValidationError)
        assert error.errors[0]["loc"] == ["props", "level"]

    def test_bad_style_value(self, registry):
        error = registry.validate("Text", {}, {"fontSize": 0})
        assert isinstance(error, SchemaValidationError)
        assert error.errors[0]["loc"] == ["style", "fontSize"]

    def test_nested_style_value(self, registry):
        error = registry.validate("Text", {}, {"padding": {"top": -1}})
        assert isinstance(error, SchemaValidationError)
        assert error.errors[0]["loc"] == ["style", "padding", "top"]

    def test_payload_must_be_object(self, registry):
        error = registry.validate("Text", "hello", {})
        assert isinstance(error, SchemaValidationError)
        assert error.errors[0]["loc"] == ["props"]

    def test_both_payloads_reported(self, registry):
        error = registry.validate("Spacer", {"height": -5}, {"fontWeight": "heavy"})
        locs = [e["loc"][0] for e in error.errors]
        assert locs == ["props", "style"]

    def test_unknown_keys_are_ignored(self, registry):
        assert registry.validate("Text", {"text": "a", "legacy": True}, {}) is None

    def test_error_serialises(self, registry):
        error = registry.validate("Spacer", {"height": "tall"}, {})
        d = error.to_dict()
        assert d["code"] == "SCHEMA_VALIDATION_FAILED"
        assert d["errors"][0]["loc"] == ["props", "height"]


# ============================================================================
# Defaults
# ============================================================================


class TestDefaults:
    def test_defaults_for_known_type(self, registry):
        props, style = registry.defaults_for("Button")
        assert props["text"] == "Click Me"
        assert style["textAlign"] == "center"

    def test_defaults_are_fresh_copies(self, registry):
        props, style = registry.defaults_for("Text")
        props["text"] = "changed"
        style["padding"]["top"] = 99
        props2, style2 = registry.defaults_for("Text")
        assert props2["text"] == "Enter your text here..."
        assert style2["padding"]["top"] == 16

    def test_defaults_for_unknown_type(self, registry):
        assert registry.defaults_for("Mystery") is None

    def test_every_default_passes_its_schema(self, registry):
        for block_type in registry.types():
            props, style = registry.defaults_for(block_type)
            assert registry.validate(block_type, props, style) is None, block_type


# ============================================================================
# Custom registries
# ============================================================================


class TestCustomRegistry:
    def test_starts_empty_and_unfrozen(self):
        reg = SchemaRegistry()
        assert reg.types() == []
        assert not reg.frozen

    def test_register_and_freeze(self):
        reg = SchemaRegistry()
        reg.register("Box", BlockSchema(props=EmptyProps, style=BlockStyle), can_have_children=True)
        assert reg.freeze() is reg
        assert "Box" in reg
        assert reg.can_have_children("Box")
        assert reg.renderer_for("Box") is None

    def test_reregister_before_freeze_replaces(self):
        reg = SchemaRegistry()
        reg.register("Box", BlockSchema(props=EmptyProps, style=BlockStyle), can_have_children=True)
        reg.register("Box", BlockSchema(props=EmptyProps, style=BlockStyle), can_have_children=False)
        assert not reg.can_have_children("Box")
