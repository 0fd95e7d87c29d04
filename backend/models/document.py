"""Request/response models for editor document sessions."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, model_validator


class CreateDocumentRequest(BaseModel):
    """What the client sends to open a new editor session."""

    model_config = {"extra": "forbid"}

    document: dict[str, Any] | None = None  # canonical JSON tree to load


class DocumentResponse(BaseModel):
    """Current state of a session."""

    id: str
    document: dict[str, Any]  # canonical JSON tree
    can_undo: bool
    can_redo: bool
    block_id: str | None = None  # block touched by the last command, if any


class CreateBlockRequest(BaseModel):
    model_config = {"extra": "forbid"}

    parent_id: str = "root"
    type: str = Field(min_length=1)
    style: dict[str, Any] | None = None
    props: dict[str, Any] | None = None
    index: int | None = None
    use_defaults: bool = False  # fill missing style/props from the block type defaults


class UpdatePayloadRequest(BaseModel):
    model_config = {"extra": "forbid"}

    payload: dict[str, Any]
    merge: bool = True


class ReorderRequest(BaseModel):
    model_config = {"extra": "forbid"}

    parent_id: str
    from_index: int
    to_index: int


class DropRequest(BaseModel):
    """A resolved pointer drop from the drag subsystem."""

    model_config = {"extra": "forbid"}

    container_id: str
    index: int
    block_type: str | None = None
    block_id: str | None = None
    style: dict[str, Any] | None = None
    props: dict[str, Any] | None = None

    @model_validator(mode="after")
    def _one_source(self) -> DropRequest:
        if (self.block_type is None) == (self.block_id is None):
            raise ValueError("Provide exactly one of 'block_type' or 'block_id'")
        return self


class BlockDefinition(BaseModel):
    """One sidebar entry."""

    type: str
    label: str
    icon: str
    description: str
    category: str
    container: bool
