"""
Pydantic models for the editor service.

All request/response shapes defined here. No imports from repos or routes.
"""

from backend.models.document import (
    BlockDefinition,
    CreateBlockRequest,
    CreateDocumentRequest,
    DocumentResponse,
    DropRequest,
    ReorderRequest,
    UpdatePayloadRequest,
)

__all__ = [
    # Session models
    "CreateDocumentRequest",
    "DocumentResponse",
    # Block command models
    "CreateBlockRequest",
    "UpdatePayloadRequest",
    "ReorderRequest",
    "DropRequest",
    # Catalog
    "BlockDefinition",
]
