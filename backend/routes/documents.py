"""Editor document routes — sessions, block commands, drop, undo/redo, export."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import HTMLResponse, Response

from backend.models.document import (
    BlockDefinition,
    CreateBlockRequest,
    CreateDocumentRequest,
    DocumentResponse,
    DropRequest,
    ReorderRequest,
    UpdatePayloadRequest,
)
from backend.repos.document_repo import DocumentRepo, DocumentSession, SessionLimitReached
from engine.kernel import CommandResult, DropIntent, from_canonical_json, to_canonical_tree
from engine.kernel.blocks import BLOCK_DEFINITIONS, default_registry
from engine.kernel.errors import (
    EditorError,
    InvariantViolationError,
    NotFoundError,
    ParentNotFoundError,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/documents", tags=["documents"])
document_repo = DocumentRepo()


# ── helpers ─────────────────────────────────────────────────────────────────


def _error_status(error: EditorError) -> int:
    if isinstance(error, (NotFoundError, ParentNotFoundError)):
        return status.HTTP_404_NOT_FOUND
    if isinstance(error, InvariantViolationError):
        return status.HTTP_500_INTERNAL_SERVER_ERROR
    return status.HTTP_422_UNPROCESSABLE_ENTITY


def _raise_for(error: EditorError) -> None:
    if isinstance(error, InvariantViolationError):
        logger.error("Invariant violation: %s", error.violations)
    raise HTTPException(status_code=_error_status(error), detail=error.to_dict())


def _session_or_404(doc_id: str) -> DocumentSession:
    session = document_repo.get(doc_id)
    if session is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Document not found.")
    return session


def _respond(session: DocumentSession, result: CommandResult | None = None) -> DocumentResponse:
    if result is not None and result.error is not None:
        _raise_for(result.error)
    editor = session.editor
    return DocumentResponse(
        id=session.id,
        document=to_canonical_tree(editor.document),
        can_undo=editor.can_undo,
        can_redo=editor.can_redo,
        block_id=result.block_id if result is not None else None,
    )


# ── sessions ────────────────────────────────────────────────────────────────


@router.post("", status_code=201)
async def create_document(req: CreateDocumentRequest) -> DocumentResponse:
    """Open an editor session, empty or from a canonical JSON tree."""
    document = None
    if req.document is not None:
        try:
            document = from_canonical_json(req.document)
        except InvariantViolationError as exc:
            # Bad input from the client, not a server bug
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=exc.to_dict()) from exc
    try:
        session = document_repo.create(document)
    except SessionLimitReached as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    return _respond(session)


@router.get("/catalog", status_code=200)
async def get_catalog() -> list[BlockDefinition]:
    """Block types offered by the sidebar."""
    registry = default_registry()
    return [
        BlockDefinition(**definition, container=registry.can_have_children(definition["type"]))
        for definition in BLOCK_DEFINITIONS
    ]


@router.get("/{doc_id}", status_code=200)
async def get_document(doc_id: str) -> DocumentResponse:
    return _respond(_session_or_404(doc_id))


@router.delete("/{doc_id}", status_code=204)
async def delete_document(doc_id: str) -> Response:
    if not document_repo.delete(doc_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Document not found.")
    return Response(status_code=204)


@router.get("/{doc_id}/html", status_code=200)
async def export_html(doc_id: str, title: str = "") -> HTMLResponse:
    """Full HTML email for sending or download."""
    session = _session_or_404(doc_id)
    return HTMLResponse(session.editor.render_document(title=title))


@router.get("/{doc_id}/json", status_code=200)
async def export_json(doc_id: str) -> Response:
    """Canonical JSON for persistence, byte-stable."""
    session = _session_or_404(doc_id)
    return Response(content=session.editor.to_canonical_json(), media_type="application/json")


# ── block commands ──────────────────────────────────────────────────────────


@router.post("/{doc_id}/blocks", status_code=201)
async def create_block(doc_id: str, req: CreateBlockRequest) -> DocumentResponse:
    session = _session_or_404(doc_id)
    async with session.lock:
        editor = session.editor
        style, props = req.style, req.props
        if req.use_defaults:
            defaults = editor.registry.defaults_for(req.type)
            if defaults is not None:
                props = props if props is not None else defaults[0]
                style = style if style is not None else defaults[1]
        result = editor.create_block(req.parent_id, req.type, style, props, req.index)
        return _respond(session, result)


@router.delete("/{doc_id}/blocks/{block_id}", status_code=200)
async def remove_block(doc_id: str, block_id: str) -> DocumentResponse:
    session = _session_or_404(doc_id)
    async with session.lock:
        return _respond(session, session.editor.remove_block(block_id))


@router.patch("/{doc_id}/blocks/{block_id}/props", status_code=200)
async def update_props(doc_id: str, block_id: str, req: UpdatePayloadRequest) -> DocumentResponse:
    session = _session_or_404(doc_id)
    async with session.lock:
        return _respond(session, session.editor.update_props(block_id, req.payload, merge=req.merge))


@router.patch("/{doc_id}/blocks/{block_id}/style", status_code=200)
async def update_style(doc_id: str, block_id: str, req: UpdatePayloadRequest) -> DocumentResponse:
    session = _session_or_404(doc_id)
    async with session.lock:
        return _respond(session, session.editor.update_style(block_id, req.payload, merge=req.merge))


@router.post("/{doc_id}/blocks/{block_id}/duplicate", status_code=201)
async def duplicate_block(doc_id: str, block_id: str) -> DocumentResponse:
    session = _session_or_404(doc_id)
    async with session.lock:
        return _respond(session, session.editor.duplicate_block(block_id))


@router.post("/{doc_id}/reorder", status_code=200)
async def reorder(doc_id: str, req: ReorderRequest) -> DocumentResponse:
    session = _session_or_404(doc_id)
    async with session.lock:
        return _respond(session, session.editor.reorder(req.parent_id, req.from_index, req.to_index))


@router.post("/{doc_id}/drop", status_code=200)
async def drop(doc_id: str, req: DropRequest) -> DocumentResponse:
    """Apply a drop: new block from the sidebar, or a move of an existing one."""
    session = _session_or_404(doc_id)
    intent = DropIntent(
        container_id=req.container_id,
        index=req.index,
        block_type=req.block_type,
        block_id=req.block_id,
        style=req.style,
        props=req.props,
    )
    async with session.lock:
        return _respond(session, session.editor.drop(intent))


# ── history ─────────────────────────────────────────────────────────────────


@router.post("/{doc_id}/undo", status_code=200)
async def undo(doc_id: str) -> DocumentResponse:
    session = _session_or_404(doc_id)
    async with session.lock:
        return _respond(session, session.editor.undo())


@router.post("/{doc_id}/redo", status_code=200)
async def redo(doc_id: str) -> DocumentResponse:
    session = _session_or_404(doc_id)
    async with session.lock:
        return _respond(session, session.editor.redo())
