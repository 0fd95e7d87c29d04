"""Tests for the in-memory session repository and service settings."""

from __future__ import annotations

import logging

import pytest

from backend.config import settings
from backend.logging_config import setup_logging
from backend.repos.document_repo import DocumentRepo, SessionLimitReached
from engine.kernel import Document


class TestDocumentRepo:
    def test_create_and_get(self):
        repo = DocumentRepo(max_sessions=5)
        session = repo.create()
        assert repo.get(session.id) is session
        assert len(repo) == 1

    def test_editor_follows_settings(self):
        session = DocumentRepo(max_sessions=5).create()
        assert session.editor.document.root.type == settings.EDITOR_ROOT_TYPE
        assert session.editor.allocator.strategy == settings.EDITOR_ID_STRATEGY

    def test_create_from_document(self):
        doc = Document.empty("Container")
        session = DocumentRepo(max_sessions=5).create(doc)
        assert session.editor.document is doc

    def test_ids_unique(self):
        repo = DocumentRepo(max_sessions=5)
        assert repo.create().id != repo.create().id

    def test_limit(self):
        repo = DocumentRepo(max_sessions=1)
        repo.create()
        with pytest.raises(SessionLimitReached):
            repo.create()

    def test_delete(self):
        repo = DocumentRepo(max_sessions=5)
        session = repo.create()
        assert repo.delete(session.id) is True
        assert repo.get(session.id) is None
        assert repo.delete(session.id) is False

    def test_open_logs(self, caplog):
        with caplog.at_level(logging.INFO, logger="backend.repos.document_repo"):
            session = DocumentRepo(max_sessions=5).create()
        assert session.id in caplog.text


class TestSettings:
    def test_defaults(self):
        assert settings.EDITOR_ID_STRATEGY in ("counter", "uuid")
        assert settings.EDITOR_HISTORY_LIMIT >= 0
        assert settings.EDITOR_MAX_SESSIONS > 0


class TestLogging:
    def test_unknown_level_name_falls_back(self):
        # basicConfig is a no-op once handlers exist; only the level parsing is checked
        setup_logging("NOT_A_LEVEL")
        setup_logging("debug")
        setup_logging(logging.WARNING)
