"""
Repository layer for the editor service.

Session storage lives here and ONLY here.
"""

from backend.repos.document_repo import DocumentRepo, DocumentSession, SessionLimitReached

__all__ = [
    "DocumentRepo",
    "DocumentSession",
    "SessionLimitReached",
]
