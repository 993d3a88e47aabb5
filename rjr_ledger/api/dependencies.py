"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session
from rjr_ledger.infrastructure.database.session import get_db
from rjr_ledger.infrastructure.drafts.store import DraftStore, SqlDraftStore


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_draft_store(db: Session = Depends(get_db)) -> DraftStore:
    """Provide the draft store bound to the request's session"""
    return SqlDraftStore(db)
