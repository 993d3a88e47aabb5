"""Key-value persistence for auto-saved form drafts"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rjr_ledger.domain.form_state import FinancialFormState
from rjr_ledger.infrastructure.database.models import FormDraft

logger = logging.getLogger(__name__)


class DraftStore(ABC):
    """
    Storage behind the form auto-save.

    Implementations only move JSON dicts around; conversion to and from
    FinancialFormState happens here so the domain never sees storage.
    """

    @abstractmethod
    def _read(self, key: str) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    def _write(self, key: str, payload: Dict[str, Any]) -> None:
        ...

    @abstractmethod
    def _delete(self, key: str) -> None:
        ...

    def load(self, key: str, default: Optional[FinancialFormState] = None) -> Optional[FinancialFormState]:
        """Saved state for key, or default when missing or unreadable"""
        try:
            payload = self._read(key)
        except SQLAlchemyError as e:
            logger.error(f"Error loading draft: {e}", extra={"draft_key": key})
            return default
        if payload is None:
            return default
        try:
            return FinancialFormState.from_dict(payload)
        except (KeyError, ValueError, TypeError, ArithmeticError) as e:
            logger.warning(f"Discarding malformed draft: {e}", extra={"draft_key": key})
            return default

    def save(self, key: str, state: FinancialFormState) -> None:
        self._write(key, state.to_dict())

    def clear(self, key: str) -> None:
        self._delete(key)


class InMemoryDraftStore(DraftStore):
    """Process-local store, used by tests and single-user tools"""

    def __init__(self):
        self._data: Dict[str, Dict[str, Any]] = {}

    def _read(self, key: str) -> Optional[Dict[str, Any]]:
        return self._data.get(key)

    def _write(self, key: str, payload: Dict[str, Any]) -> None:
        self._data[key] = payload

    def _delete(self, key: str) -> None:
        self._data.pop(key, None)


class SqlDraftStore(DraftStore):
    """Drafts in the form_draft table; caller owns the transaction"""

    def __init__(self, db: Session):
        self.db = db

    def _read(self, key: str) -> Optional[Dict[str, Any]]:
        draft = self.db.get(FormDraft, key)
        return draft.payload if draft else None

    def _write(self, key: str, payload: Dict[str, Any]) -> None:
        draft = self.db.get(FormDraft, key)
        if draft is None:
            self.db.add(FormDraft(key=key, payload=payload))
        else:
            draft.payload = payload
        self.db.flush()

    def _delete(self, key: str) -> None:
        draft = self.db.get(FormDraft, key)
        if draft is not None:
            self.db.delete(draft)
            self.db.flush()
