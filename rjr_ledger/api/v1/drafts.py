"""Form draft auto-save endpoints"""

import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from rjr_ledger.api.v1.schemas import DraftRequest, DraftResponse
from rjr_ledger.api.dependencies import get_draft_store
from rjr_ledger.domain.form_state import FinancialFormState, apply_down_payment_blur
from rjr_ledger.infrastructure.database.session import get_db
from rjr_ledger.infrastructure.drafts.store import DraftStore

router = APIRouter()


@router.get("/drafts/{key}", response_model=DraftResponse)
def load_draft(key: str, store: DraftStore = Depends(get_draft_store)):
    """Saved form state, or null when nothing (usable) was saved"""
    state = store.load(key)
    return DraftResponse(key=key, state=state.to_dict() if state else None)


@router.put("/drafts/{key}", response_model=DraftResponse)
def save_draft(
    key: str,
    body: DraftRequest,
    store: DraftStore = Depends(get_draft_store),
    db: Session = Depends(get_db),
):
    """
    Save form state.

    The down-payment reconciliation rule runs before saving, so a draft
    never holds installments for a document paid in full.
    """
    try:
        state = apply_down_payment_blur(FinancialFormState.from_dict(body.state))
    except (KeyError, ValueError, TypeError, ArithmeticError) as e:
        raise HTTPException(status_code=422, detail=f"Malformed form state: {e}")

    store.save(key, state)
    db.commit()
    logging.debug("Draft saved", extra={"draft_key": key})
    return DraftResponse(key=key, state=state.to_dict())


@router.delete("/drafts/{key}", status_code=204)
def clear_draft(
    key: str,
    store: DraftStore = Depends(get_draft_store),
    db: Session = Depends(get_db),
):
    store.clear(key)
    db.commit()
