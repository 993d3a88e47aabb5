"""Ledger entry endpoints: register payments and delete documents through their entries"""

import time
import uuid
import logging
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from rjr_ledger.api.v1.schemas import PaymentRequest, PaymentResponse
from rjr_ledger.api.dependencies import get_request_id
from rjr_ledger.config import settings
from rjr_ledger.infrastructure.database.session import get_db
from rjr_ledger.infrastructure.database.repositories import (
    AuditRepository,
    DocumentRepository,
    EntryRepository,
    to_domain_entry,
)
from rjr_ledger.domain.exceptions import IntegrityViolationError, InvalidPaymentError
from rjr_ledger.domain.payments import apply_payment, ensure_can_delete
from rjr_ledger.infrastructure.observability.logging import log_payment
from rjr_ledger.infrastructure.observability.metrics import record_payment
from rjr_ledger.utils.date_utils import today_in

router = APIRouter()


def _parse_entry_id(entry_id: str) -> uuid.UUID:
    try:
        return uuid.UUID(entry_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid entry ID format")


@router.post("/entries/{entry_id}/payments", response_model=PaymentResponse, status_code=201)
def register_payment(
    entry_id: str,
    body: PaymentRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    """
    Register a (possibly partial) payment against a down payment or installment.

    Payment date defaults to today in the company timezone.
    """
    start_time = time.time()
    request_id = get_request_id(request)
    entry_repo = EntryRepository(db)

    row = entry_repo.get_entry_by_id(_parse_entry_id(entry_id))
    if not row:
        raise HTTPException(status_code=404, detail="Entry not found")

    entry = to_domain_entry(row)
    audit = AuditRepository(db)
    try:
        updated = apply_payment(entry, body.paid_amount)
        payment = entry_repo.record_payment(
            row,
            updated,
            amount=updated.paid_amount - entry.paid_amount,
            payment_date=body.payment_date or today_in(settings.timezone),
            payment_method=body.payment_method,
            notes=body.notes,
        )
        audit.log_action(
            "register_payment_success",
            {
                "entry_id": entry_id,
                "payment_id": str(payment.id),
                "paid_amount": str(payment.paid_amount),
                "payment_method": body.payment_method,
            },
        )
        db.commit()

    except InvalidPaymentError as e:
        db.rollback()
        audit.log_action(
            "register_payment_failed",
            {"entry_id": entry_id, "error": str(e), "paid_amount": str(body.paid_amount)},
        )
        db.commit()
        logging.warning(f"Rejected payment: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    duration_ms = (time.time() - start_time) * 1000
    record_payment(updated.status.value, float(payment.paid_amount))
    log_payment(request_id, entry_id, str(payment.paid_amount), updated.status.value, duration_ms)

    return PaymentResponse(
        payment_id=str(payment.id),
        entry_id=entry_id,
        paid_amount=payment.paid_amount,
        entry_status=updated.status,
        amount_balance=updated.amount_balance,
        message="Payment registered",
    )


@router.delete("/entries/{entry_id}", status_code=204)
def delete_document_by_entry(
    entry_id: str,
    request: Request,
    db: Session = Depends(get_db),
):
    """
    Delete the whole document through its down payment (0) or single 1/1 entry.

    Refused with 409 for individual installments or when payments exist.
    """
    request_id = get_request_id(request)
    row = EntryRepository(db).get_entry_by_id(_parse_entry_id(entry_id))
    if not row:
        raise HTTPException(status_code=404, detail="Entry not found")

    document_repo = DocumentRepository(db)
    document = row.document
    try:
        ensure_can_delete(to_domain_entry(row), document_repo.paid_total(document))
    except IntegrityViolationError as e:
        logging.warning(f"Delete refused: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=409, detail=str(e))

    document_id = str(document.id)
    document_repo.delete_document(document)
    AuditRepository(db).log_action("document_deleted", {"document_id": document_id, "entry_id": entry_id})
    db.commit()
    logging.info("Document deleted", extra={"request_id": request_id, "document_id": document_id})
