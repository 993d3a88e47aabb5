"""Financial document endpoints: create, fetch and list"""

import uuid
import logging
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from rjr_ledger.api.v1.schemas import DocumentCreateRequest, DocumentListResponse, DocumentResponse, EntrySchema
from rjr_ledger.api.dependencies import get_request_id
from rjr_ledger.config import settings
from rjr_ledger.infrastructure.database.session import get_db
from rjr_ledger.infrastructure.database.models import FinancialDocument
from rjr_ledger.infrastructure.database.repositories import AuditRepository, DocumentRepository
from rjr_ledger.domain.exceptions import BalanceMismatchError, InvalidAmountError
from rjr_ledger.domain.payments import build_document_entries
from rjr_ledger.domain.reconciliation import compute_net_total
from rjr_ledger.infrastructure.observability.metrics import document_counter
from rjr_ledger.utils.currency import amount_in_words, format_currency

router = APIRouter()


def document_to_response(document: FinancialDocument) -> DocumentResponse:
    return DocumentResponse(
        document_id=str(document.id),
        type=document.type,
        document_number=document.document_number,
        counterparty_name=document.counterparty_name,
        description=document.description,
        issue_date=document.issue_date,
        document_value=document.document_value,
        discount=document.discount,
        interest=document.interest,
        total_value=document.total_value,
        total_value_formatted=format_currency(document.total_value),
        total_value_in_words=amount_in_words(document.total_value),
        entries=[
            EntrySchema(
                entry_id=str(entry.id),
                installment_number=entry.installment_number,
                total_installments=entry.total_installments,
                due_date=entry.due_date,
                expected_amount=entry.expected_amount,
                paid_amount=entry.paid_amount,
                amount_balance=entry.expected_amount - entry.paid_amount,
                status=entry.status,
            )
            for entry in document.entries
        ],
        created_at=document.created_at.isoformat(),
    )


@router.post("/documents", response_model=DocumentResponse, status_code=201)
def create_document(
    body: DocumentCreateRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    """
    Create a receivable/payable document with its ledger entries.

    Flow:
    1. Net total = document value - discount + interest
    2. Down payment becomes entry 0, installments entries 1..n
    3. Reject when installments do not add up to the balance
    4. Persist document + entries + audit record
    """
    request_id = get_request_id(request)

    try:
        total_value, applied_discount = compute_net_total(body.document_value, body.discount, body.interest)
        entries = build_document_entries(
            total_value,
            body.down_payment,
            [inst.to_domain() for inst in body.installments],
            body.issue_date,
            body.single_due_date,
        )

        document_repo = DocumentRepository(db)
        db_document = document_repo.create_document(
            header={
                "type": body.type,
                "document_number": body.document_number,
                "counterparty_name": body.counterparty_name,
                "description": body.description,
                "payment_method": body.payment_method,
                "notes": body.notes,
                "issue_date": body.issue_date,
                "document_value": body.document_value,
                "discount": applied_discount,
                "interest": body.interest,
                "total_value": total_value,
            },
            entries=entries,
        )
        AuditRepository(db).log_action(
            "document_created",
            {
                "document_id": str(db_document.id),
                "type": body.type,
                "total_value": str(total_value),
                "entries": len(entries),
            },
        )

        # Rendered before commit: nothing is stored when rendering fails
        response = document_to_response(db_document)
        db.commit()

        document_counter.labels(type=body.type).inc()
        logging.info(
            "Document created",
            extra={"request_id": request_id, "document_id": str(db_document.id), "entries": len(entries)},
        )
        return response

    except (InvalidAmountError, BalanceMismatchError) as e:
        db.rollback()
        logging.warning(f"Rejected document: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/documents/{document_id}", response_model=DocumentResponse)
def get_document(document_id: str, db: Session = Depends(get_db)):
    """Document with its down payment and installments"""
    try:
        document_uuid = uuid.UUID(document_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid document ID format")

    document = DocumentRepository(db).get_document_by_id(document_uuid)
    if not document:
        raise HTTPException(status_code=404, detail="Document not found")

    return document_to_response(document)


@router.get("/documents", response_model=DocumentListResponse)
def list_documents(db: Session = Depends(get_db)):
    """Most recent documents"""
    documents = DocumentRepository(db).list_documents(limit=settings.document_page_size)
    return DocumentListResponse(documents=[document_to_response(d) for d in documents])
