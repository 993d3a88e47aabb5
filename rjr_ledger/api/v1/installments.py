"""Installment schedule endpoints: generate, reconcile, check, edit and rebalance"""

import logging
from typing import List
from fastapi import APIRouter, HTTPException, Request

from rjr_ledger.api.v1.schemas import (
    AmortizationRequest,
    BalanceCheckRequest,
    BalanceCheckResponse,
    DiscrepancySchema,
    InstallmentEditRequest,
    InstallmentSchema,
    RebalanceRequest,
    ReconcileRequest,
    ReconcileResponse,
    ScheduleResponse,
    ValidationErrorSchema,
)
from rjr_ledger.api.dependencies import get_request_id
from rjr_ledger.domain.installments import (
    check_balance,
    edit_installment_amount,
    edit_installment_due_date,
    rebalance_following,
    split_installments,
)
from rjr_ledger.domain.models import AmortizationInput, ScheduleResult, ValidationError
from rjr_ledger.domain.money import to_money
from rjr_ledger.domain.reconciliation import balance_state, reconcile_installments_number
from rjr_ledger.infrastructure.observability.logging import log_schedule
from rjr_ledger.infrastructure.observability.metrics import record_schedule
from rjr_ledger.utils.currency import format_currency

router = APIRouter()


def _reject(errors: List[ValidationError], request_id: str) -> HTTPException:
    logging.warning(
        "Invalid installment input",
        extra={"request_id": request_id, "fields": [e.field for e in errors]},
    )
    return HTTPException(
        status_code=422,
        detail=[ValidationErrorSchema.from_domain(e).model_dump() for e in errors],
    )


def _to_response(data: AmortizationInput, result: ScheduleResult) -> ScheduleResponse:
    balance = to_money(data.total_value) - to_money(data.down_payment)
    return ScheduleResponse(
        balance=balance,
        balance_formatted=format_currency(balance),
        installments=[InstallmentSchema.from_domain(inst) for inst in result.installments],
        discrepancy=DiscrepancySchema.from_domain(result.discrepancy),
        warnings=result.warnings,
    )


@router.post("/installments/schedule", response_model=ScheduleResponse)
def compute_schedule(body: AmortizationRequest, request: Request):
    """
    Split the balance (total - down payment) into monthly installments.

    Pass `existing` in edit mode: user-edited installments still in range are kept.
    """
    request_id = get_request_id(request)
    data = body.to_domain()
    result = split_installments(data, existing=[inst.to_domain() for inst in body.existing])
    record_schedule(result.errors, result.discrepancy)

    if not result.ok:
        raise _reject(result.errors, request_id)

    log_schedule(
        request_id,
        data.installments_number,
        str(data.remaining),
        result.discrepancy is not None,
    )
    return _to_response(data, result)


@router.post("/installments/reconcile", response_model=ReconcileResponse)
def reconcile(body: ReconcileRequest):
    """Installment count after the down payment is finalized"""
    return ReconcileResponse(
        installments_number=reconcile_installments_number(
            body.total_value, body.down_payment, body.installments_number
        ),
        balance_state=balance_state(body.total_value, body.down_payment),
    )


@router.post("/installments/check", response_model=BalanceCheckResponse)
def check(body: BalanceCheckRequest):
    """Report (never fix) a mismatch between hand-edited installments and the balance"""
    discrepancy = check_balance(
        body.total_value,
        body.down_payment,
        [inst.to_domain() for inst in body.installments],
    )
    record_schedule([], discrepancy)
    return BalanceCheckResponse(
        balanced=discrepancy is None,
        discrepancy=DiscrepancySchema.from_domain(discrepancy),
    )


@router.post("/installments/rebalance", response_model=ScheduleResponse)
def rebalance(body: RebalanceRequest, request: Request):
    """Spread what is left after installment `sequence_number` over the following ones"""
    request_id = get_request_id(request)
    data = AmortizationInput(
        total_value=body.total_value,
        down_payment=body.down_payment,
        installments_number=len(body.installments),
        issue_date=body.issue_date,
    )
    result = rebalance_following(
        [inst.to_domain() for inst in body.installments],
        body.sequence_number,
        data,
    )
    if not result.ok:
        raise _reject(result.errors, request_id)
    return _to_response(data, result)


@router.post("/installments/edit", response_model=ScheduleResponse)
def edit(body: InstallmentEditRequest, request: Request):
    """
    Apply a manual amount and/or due date to one installment.

    The edit is accepted as typed; a mismatch with the balance comes back
    in `discrepancy` instead of being corrected.
    """
    request_id = get_request_id(request)
    data = AmortizationInput(
        total_value=body.total_value,
        down_payment=body.down_payment,
        installments_number=len(body.installments),
        issue_date=body.issue_date,
    )
    result = ScheduleResult(installments=[inst.to_domain() for inst in body.installments])

    if body.due_date is not None:
        result = edit_installment_due_date(result.installments, body.sequence_number, body.due_date, body.issue_date)
    if result.ok and body.amount is not None:
        warnings = result.warnings
        result = edit_installment_amount(result.installments, body.sequence_number, body.amount, data)
        result.warnings = warnings + result.warnings
    else:
        result.discrepancy = check_balance(data.total_value, data.down_payment, result.installments)

    if not result.ok:
        raise _reject(result.errors, request_id)
    record_schedule([], result.discrepancy)
    return _to_response(data, result)
