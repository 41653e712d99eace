# -*- coding: utf-8 -*-
"""
Approval / status state machine for FinalPayroll.

    approval_status: pending -> approved | rejected      (both terminal)
    status:          draft -> finalized -> paid          (finalize needs approval_status=approved)

Editable = draft + pending. Every transition records actor + timestamp and writes an audit row.
Also holds the pure approver-chain helper for staged requests.
"""
from __future__ import annotations
from typing import Optional
import logging

from django.db import models, transaction

from payroll.exceptions import InvalidStateError, RecordNotFoundError
from payroll.models import FinalPayroll
from payroll.repositories import payroll_repository as repo
from payroll.services.audit_service import log_action, snapshot

logger = logging.getLogger(__name__)

STATE_FIELDS = ("status", "approval_status", "approved_by", "approved_at", "finalized_by", "finalized_at",
                "paid_by", "paid_at", "approval_remarks")


class Role(models.TextChoices):
    DEPARTMENT_MANAGER = "department_manager", "Department manager"
    HRD_MANAGER = "hrd_manager", "HRD manager"


class ApprovalStage(models.TextChoices):
    PENDING = "pending", "Pending"
    MANAGER_APPROVED = "manager_approved", "Approved by manager"
    APPROVED = "approved", "Approved"
    REJECTED = "rejected", "Rejected"


def current_approver(stage) -> Optional[str]:
    """Who must act next on a two-step request (overtime, travel order...). None once decided."""
    if stage == ApprovalStage.PENDING:
        return Role.DEPARTMENT_MANAGER
    if stage == ApprovalStage.MANAGER_APPROVED:
        return Role.HRD_MANAGER
    return None


def next_payroll_action(payroll: FinalPayroll) -> Optional[str]:
    if payroll.can_be_approved:
        return "approve"
    if payroll.can_be_finalized:
        return "finalize"
    if payroll.can_be_marked_paid:
        return "mark_paid"
    return None


# ====== guards ======
def _refuse(payroll: FinalPayroll, operation: str, requirement: str) -> None:
    raise InvalidStateError(
        f"Cannot {operation} payroll #{payroll.id} ({payroll.employee_name}, {payroll.full_period}): "
        f"{requirement}; it is {payroll.status}/{payroll.approval_status}.",
        payroll_id=payroll.id, employee_id=payroll.employee_id, operation=operation,
        status=payroll.status, approval_status=payroll.approval_status,
    )

def ensure_editable(payroll: FinalPayroll, operation: str = "edit") -> None:
    if not payroll.is_editable:
        _refuse(payroll, operation, "only draft payrolls pending approval can be changed")

def get_payroll(payroll_id: int, *, lock: bool = False) -> FinalPayroll:
    try:
        return repo.get_for_update(payroll_id) if lock else repo.get_by_id(payroll_id)
    except FinalPayroll.DoesNotExist:
        raise RecordNotFoundError(f"Final payroll #{payroll_id} does not exist.", payroll_id=payroll_id)


def _transition(payroll_id: int, actor_id, action: str, allowed: str, requirement: str, apply) -> FinalPayroll:
    payroll = get_payroll(payroll_id, lock=True)
    if not getattr(payroll, allowed):
        _refuse(payroll, action, requirement)
    before = snapshot(payroll, *STATE_FIELDS)
    apply(payroll)
    repo.save(payroll, list(STATE_FIELDS))
    log_action(actor=actor_id, action=action, object_type="final_payroll", object_id=payroll.id,
               before=before, after=snapshot(payroll, *STATE_FIELDS))
    logger.info("[payroll] %s id=%s by %s -> %s/%s", action, payroll.id, actor_id,
                payroll.status, payroll.approval_status)
    return payroll


@transaction.atomic
def approve_final_payroll(payroll_id: int, actor_id, remarks: str = "") -> FinalPayroll:
    return _transition(payroll_id, actor_id, "approve", "can_be_approved",
                       "approval needs a draft payroll pending approval",
                       lambda p: p.approve(actor_id, remarks))

@transaction.atomic
def reject_final_payroll(payroll_id: int, actor_id, remarks: str = "") -> FinalPayroll:
    return _transition(payroll_id, actor_id, "reject", "can_be_approved",
                       "rejection needs a draft payroll pending approval",
                       lambda p: p.reject(actor_id, remarks))

@transaction.atomic
def finalize_final_payroll(payroll_id: int, actor_id) -> FinalPayroll:
    return _transition(payroll_id, actor_id, "finalize", "can_be_finalized",
                       "finalizing needs an approved draft",
                       lambda p: p.finalize(actor_id))

@transaction.atomic
def mark_paid(payroll_id: int, actor_id) -> FinalPayroll:
    return _transition(payroll_id, actor_id, "mark_paid", "can_be_marked_paid",
                       "only finalized payrolls can be marked paid",
                       lambda p: p.mark_paid(actor_id))
