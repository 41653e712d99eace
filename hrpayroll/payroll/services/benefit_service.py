# -*- coding: utf-8 -*-
"""
Service for Benefit / Deduction cutoff records.

- Period lookup used by summary generation (non-default rows only)
- One default template per employee and kind; ``copy_from_default`` stamps it onto a new period row
- Posted rows are read-only
"""
from __future__ import annotations
from datetime import date
from typing import Any, Optional, Type
import logging

from django.db import transaction
from django.utils.dateparse import parse_date

from payroll.exceptions import InvalidStateError, PayrollValidationError, RecordNotFoundError
from payroll.models import Benefit, Deduction, Cutoff, Employee
from payroll.models.contributions import CutoffRecord
from payroll.repositories import contribution_repository as repo
from payroll.services.audit_service import log_action, snapshot

logger = logging.getLogger(__name__)

KINDS = {"benefit": Benefit, "deduction": Deduction}


def model_for(kind: str) -> Type[CutoffRecord]:
    try:
        return KINDS[kind]
    except KeyError:
        raise PayrollValidationError(f"Unknown record kind {kind!r}; expected one of {', '.join(KINDS)}.", kind=kind)

def _kind(model: Type[CutoffRecord]) -> str:
    return model.__name__.lower()

def _get(model: Type[CutoffRecord], record_id: int, *, lock: bool = False) -> CutoffRecord:
    try:
        return repo.get_for_update(model, record_id) if lock else repo.get_by_id(model, record_id)
    except model.DoesNotExist:
        raise RecordNotFoundError(f"{model.__name__} #{record_id} does not exist.", record_id=record_id)

def _ensure_not_posted(obj: CutoffRecord) -> None:
    if obj.is_posted:
        raise InvalidStateError(
            f"{type(obj).__name__} #{obj.id} was posted on {obj.date_posted} and can no longer change.",
            record_id=obj.id, employee_id=obj.employee_id,
        )

def _clean_amounts(model: Type[CutoffRecord], amounts: dict) -> dict:
    unknown = set(amounts) - set(model.AMOUNT_FIELDS)
    if unknown:
        raise PayrollValidationError(f"Unknown {_kind(model)} fields: {', '.join(sorted(unknown))}.")
    return amounts

def _as_date(value) -> date:
    d = parse_date(value) if isinstance(value, str) else value
    if d is None:
        raise PayrollValidationError("date is required.")
    return d


# ====== lookups (used by period summaries) ======
def lookup_benefit(employee_id: int, cutoff: str, year: int, month: int) -> Optional[Benefit]:
    return repo.find_for_period(Benefit, employee_id, cutoff, year, month)

def lookup_deduction(employee_id: int, cutoff: str, year: int, month: int) -> Optional[Deduction]:
    return repo.find_for_period(Deduction, employee_id, cutoff, year, month)


# ====== maintenance ======
@transaction.atomic
def create_record(model: Type[CutoffRecord], *, employee_id: int, cutoff: str, date, actor_id=None,
                  is_default: bool = False, **amounts: Any) -> CutoffRecord:
    if cutoff not in Cutoff.values:
        raise PayrollValidationError(f"cutoff must be one of {', '.join(Cutoff.values)}.", cutoff=cutoff)
    if not Employee.objects.filter(id=employee_id).exists():
        raise PayrollValidationError(f"Employee #{employee_id} does not exist.", employee_id=employee_id)
    if is_default:
        repo.clear_defaults(model, employee_id)
    obj = repo.create(model, {
        "employee_id": employee_id, "cutoff": cutoff, "date": _as_date(date),
        "is_default": bool(is_default), **_clean_amounts(model, amounts),
    })
    log_action(actor=actor_id, action="create", object_type=_kind(model), object_id=obj.id,
               after=snapshot(obj, "cutoff", "date", "is_default", *model.AMOUNT_FIELDS))
    return obj

@transaction.atomic
def update_amounts(model: Type[CutoffRecord], record_id: int, *, actor_id=None, **amounts: Any) -> CutoffRecord:
    obj = _get(model, record_id, lock=True)
    _ensure_not_posted(obj)
    _clean_amounts(model, amounts)
    before = snapshot(obj, *amounts)
    for k, v in amounts.items():
        setattr(obj, k, v)
    if amounts:
        obj.save(update_fields=list(amounts) + ["updated_at"])
    log_action(actor=actor_id, action="update", object_type=_kind(model), object_id=obj.id,
               before=before, after=snapshot(obj, *amounts))
    return obj

@transaction.atomic
def set_default(model: Type[CutoffRecord], record_id: int, *, actor_id=None) -> CutoffRecord:
    obj = _get(model, record_id, lock=True)
    cleared = repo.clear_defaults(model, obj.employee_id, exclude_id=obj.id)
    if not obj.is_default:
        obj.is_default = True
        obj.save(update_fields=["is_default", "updated_at"])
    log_action(actor=actor_id, action="set_default", object_type=_kind(model), object_id=obj.id,
               after={"is_default": True, "cleared": cleared})
    logger.info("[payroll] %s #%s is now the default for employee_id=%s (cleared %s)",
                _kind(model), obj.id, obj.employee_id, cleared)
    return obj

@transaction.atomic
def copy_from_default(model: Type[CutoffRecord], *, employee_id: int, cutoff: str, date, actor_id=None) -> Optional[CutoffRecord]:
    """New non-default row for the cutoff/date with the employee's latest default amounts; None without a default."""
    template = repo.latest_default(model, employee_id)
    if template is None:
        return None
    return create_record(model, employee_id=employee_id, cutoff=cutoff, date=date,
                         actor_id=actor_id, is_default=False, **template.amounts())

@transaction.atomic
def post_record(model: Type[CutoffRecord], record_id: int, *, actor_id=None) -> CutoffRecord:
    obj = _get(model, record_id, lock=True)
    _ensure_not_posted(obj)
    obj.mark_posted()
    obj.save(update_fields=["is_posted", "date_posted", "updated_at"])
    log_action(actor=actor_id, action="post", object_type=_kind(model), object_id=obj.id,
               before={"is_posted": False}, after=snapshot(obj, "is_posted", "date_posted"))
    return obj
