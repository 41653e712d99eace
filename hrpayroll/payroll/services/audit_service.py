# -*- coding: utf-8 -*-
"""
Audit trail for payroll mutations.

Every state change on summaries, final payrolls and benefit/deduction rows writes one
AuditLog row: who (actor id), what (action + object type/id) and the before/after
values of the fields that changed. Snapshots are JSON-ready (Decimals and dates as strings).
"""
from __future__ import annotations
from typing import Any, Dict, Optional

from payroll.models import AuditLog


def log_action(*, actor: Optional[int], action: str, object_type: str, object_id,
               before: Optional[Dict[str, Any]] = None, after: Optional[Dict[str, Any]] = None) -> AuditLog:
    return AuditLog.objects.create(
        actor=actor,
        action=action,
        object_type=object_type,
        object_id=str(object_id),
        before=before,
        after=after,
    )


def snapshot(obj, *fields: str) -> Dict[str, Any]:
    """``{field: value}`` for the named attributes of ``obj``, JSON-safe."""
    return {name: _jsonable(getattr(obj, name, None)) for name in fields}

def _jsonable(value):
    if value is None or isinstance(value, (bool, int, str)):
        return value
    if hasattr(value, "isoformat"):
        return value.isoformat()
    # Decimal keeps its scale ("5000.00")
    return str(value)
