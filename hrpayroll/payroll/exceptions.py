# -*- coding: utf-8 -*-
"""
Domain errors for the payroll pipeline.

Every business-rule refusal maps to one of these. Each carries a short machine
``code`` and a ``context`` dict (employee, period, current state...) so callers
can explain exactly which rule blocked the operation.
"""
from __future__ import annotations
from typing import Any, Dict, Optional


class PayrollError(Exception):
    code = "payroll_error"

    def __init__(self, message: str, *, code: Optional[str] = None, **context: Any):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.context: Dict[str, Any] = context

    def as_dict(self) -> Dict[str, Any]:
        data = {"detail": self.message, "code": self.code}
        data.update({k: v for k, v in self.context.items() if v is not None})
        return data

    def __str__(self) -> str:
        return self.message


class PayrollValidationError(PayrollError):
    code = "validation_error"


class RecordNotFoundError(PayrollValidationError):
    code = "not_found"


class MissingSummaryError(RecordNotFoundError):
    code = "missing_summary"


class DuplicateRecordError(PayrollError):
    code = "duplicate"


class InvalidStateError(PayrollError):
    code = "invalid_state"


class LockedError(InvalidStateError):
    code = "locked"


class MetricsComputationError(ValueError):
    """Unparseable time input. Caught by the time-metrics calculator and defaulted to 0."""
