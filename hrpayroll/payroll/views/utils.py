# views/utils.py
"""
Shared tooling for the payroll viewsets:
- drf-spectacular parameter / response helpers
- PayrollError -> HTTP response mapping
"""
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, inline_serializer
from drf_spectacular.types import OpenApiTypes
from rest_framework import serializers, status
from rest_framework.response import Response

from payroll.exceptions import (
    DuplicateRecordError, InvalidStateError, PayrollError, RecordNotFoundError,
)

# ---- Reusable error schema
ErrorSerializer = inline_serializer(
    name="PayrollError",
    fields={"detail": serializers.CharField(), "code": serializers.CharField()},
)

# ---- Param helpers

def q_int(name: str, description: str, required: bool = False):
    return OpenApiParameter(name, OpenApiTypes.INT, OpenApiParameter.QUERY, required=required, description=description)

def q_str(name: str, description: str, required: bool = False):
    return OpenApiParameter(name, OpenApiTypes.STR, OpenApiParameter.QUERY, required=required, description=description)

def q_date(name: str, description: str, required: bool = False):
    return OpenApiParameter(name, OpenApiTypes.DATE, OpenApiParameter.QUERY, required=required, description=description)

PAGE_PARAMS = [
    q_int("page", "Page number (default 1)"),
    q_int("page_size", "Page size (default 20, max 200)"),
]

PERIOD_PARAMS = [
    q_int("year", "Year", required=True),
    q_int("month", "Month 1-12", required=True),
    q_str("period_type", "1st_half | 2nd_half", required=True),
    q_str("department", "Department filter"),
]

# ---- Convenience for common responses

def std_errors(extra: dict | None = None):
    errs = {
        400: OpenApiResponse(ErrorSerializer, description="Validation error"),
        404: OpenApiResponse(ErrorSerializer, description="Not found"),
        409: OpenApiResponse(ErrorSerializer, description="Duplicate or invalid state"),
    }
    if extra:
        errs.update(extra)
    return errs

def error_status(ex: PayrollError) -> int:
    if isinstance(ex, RecordNotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(ex, (DuplicateRecordError, InvalidStateError)):
        return status.HTTP_409_CONFLICT
    return status.HTTP_400_BAD_REQUEST

def error_response(ex: PayrollError) -> Response:
    return Response(ex.as_dict(), status=error_status(ex))
