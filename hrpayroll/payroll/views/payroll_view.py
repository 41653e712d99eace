# -*- coding: utf-8 -*-
from __future__ import annotations
from rest_framework import viewsets, status, permissions, mixins
from rest_framework.decorators import action
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, extend_schema_view, OpenApiResponse
from drf_spectacular.types import OpenApiTypes

from payroll.exceptions import PayrollError
from payroll.models import FinalPayroll
from payroll.serializers.common_serializer import ActorSerializer, DecisionSerializer, PeriodFilterSerializer
from payroll.serializers.payroll_serializer import (
    FinalPayrollReadSerializer,
    PayrollGenerateSerializer,
    PayrollAdjustSerializer,
)
from payroll.services.payroll_service import (
    generate_final_payroll as svc_generate,
    recalculate_payroll as svc_recalculate,
    adjust_final_payroll as svc_adjust,
)
from payroll.services.approval_service import (
    approve_final_payroll as svc_approve,
    reject_final_payroll as svc_reject,
    finalize_final_payroll as svc_finalize,
    mark_paid as svc_mark_paid,
)
from payroll.selectors.payroll_selector import filter_payrolls, period_statistics
from payroll.utils.pagination import DefaultPagination
from payroll.views.utils import PAGE_PARAMS, PERIOD_PARAMS, error_response, q_int, q_str, std_errors

TAGS = ["Final payroll"]


@extend_schema_view(
    list=extend_schema(
        tags=TAGS,
        summary="List final payrolls",
        parameters=PAGE_PARAMS + [
            q_int("employee_id", "One or more employee ids (comma separated)"),
            q_int("year", "Year"),
            q_int("month", "Month"),
            q_str("period_type", "1st_half | 2nd_half"),
            q_str("status", "draft | finalized | paid (comma separated)"),
            q_str("approval_status", "pending | approved | rejected (comma separated)"),
            q_str("department", "Department"),
        ],
        responses={200: FinalPayrollReadSerializer(many=True)},
    ),
    retrieve=extend_schema(
        tags=TAGS,
        summary="Final payroll detail",
        responses={200: FinalPayrollReadSerializer, 404: OpenApiResponse(description="Not found")},
    ),
)
class FinalPayrollViewSet(viewsets.GenericViewSet, mixins.RetrieveModelMixin):
    queryset = FinalPayroll.objects.all()
    serializer_class = FinalPayrollReadSerializer
    permission_classes = [permissions.AllowAny]
    pagination_class = DefaultPagination

    def list(self, request):
        qs = filter_payrolls(request.query_params)
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(FinalPayrollReadSerializer(page, many=True).data)
        return Response(FinalPayrollReadSerializer(qs, many=True).data)

    def _respond(self, fn, *args, **kwargs):
        try:
            obj = fn(*args, **kwargs)
        except PayrollError as e:
            return error_response(e)
        return Response(FinalPayrollReadSerializer(obj).data)

    @extend_schema(
        tags=TAGS,
        summary="Generate the final payroll from a posted summary",
        request=PayrollGenerateSerializer,
        responses={201: FinalPayrollReadSerializer, **std_errors()},
    )
    @action(detail=False, methods=["post"], url_path="generate")
    def generate(self, request):
        ser = PayrollGenerateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        try:
            obj = svc_generate(ser.validated_data["summary_id"], ser.validated_data.get("actor_id"))
        except PayrollError as e:
            return error_response(e)
        return Response(FinalPayrollReadSerializer(obj).data, status=status.HTTP_201_CREATED)

    @extend_schema(tags=TAGS, summary="Approve", request=DecisionSerializer,
                   responses={200: FinalPayrollReadSerializer, **std_errors()})
    @action(detail=True, methods=["post"], url_path="approve")
    def approve(self, request, pk=None):
        ser = DecisionSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        return self._respond(svc_approve, int(pk), ser.validated_data.get("actor_id"), ser.validated_data["remarks"])

    @extend_schema(tags=TAGS, summary="Reject", request=DecisionSerializer,
                   responses={200: FinalPayrollReadSerializer, **std_errors()})
    @action(detail=True, methods=["post"], url_path="reject")
    def reject(self, request, pk=None):
        ser = DecisionSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        return self._respond(svc_reject, int(pk), ser.validated_data.get("actor_id"), ser.validated_data["remarks"])

    @extend_schema(tags=TAGS, summary="Finalize an approved payroll", request=ActorSerializer,
                   responses={200: FinalPayrollReadSerializer, **std_errors()})
    @action(detail=True, methods=["post"], url_path="finalize")
    def finalize(self, request, pk=None):
        ser = ActorSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        return self._respond(svc_finalize, int(pk), ser.validated_data.get("actor_id"))

    @extend_schema(tags=TAGS, summary="Mark a finalized payroll as paid", request=ActorSerializer,
                   responses={200: FinalPayrollReadSerializer, **std_errors()})
    @action(detail=True, methods=["post"], url_path="mark-paid")
    def mark_paid(self, request, pk=None):
        ser = ActorSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        return self._respond(svc_mark_paid, int(pk), ser.validated_data.get("actor_id"))

    @extend_schema(tags=TAGS, summary="Re-run the calculation", request=ActorSerializer,
                   responses={200: FinalPayrollReadSerializer, **std_errors()})
    @action(detail=True, methods=["post"], url_path="recalculate")
    def recalculate(self, request, pk=None):
        ser = ActorSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        return self._respond(svc_recalculate, int(pk), ser.validated_data.get("actor_id"))

    @extend_schema(
        tags=TAGS,
        summary="Manually adjust input fields",
        description="Only while draft + pending. Marks the payroll as adjusted and recalculates it.",
        request=PayrollAdjustSerializer,
        responses={200: FinalPayrollReadSerializer, **std_errors()},
    )
    @action(detail=True, methods=["patch"], url_path="adjust")
    def adjust(self, request, pk=None):
        ser = PayrollAdjustSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        changes = dict(ser.validated_data)
        actor_id = changes.pop("actor_id", None)
        return self._respond(svc_adjust, int(pk), actor_id, **changes)

    @extend_schema(
        tags=TAGS,
        summary="Period statistics",
        parameters=PERIOD_PARAMS,
        responses={200: OpenApiResponse(OpenApiTypes.OBJECT), **std_errors()},
    )
    @action(detail=False, methods=["get"], url_path="statistics")
    def statistics(self, request):
        ser = PeriodFilterSerializer(data={
            "year": request.query_params.get("year"),
            "month": request.query_params.get("month"),
            "period_type": request.query_params.get("period_type"),
            "department": request.query_params.get("department") or "",
        })
        ser.is_valid(raise_exception=True)
        data = ser.validated_data
        try:
            stats = period_statistics(data["year"], data["month"], data["period_type"], data.get("department"))
        except PayrollError as e:
            return error_response(e)
        return Response(stats)
