# -*- coding: utf-8 -*-
from __future__ import annotations
from rest_framework import viewsets, status, permissions, mixins
from rest_framework.decorators import action
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, extend_schema_view, OpenApiResponse
from drf_spectacular.types import OpenApiTypes

from payroll.exceptions import PayrollError
from payroll.models import PeriodSummary
from payroll.serializers.common_serializer import ActorSerializer, PeriodFilterSerializer, PostingSerializer
from payroll.serializers.summary_serializer import PeriodSummaryReadSerializer, SummaryGenerateSerializer
from payroll.services.summary_service import (
    generate_period_summary as svc_generate,
    post_period_summary as svc_post,
    lock_period_summary as svc_lock,
    preview_posting as svc_preview,
    post_attendance_to_payroll as svc_post_batch,
)
from payroll.selectors._normalize import as_int_list
from payroll.selectors.summary_selector import filter_summaries, period_statistics
from payroll.utils.pagination import DefaultPagination
from payroll.views.utils import PAGE_PARAMS, PERIOD_PARAMS, error_response, q_int, q_str, std_errors


def _period_query(request) -> dict:
    ser = PeriodFilterSerializer(data={
        "year": request.query_params.get("year"),
        "month": request.query_params.get("month"),
        "period_type": request.query_params.get("period_type"),
        "department": request.query_params.get("department") or "",
    })
    ser.is_valid(raise_exception=True)
    return ser.validated_data


@extend_schema_view(
    list=extend_schema(
        tags=["Period summary"],
        summary="List period summaries",
        parameters=PAGE_PARAMS + [
            q_int("employee_id", "One or more employee ids (comma separated)"),
            q_int("year", "Year"),
            q_int("month", "Month"),
            q_str("period_type", "1st_half | 2nd_half"),
            q_str("status", "draft | posted | locked (comma separated)"),
            q_str("department", "Department"),
        ],
        responses={200: PeriodSummaryReadSerializer(many=True)},
    ),
    retrieve=extend_schema(
        tags=["Period summary"],
        summary="Period summary detail",
        responses={200: PeriodSummaryReadSerializer, 404: OpenApiResponse(description="Not found")},
    ),
)
class PeriodSummaryViewSet(viewsets.GenericViewSet, mixins.RetrieveModelMixin):
    queryset = PeriodSummary.objects.select_related("employee")
    serializer_class = PeriodSummaryReadSerializer
    permission_classes = [permissions.AllowAny]
    pagination_class = DefaultPagination

    def list(self, request):
        qs = filter_summaries(request.query_params)
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(PeriodSummaryReadSerializer(page, many=True).data)
        return Response(PeriodSummaryReadSerializer(qs, many=True).data)

    @extend_schema(
        tags=["Period summary"],
        summary="Generate (or regenerate a draft) summary for one employee",
        request=SummaryGenerateSerializer,
        responses={201: PeriodSummaryReadSerializer, **std_errors()},
    )
    @action(detail=False, methods=["post"], url_path="generate")
    def generate(self, request):
        ser = SummaryGenerateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data
        try:
            obj = svc_generate(data["employee_id"], data["year"], data["month"], data["period_type"],
                               actor_id=data.get("actor_id"))
        except PayrollError as e:
            return error_response(e)
        return Response(PeriodSummaryReadSerializer(obj).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        tags=["Period summary"],
        summary="Post a draft summary",
        description="draft -> posted; the contributing attendance records become posted too.",
        request=ActorSerializer,
        responses={200: PeriodSummaryReadSerializer, **std_errors()},
    )
    @action(detail=True, methods=["post"], url_path="post")
    def post_summary(self, request, pk=None):
        ser = ActorSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        try:
            obj = svc_post(int(pk), ser.validated_data.get("actor_id"))
        except PayrollError as e:
            return error_response(e)
        return Response(PeriodSummaryReadSerializer(obj).data)

    @extend_schema(
        tags=["Period summary"],
        summary="Lock a posted summary",
        request=ActorSerializer,
        responses={200: PeriodSummaryReadSerializer, **std_errors()},
    )
    @action(detail=True, methods=["post"], url_path="lock")
    def lock(self, request, pk=None):
        ser = ActorSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        try:
            obj = svc_lock(int(pk), ser.validated_data.get("actor_id"))
        except PayrollError as e:
            return error_response(e)
        return Response(PeriodSummaryReadSerializer(obj).data)

    @extend_schema(
        tags=["Period summary"],
        summary="Preview a batch posting (no writes)",
        parameters=PERIOD_PARAMS + [q_int("employee_id", "Restrict to employee ids (comma separated)")],
        responses={200: OpenApiResponse(OpenApiTypes.OBJECT), **std_errors()},
    )
    @action(detail=False, methods=["get"], url_path="preview")
    def preview(self, request):
        data = _period_query(request)
        try:
            result = svc_preview(data["year"], data["month"], data["period_type"],
                                 employee_ids=as_int_list(request.query_params.get("employee_id")) or None,
                                 department=data.get("department") or None)
        except PayrollError as e:
            return error_response(e)
        return Response(result)

    @extend_schema(
        tags=["Period summary"],
        summary="Post a period's attendance to payroll",
        description="Generates and posts one summary per employee with unposted attendance. "
                    "Employees whose summary is already posted/locked are listed under `errors`.",
        request=PostingSerializer,
        responses={200: OpenApiResponse(OpenApiTypes.OBJECT), **std_errors()},
    )
    @action(detail=False, methods=["post"], url_path="post-batch")
    def post_batch(self, request):
        ser = PostingSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data
        try:
            result = svc_post_batch(data["year"], data["month"], data["period_type"],
                                    actor_id=data.get("actor_id"),
                                    employee_ids=data.get("employee_ids") or None,
                                    department=data.get("department") or None)
        except PayrollError as e:
            return error_response(e)
        return Response(result)

    @extend_schema(
        tags=["Period summary"],
        summary="Period statistics",
        parameters=PERIOD_PARAMS,
        responses={200: OpenApiResponse(OpenApiTypes.OBJECT), **std_errors()},
    )
    @action(detail=False, methods=["get"], url_path="statistics")
    def statistics(self, request):
        data = _period_query(request)
        try:
            stats = period_statistics(data["year"], data["month"], data["period_type"], data.get("department"))
        except PayrollError as e:
            return error_response(e)
        return Response(stats)
