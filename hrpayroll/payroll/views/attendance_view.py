# -*- coding: utf-8 -*-
from __future__ import annotations
from rest_framework import viewsets, status, permissions, mixins
from rest_framework.decorators import action
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, extend_schema_view, OpenApiResponse, inline_serializer
from rest_framework import serializers

from payroll.exceptions import PayrollError
from payroll.models import AttendanceRecord
from payroll.serializers.attendance_serializer import (
    AttendanceRecordReadSerializer,
    AttendanceCreateSerializer,
    AttendanceUpdateSerializer,
)
from payroll.serializers.common_serializer import PeriodFilterSerializer
from payroll.services.attendance_service import (
    create_attendance_record as svc_create,
    update_attendance_record as svc_update,
    recalculate_record as svc_recalculate,
    recalculate_period_metrics as svc_recalculate_period,
)
from payroll.selectors.attendance_selector import filter_records
from payroll.utils.pagination import DefaultPagination
from payroll.views.utils import PAGE_PARAMS, error_response, q_date, q_int, q_str, std_errors


@extend_schema_view(
    list=extend_schema(
        tags=["Attendance"],
        summary="List attendance records",
        parameters=PAGE_PARAMS + [
            q_int("employee_id", "One or more employee ids (comma separated)"),
            q_date("date_from", "From date (inclusive)"),
            q_date("date_to", "To date (inclusive)"),
            q_str("posting_status", "not_posted | posted"),
            q_str("department", "Employee department"),
        ],
        responses={200: AttendanceRecordReadSerializer(many=True)},
    ),
    retrieve=extend_schema(
        tags=["Attendance"],
        summary="Attendance record detail",
        responses={200: AttendanceRecordReadSerializer, 404: OpenApiResponse(description="Not found")},
    ),
    create=extend_schema(
        tags=["Attendance"],
        summary="Create an attendance record",
        description="Late / undertime / hours worked are computed unless given explicitly with a nonzero value.",
        request=AttendanceCreateSerializer,
        responses={201: AttendanceRecordReadSerializer, **std_errors()},
    ),
    partial_update=extend_schema(
        tags=["Attendance"],
        summary="Update an attendance record",
        description="Changing any clock field recomputes the derived metrics. Posted records are read-only.",
        request=AttendanceUpdateSerializer,
        responses={200: AttendanceRecordReadSerializer, **std_errors()},
    ),
)
class AttendanceRecordViewSet(viewsets.GenericViewSet, mixins.RetrieveModelMixin):
    queryset = AttendanceRecord.objects.select_related("employee")
    serializer_class = AttendanceRecordReadSerializer
    permission_classes = [permissions.AllowAny]
    pagination_class = DefaultPagination

    def list(self, request):
        qs = filter_records(request.query_params)
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(AttendanceRecordReadSerializer(page, many=True).data)
        return Response(AttendanceRecordReadSerializer(qs, many=True).data)

    def create(self, request):
        ser = AttendanceCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        try:
            obj = svc_create(**ser.validated_data)
        except PayrollError as e:
            return error_response(e)
        return Response(AttendanceRecordReadSerializer(obj).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        self.get_object()
        ser = AttendanceUpdateSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        try:
            obj = svc_update(record_id=int(pk), **ser.validated_data)
        except PayrollError as e:
            return error_response(e)
        return Response(AttendanceRecordReadSerializer(obj).data)

    @extend_schema(
        tags=["Attendance"],
        summary="Recompute late / undertime / hours worked",
        request=None,
        responses={200: AttendanceRecordReadSerializer, **std_errors()},
    )
    @action(detail=True, methods=["post"], url_path="recalculate")
    def recalculate(self, request, pk=None):
        self.get_object()
        try:
            obj = svc_recalculate(record_id=int(pk))
        except PayrollError as e:
            return error_response(e)
        return Response(AttendanceRecordReadSerializer(obj).data)

    @extend_schema(
        tags=["Attendance"],
        summary="Recompute every not-posted record of a period",
        request=PeriodFilterSerializer,
        responses={200: inline_serializer("RecalculatedCount", {"recalculated": serializers.IntegerField()}),
                   **std_errors()},
    )
    @action(detail=False, methods=["post"], url_path="recalculate-period")
    def recalculate_period(self, request):
        ser = PeriodFilterSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data
        try:
            count = svc_recalculate_period(
                data["year"], data["month"], data["period_type"],
                employee_ids=data.get("employee_ids") or None,
                department=data.get("department") or None,
            )
        except PayrollError as e:
            return error_response(e)
        return Response({"recalculated": count})
