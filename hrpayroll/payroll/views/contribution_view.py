# -*- coding: utf-8 -*-
"""Benefit and Deduction endpoints share one viewset body; the subclasses pick the model."""
from __future__ import annotations
from rest_framework import viewsets, status, permissions, mixins
from rest_framework.decorators import action
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, extend_schema_view, OpenApiResponse

from payroll.exceptions import PayrollError
from payroll.models import Benefit, Deduction
from payroll.serializers.common_serializer import ActorSerializer
from payroll.serializers.contribution_serializer import (
    BenefitReadSerializer, BenefitWriteSerializer,
    DeductionReadSerializer, DeductionWriteSerializer,
    CopyFromDefaultSerializer,
)
from payroll.services import benefit_service as svc
from payroll.selectors.contribution_selector import filter_records
from payroll.utils.pagination import DefaultPagination
from payroll.views.utils import PAGE_PARAMS, error_response, q_date, q_int, q_str, std_errors

LIST_PARAMS = PAGE_PARAMS + [
    q_int("employee_id", "One or more employee ids (comma separated)"),
    q_str("cutoff", "1st | 2nd"),
    q_str("is_default", "true | false"),
    q_str("is_posted", "true | false"),
    q_date("date_from", "From date"),
    q_date("date_to", "To date"),
]


class _CutoffRecordViewSet(viewsets.GenericViewSet, mixins.RetrieveModelMixin):
    model = None
    read_serializer = None
    write_serializer = None
    permission_classes = [permissions.AllowAny]
    pagination_class = DefaultPagination

    def get_queryset(self):
        return self.model.objects.all()

    def get_serializer_class(self):
        return self.read_serializer

    def _out(self, obj, code=status.HTTP_200_OK):
        return Response(self.read_serializer(obj).data, status=code)

    def list(self, request):
        qs = filter_records(self.model, request.query_params)
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(self.read_serializer(page, many=True).data)
        return Response(self.read_serializer(qs, many=True).data)

    def create(self, request):
        ser = self.write_serializer(data=request.data)
        ser.is_valid(raise_exception=True)
        try:
            obj = svc.create_record(self.model, **ser.validated_data)
        except PayrollError as e:
            return error_response(e)
        return self._out(obj, status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        ser = self.write_serializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        amounts = {k: v for k, v in ser.validated_data.items() if k in self.model.AMOUNT_FIELDS}
        try:
            obj = svc.update_amounts(self.model, int(pk), actor_id=ser.validated_data.get("actor_id"), **amounts)
        except PayrollError as e:
            return error_response(e)
        return self._out(obj)

    @action(detail=True, methods=["post"], url_path="set-default")
    def set_default(self, request, pk=None):
        ser = ActorSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        try:
            obj = svc.set_default(self.model, int(pk), actor_id=ser.validated_data.get("actor_id"))
        except PayrollError as e:
            return error_response(e)
        return self._out(obj)

    @action(detail=True, methods=["post"], url_path="post")
    def post_record(self, request, pk=None):
        ser = ActorSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        try:
            obj = svc.post_record(self.model, int(pk), actor_id=ser.validated_data.get("actor_id"))
        except PayrollError as e:
            return error_response(e)
        return self._out(obj)

    @action(detail=False, methods=["post"], url_path="copy-from-default")
    def copy_from_default(self, request):
        ser = CopyFromDefaultSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        try:
            obj = svc.copy_from_default(self.model, **ser.validated_data)
        except PayrollError as e:
            return error_response(e)
        if obj is None:
            return Response({"detail": "No default record for this employee.", "code": "no_default",
                             "employee_id": ser.validated_data["employee_id"]}, status=status.HTTP_404_NOT_FOUND)
        return self._out(obj, status.HTTP_201_CREATED)


def _schemas(tag: str, read, write):
    return dict(
        list=extend_schema(tags=[tag], summary=f"List {tag.lower()} records", parameters=LIST_PARAMS,
                           responses={200: read(many=True)}),
        retrieve=extend_schema(tags=[tag], responses={200: read, 404: OpenApiResponse(description="Not found")}),
        create=extend_schema(tags=[tag], summary=f"Create a {tag.lower()} record", request=write,
                             responses={201: read, **std_errors()}),
        partial_update=extend_schema(tags=[tag], summary="Update amounts (not posted only)", request=write,
                                     responses={200: read, **std_errors()}),
        set_default=extend_schema(tags=[tag], summary="Make this the employee's default", request=ActorSerializer,
                                  responses={200: read, **std_errors()}),
        post_record=extend_schema(tags=[tag], summary="Post (read-only afterwards)", request=ActorSerializer,
                                  responses={200: read, **std_errors()}),
        copy_from_default=extend_schema(tags=[tag], summary="Copy the default onto a new cutoff row",
                                        request=CopyFromDefaultSerializer, responses={201: read, **std_errors()}),
    )


@extend_schema_view(**_schemas("Benefit", BenefitReadSerializer, BenefitWriteSerializer))
class BenefitViewSet(_CutoffRecordViewSet):
    model = Benefit
    queryset = Benefit.objects.all()
    read_serializer = BenefitReadSerializer
    write_serializer = BenefitWriteSerializer


@extend_schema_view(**_schemas("Deduction", DeductionReadSerializer, DeductionWriteSerializer))
class DeductionViewSet(_CutoffRecordViewSet):
    model = Deduction
    queryset = Deduction.objects.all()
    read_serializer = DeductionReadSerializer
    write_serializer = DeductionWriteSerializer
